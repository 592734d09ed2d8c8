"""Per-expression validation state."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class ValidationStatus(StrEnum):
    IDLE = "idle"
    VALIDATING = "validating"
    VALID = "valid"
    ERROR = "error"


class ExpectedResult(StrEnum):
    """Result kind an expression must produce, sent along to the validator."""

    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"


class ValidationState(BaseModel):
    """Status of one validated expression. ``error`` is set only in ERROR."""

    model_config = ConfigDict(frozen=True)

    status: ValidationStatus = ValidationStatus.IDLE
    error: str | None = None

    @classmethod
    def idle(cls) -> ValidationState:
        return cls()

    @classmethod
    def validating(cls) -> ValidationState:
        return cls(status=ValidationStatus.VALIDATING)

    @classmethod
    def valid(cls) -> ValidationState:
        return cls(status=ValidationStatus.VALID)

    @classmethod
    def failed(cls, message: str) -> ValidationState:
        return cls(status=ValidationStatus.ERROR, error=message)
