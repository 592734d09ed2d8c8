"""Client for the remote jq validation endpoint."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import httpx
from pydantic import BaseModel, ConfigDict

from ..models import ExpectedResult

VALIDATE_PATH = "/jq/validate"


class ValidationRequest(BaseModel):
    """Body of ``POST /jq/validate``."""

    model_config = ConfigDict(frozen=True)

    expression: str
    sample: object = None
    expected: ExpectedResult | None = None

    def to_payload(self) -> dict[str, object]:
        payload: dict[str, object] = {"expression": self.expression, "sample": self.sample}
        if self.expected is not None:
            payload["expected"] = self.expected.value
        return payload


class ValidationResult(BaseModel):
    model_config = ConfigDict(extra="ignore")

    valid: bool
    error: str | None = None
    result_type: str | None = None


@runtime_checkable
class JqValidator(Protocol):
    """Anything that can check an expression against a sample.

    Implementations raise on transport failure; a rejected expression is
    reported through ``ValidationResult.valid``.
    """

    async def validate(self, request: ValidationRequest) -> ValidationResult: ...


class HttpJqValidator:
    """``JqValidator`` backed by an HTTP service.

    Pass ``client`` to share a connection pool or to inject a test transport;
    otherwise the validator owns its client and ``aclose`` releases it.
    """

    def __init__(
        self,
        base_url: str = "",
        *,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def validate(self, request: ValidationRequest) -> ValidationResult:
        response = await self._client.post(VALIDATE_PATH, json=request.to_payload())
        response.raise_for_status()
        body = response.json()
        # the API wraps responses in {"data": ...}
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            body = body["data"]
        return ValidationResult.model_validate(body)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
