"""Observer protocol for validation state changes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..models import ValidationState


@runtime_checkable
class ValidationHook(Protocol):
    """Receives every state transition of every expression validator.

    ``key`` identifies the validated field, e.g. ``"<node id>:script"``.
    Hook methods must not raise; exceptions are swallowed by the dispatcher.
    """

    def on_validation_changed(self, key: str, state: ValidationState) -> None: ...


class NullHook:
    """No-op hook. Useful as a reference implementation and in tests."""

    def on_validation_changed(self, key: str, state: ValidationState) -> None:
        pass
