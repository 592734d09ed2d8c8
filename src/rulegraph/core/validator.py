"""Debounced expression validation with stale-result suppression."""

from __future__ import annotations

import asyncio
import logging
import warnings

from ..models import ExpectedResult, ValidationState
from .hooks import ValidationHook
from .jq_client import JqValidator, ValidationRequest

logger = logging.getLogger(__name__)

DEFAULT_REQUIRED_MESSAGE = "expression is required."
DEFAULT_INVALID_MESSAGE = "Invalid expression."
DEFAULT_FAILURE_MESSAGE = "Failed to validate expression."


class ExpressionValidator:
    """Tracks the validation state of one expression field.

    Every ``submit`` or ``validate`` call starts a new generation. A run only
    publishes its outcome while its generation is still the latest one, so a
    slow answer for old text can never overwrite the state of newer text.

    Error-handling contract
    ----------------------
    - A blank expression fails locally with ``required_message``; the remote
      validator is not called.
    - Transport failures become an ``error`` state with ``failure_message``
      and are logged; they never propagate to the caller.
    - Hook exceptions are swallowed with ``warnings.warn``.
    """

    def __init__(
        self,
        client: JqValidator,
        *,
        key: str = "",
        expected: ExpectedResult | None = None,
        debounce: float = 0.5,
        hooks: list[ValidationHook] | None = None,
        required_message: str = DEFAULT_REQUIRED_MESSAGE,
        invalid_message: str = DEFAULT_INVALID_MESSAGE,
        failure_message: str = DEFAULT_FAILURE_MESSAGE,
    ) -> None:
        self.client = client
        self.key = key
        self.expected = expected
        self.debounce = debounce
        self.hooks: list[ValidationHook] = hooks or []
        self.required_message = required_message
        self.invalid_message = invalid_message
        self.failure_message = failure_message
        self._state = ValidationState.idle()
        self._generation = 0
        self._task: asyncio.Task[ValidationState] | None = None
        self._closed = False

    @property
    def state(self) -> ValidationState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, expression: str, sample: object = None) -> None:
        """Schedule a check of ``expression`` after the debounce window.

        Must be called from a running event loop. A newer submit within the
        window replaces this one.
        """
        if self._closed:
            return
        generation = self._next_generation()
        self._task = asyncio.get_running_loop().create_task(
            self._debounced(expression, sample, generation)
        )

    async def validate(self, expression: str, sample: object = None) -> ValidationState:
        """Check ``expression`` now, superseding any scheduled or running check."""
        if self._closed:
            return self._state
        generation = self._next_generation()
        return await self._check(expression, sample, generation)

    async def wait(self) -> ValidationState:
        """Wait for the scheduled check, if any, and return the current state."""
        task = self._task
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass
        return self._state

    def close(self) -> None:
        """Tear down: pending and in-flight checks are discarded."""
        self._closed = True
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _next_generation(self) -> int:
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        return self._generation

    def _is_current(self, generation: int) -> bool:
        return not self._closed and generation == self._generation

    async def _debounced(self, expression: str, sample: object, generation: int) -> ValidationState:
        if self.debounce > 0:
            await asyncio.sleep(self.debounce)
        return await self._check(expression, sample, generation)

    async def _check(self, expression: str, sample: object, generation: int) -> ValidationState:
        text = expression.strip()
        if not text:
            self._publish(ValidationState.failed(self.required_message))
            return self._state

        self._publish(ValidationState.validating())
        request = ValidationRequest(expression=text, sample=sample, expected=self.expected)
        try:
            result = await self.client.validate(request)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            if not self._is_current(generation):
                logger.debug("discarding stale validation failure for %s", self.key or "expression")
                return self._state
            logger.warning("validation request for %s failed: %s", self.key or "expression", exc)
            self._publish(ValidationState.failed(self.failure_message))
            return self._state

        if not self._is_current(generation):
            logger.debug("discarding stale validation result for %s", self.key or "expression")
            return self._state
        if result.valid:
            self._publish(ValidationState.valid())
        else:
            self._publish(ValidationState.failed(result.error or self.invalid_message))
        return self._state

    def _publish(self, state: ValidationState) -> None:
        self._state = state
        for hook in self.hooks:
            try:
                hook.on_validation_changed(self.key, state)
            except Exception:
                warnings.warn(
                    "rulegraph: hook error in on_validation_changed",
                    stacklevel=2,
                )
