"""Sample message used for path suggestions and expression validation."""

from __future__ import annotations

import json

from pydantic import BaseModel, Field

from .paths import PathSuggestion, suggest_paths_from_value


def _safe_json(text: str) -> object:
    if not text.strip():
        return {}
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return {}


class SampleMessage(BaseModel):
    """A test message: JSON body, JSON headers and a message-type tag."""

    body: object = Field(default_factory=dict)
    headers: object = Field(default_factory=dict)
    message_type: str = ""

    @classmethod
    def from_text(
        cls,
        body_text: str = "",
        headers_text: str = "",
        message_type: str = "",
    ) -> SampleMessage:
        """Build a sample from editor text; unparseable JSON becomes ``{}``."""
        return cls(
            body=_safe_json(body_text),
            headers=_safe_json(headers_text),
            message_type=message_type or "",
        )

    def evaluation_context(self) -> dict[str, object]:
        """Context record handed to the expression validator."""
        metadata: dict[str, object] = {
            "headers": self.headers,
            "message_type": self.message_type,
            "msgType": self.message_type,
            "device": {
                "id": "",
                "serial_number": "",
                "name": "",
                "model_id": "",
                "firmware_version": "",
                "transport": {"type": "", "model_config": {}, "device_config": {}},
                "profile_config": {},
                "credentials": {},
                "attributes": {},
                "data_type_keys": [],
            },
        }
        return {
            "msg": self.body,
            "payload": self.body,
            "metadata": metadata,
            "meta": metadata,
            "headers": self.headers,
            "msgType": self.message_type,
            "message_type": self.message_type,
        }

    def payload_sample(self) -> object:
        """The body when it is an object or array, else the whole evaluation context."""
        if isinstance(self.body, (dict, list)):
            return self.body
        return self.evaluation_context()

    def body_suggestions(self, **limits: int) -> list[PathSuggestion]:
        if self.body == {}:
            return []
        return suggest_paths_from_value(self.body, **limits)
