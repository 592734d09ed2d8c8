"""Shape checks applied before a node configuration is accepted.

The checks look at the raw object, so legacy aliases are honoured where the
codecs read them. They return human readable messages; an empty list means
the configuration may be saved.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from .base import is_number, trimmed
from .transforms import DeleteKeysCodec, RenameKeysCodec

Checker = Callable[[dict[str, Any]], list[str]]


def _get(config: dict[str, Any], *keys: str) -> Any:
    """Value of the first key that holds something other than null."""
    for key in keys:
        value = config.get(key)
        if value is not None:
            return value
    return None


class _Errors:
    def __init__(self) -> None:
        self.messages: list[str] = []

    def add(self, message: str) -> None:
        self.messages.append(message)

    def _require(self, value: Any, label: str, kind: str, accept: Callable[[Any], bool]) -> None:
        if value is None:
            self.add(f"{label} is required")
        elif not accept(value):
            self.add(f"{label} must be a {kind}")

    def require_string(self, value: Any, label: str) -> None:
        self._require(value, label, "string", lambda item: isinstance(item, str))

    def require_number(self, value: Any, label: str) -> None:
        self._require(value, label, "number", is_number)

    def require_boolean(self, value: Any, label: str) -> None:
        self._require(value, label, "boolean", lambda item: isinstance(item, bool))

    def optional(self, config: dict[str, Any], key: str, kind: str) -> None:
        if key not in config:
            return
        value = config[key]
        accept = {
            "string": lambda item: isinstance(item, str),
            "number": is_number,
            # null and arrays pass, as they do for a JSON "object" type test
            "object": lambda item: item is None or isinstance(item, dict | list),
        }[kind]
        if not accept(value):
            self.add(f"{key} must be {'an' if kind == 'object' else 'a'} {kind}")


def check_timeseries(config: dict[str, Any]) -> list[str]:
    errors = _Errors()
    legacy_only = (
        ("defaultTTL" in config or "processingSettings" in config)
        and not any(
            key in config
            for key in ("deviceIdPath", "device_id_path", "values", "valueMappings", "value_mappings")
        )
    )
    if legacy_only:
        return []
    errors.require_string(_get(config, "deviceIdPath", "device_id_path"), "deviceIdPath")
    use_server_ts = _get(config, "useServerTs", "use_server_ts")
    errors.require_boolean(use_server_ts, "useServerTs")
    if use_server_ts is False:
        errors.require_string(_get(config, "tsPath", "ts_path"), "tsPath")
    values = _get(config, "values", "valueMappings", "value_mappings")
    if values is not None:
        if not isinstance(values, list):
            errors.add("values must be an array")
        else:
            for index, entry in enumerate(values):
                item = entry if isinstance(entry, dict) else {}
                errors.require_string(_get(item, "key"), f"values[{index}].key")
                errors.require_string(
                    _get(item, "valuePath", "value_path", "value"), f"values[{index}].valuePath"
                )
                errors.require_string(
                    _get(item, "valueType", "value_type", "type"), f"values[{index}].valueType"
                )
    return errors.messages


def check_attributes(config: dict[str, Any]) -> list[str]:
    errors = _Errors()
    settings = config.get("processingSettings")
    if not isinstance(settings, dict):
        errors.add("processingSettings is required")
    else:
        errors.require_string(_get(settings, "type"), "processingSettings.type")
    errors.require_string(_get(config, "scope"), "scope")
    errors.require_boolean(_get(config, "notifyDevice"), "notifyDevice")
    errors.require_boolean(
        _get(config, "sendAttributesUpdatedNotification"), "sendAttributesUpdatedNotification"
    )
    errors.require_boolean(
        _get(config, "updateAttributesOnlyOnValueChange"), "updateAttributesOnlyOnValueChange"
    )
    attributes = _get(config, "attributes", "attributeMappings", "attribute_mappings", "fields")
    if attributes is not None:
        if not isinstance(attributes, list):
            errors.add("attributes must be an array")
        else:
            for index, entry in enumerate(attributes):
                item = entry if isinstance(entry, dict) else {}
                errors.require_string(_get(item, "key", "name", "type"), f"attributes[{index}].key")
                errors.require_string(
                    _get(item, "path", "valuePath", "value_path", "value"),
                    f"attributes[{index}].path",
                )
    return errors.messages


def check_message_type_switch(config: dict[str, Any]) -> list[str]:
    if "version" in config and not is_number(config["version"]):
        return ["version must be a number"]
    return []


def check_log(config: dict[str, Any]) -> list[str]:
    errors = _Errors()
    errors.optional(config, "label", "string")
    template = _get(config, "messageTemplate", "message_template", "message", "text")
    if template is not None and not isinstance(template, str):
        errors.add("messageTemplate must be a string")
    return errors.messages


def check_rpc_request(config: dict[str, Any]) -> list[str]:
    errors = _Errors()
    errors.require_number(_get(config, "timeoutInSeconds"), "timeoutInSeconds")
    return errors.messages


def check_script(config: dict[str, Any]) -> list[str]:
    errors = _Errors()
    errors.require_string(_get(config, "script"), "script")
    return errors.messages


def check_message_type_filter(config: dict[str, Any]) -> list[str]:
    if not isinstance(config.get("messageTypes"), list):
        return ["messageTypes must be an array"]
    return []


def check_delay(config: dict[str, Any]) -> list[str]:
    errors = _Errors()
    errors.require_number(_get(config, "periodInSeconds"), "periodInSeconds")
    errors.require_number(_get(config, "maxPendingMsgs"), "maxPendingMsgs")
    errors.optional(config, "periodInSecondsPattern", "string")
    errors.require_boolean(
        _get(config, "useMetadataPeriodInSecondsPatterns"), "useMetadataPeriodInSecondsPatterns"
    )
    return errors.messages


def check_rule_chain_input(config: dict[str, Any]) -> list[str]:
    errors = _Errors()
    if config.get("ruleChainId") in (None, ""):
        errors.add("ruleChainId is required")
    errors.require_boolean(_get(config, "forwardMsgToDefaultRuleChain"), "forwardMsgToDefaultRuleChain")
    return errors.messages


def check_rest_call(config: dict[str, Any]) -> list[str]:
    errors = _Errors()
    errors.require_string(_get(config, "restEndpointUrlPattern"), "restEndpointUrlPattern")
    errors.require_string(_get(config, "requestMethod"), "requestMethod")
    errors.optional(config, "headers", "object")
    return errors.messages


def check_to_email(config: dict[str, Any]) -> list[str]:
    errors = _Errors()
    for key in ("toTemplate", "subjectTemplate", "bodyTemplate"):
        errors.require_string(_get(config, key), key)
    errors.optional(config, "mailBodyType", "string")
    return errors.messages


def _check_webhook(errors: _Errors, config: dict[str, Any]) -> None:
    errors.optional(config, "endpointUrl", "string")
    errors.optional(config, "headers", "object")
    errors.optional(config, "timeout", "number")


def check_send_email(config: dict[str, Any]) -> list[str]:
    errors = _Errors()
    _check_webhook(errors, config)
    return errors.messages


def check_send_sms(config: dict[str, Any]) -> list[str]:
    errors = _Errors()
    errors.require_string(_get(config, "numbersToTemplate"), "numbersToTemplate")
    errors.require_string(_get(config, "smsMessageTemplate"), "smsMessageTemplate")
    _check_webhook(errors, config)
    return errors.messages


def check_send_telegram(config: dict[str, Any]) -> list[str]:
    errors = _Errors()
    errors.require_string(_get(config, "messageTemplate"), "messageTemplate")
    errors.optional(config, "botToken", "string")
    errors.optional(config, "chatIdTemplate", "string")
    errors.optional(config, "timeout", "number")
    return errors.messages


def check_rename_keys(config: dict[str, Any]) -> list[str]:
    errors: list[str] = []
    for row, entry in enumerate(RenameKeysCodec().decode(config).entries, start=1):
        source, target = entry.source.strip(), entry.target.strip()
        if not source and target:
            errors.append(f"Row {row}: source key is required.")
        if source and not target:
            errors.append(f"Row {row}: target key is required.")
    return errors


def check_delete_keys(config: dict[str, Any]) -> list[str]:
    keys = DeleteKeysCodec().decode(config).keys
    if not any(trimmed(key) for key in keys):
        return ["At least one key is required."]
    return []
