"""Per-node-type configuration codecs and shape checks."""

from .actions import LogCodec, LogConfig
from .base import ConfigCodec, PartialRecord, PassthroughCodec, as_object
from .filters import (
    CheckMessageCodec,
    CheckMessageConfig,
    MessageTypeFilterCodec,
    MessageTypeFilterConfig,
    MessageTypeMapping,
    MessageTypeSwitchCodec,
    MessageTypeSwitchConfig,
    ScriptCodec,
    ScriptConfig,
)
from .telemetry import (
    AttributeEntry,
    AttributesCodec,
    AttributesConfig,
    CalculatedField,
    CalculatedFieldsCodec,
    CalculatedFieldsConfig,
    TimeseriesCodec,
    TimeseriesConfig,
    TimeseriesValue,
)
from .transforms import (
    DeleteKeysCodec,
    DeleteKeysConfig,
    RenameEntry,
    RenameKeysCodec,
    RenameKeysConfig,
    SplitArrayCodec,
    SplitArrayConfig,
    keys_from_text,
)

__all__ = [
    "AttributeEntry",
    "AttributesCodec",
    "AttributesConfig",
    "CalculatedField",
    "CalculatedFieldsCodec",
    "CalculatedFieldsConfig",
    "CheckMessageCodec",
    "CheckMessageConfig",
    "ConfigCodec",
    "DeleteKeysCodec",
    "DeleteKeysConfig",
    "LogCodec",
    "LogConfig",
    "MessageTypeFilterCodec",
    "MessageTypeFilterConfig",
    "MessageTypeMapping",
    "MessageTypeSwitchCodec",
    "MessageTypeSwitchConfig",
    "PartialRecord",
    "PassthroughCodec",
    "RenameEntry",
    "RenameKeysCodec",
    "RenameKeysConfig",
    "ScriptCodec",
    "ScriptConfig",
    "SplitArrayCodec",
    "SplitArrayConfig",
    "TimeseriesCodec",
    "TimeseriesConfig",
    "TimeseriesValue",
    "as_object",
    "keys_from_text",
]
