"""Node-type registry: codec, relations, defaults and checks per type tag."""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from .codecs import (
    AttributesCodec,
    CalculatedFieldsCodec,
    CalculatedFieldsConfig,
    CheckMessageCodec,
    ConfigCodec,
    DeleteKeysCodec,
    LogCodec,
    MessageTypeFilterCodec,
    MessageTypeSwitchCodec,
    PassthroughCodec,
    RenameKeysCodec,
    ScriptCodec,
    ScriptConfig,
    SplitArrayCodec,
    SplitArrayConfig,
    TimeseriesCodec,
    checks,
)
from .codecs.base import as_object
from .models.validation import ExpectedResult
from .relations import MessageTypeSwitchRelations, RelationStrategy, StaticRelations

SECTIONS: dict[str, str] = {
    "storage": "Storage",
    "telemetry": "Telemetry",
    "filter": "Filters",
    "transform": "Transform",
    "math": "Math",
    "metadata": "Metadata",
    "relations": "Relations",
    "flow": "Flow",
    "action": "Actions",
    "rpc": "RPC",
}
OTHER_SECTION = "other"

JQ_REQUIRED = "jq expression is required."
JQ_PATH_REQUIRED = "jq path is required."


@dataclass(frozen=True)
class ExpressionField:
    """A script expression embedded in a node configuration.

    ``extract`` receives the decoded record and yields ``(key, expression)``
    pairs; a configuration can hold several expressions of the same kind.
    """

    extract: Callable[[Any], list[tuple[str, str]]]
    expected: ExpectedResult | None = None
    required_message: str = JQ_REQUIRED
    payload_sample: bool = False
    fast: bool = False


@dataclass(frozen=True)
class NodeTypeSpec:
    node_type: str
    label: str
    section: str = OTHER_SECTION
    codec: ConfigCodec[Any] = field(default_factory=PassthroughCodec)
    relations: RelationStrategy = field(default_factory=StaticRelations)
    default_configuration: dict[str, Any] = field(default_factory=dict)
    configuration_version: int | None = None
    check: checks.Checker | None = None
    expressions: tuple[ExpressionField, ...] = ()
    ingest: bool = False


class NodeTypeRegistry:
    """Type tag -> ``NodeTypeSpec``. Unknown tags resolve to a passthrough spec."""

    def __init__(self, specs: Iterable[NodeTypeSpec] = ()) -> None:
        self._specs: dict[str, NodeTypeSpec] = {}
        for spec in specs:
            self.register(spec)

    def register(self, spec: NodeTypeSpec) -> None:
        self._specs[spec.node_type] = spec

    def __contains__(self, node_type: object) -> bool:
        return node_type in self._specs

    def __iter__(self) -> Iterator[NodeTypeSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)

    def get(self, node_type: str) -> NodeTypeSpec:
        spec = self._specs.get(node_type)
        if spec is None:
            return NodeTypeSpec(node_type=node_type, label=node_type)
        return spec

    def templates(self, *, ingest: bool = False) -> list[NodeTypeSpec]:
        """Palette entries; ingest chains only offer ingest-capable types."""
        return [spec for spec in self._specs.values() if spec.ingest or not ingest]

    def section_of(self, node_type: str) -> str:
        return self.get(node_type).section

    def default_configuration(self, node_type: str) -> dict[str, Any]:
        return copy.deepcopy(self.get(node_type).default_configuration)

    def decode(self, node_type: str, raw: object) -> Any:
        return self.get(node_type).codec.decode(raw)

    def encode(self, node_type: str, record: Any) -> dict[str, object]:
        return self.get(node_type).codec.encode(record)

    def normalize(self, node_type: str, raw: object) -> dict[str, object]:
        """Decode then encode, yielding the canonical wire shape."""
        codec = self.get(node_type).codec
        return codec.encode(codec.decode(raw))

    def check(self, node_type: str, configuration: object) -> list[str]:
        checker = self.get(node_type).check
        if checker is None:
            return []
        return checker(as_object(configuration))

    def expressions(self, node_type: str, configuration: object) -> list[tuple[str, str, ExpressionField]]:
        """Every embedded expression of a configuration as ``(key, text, field)``."""
        spec = self.get(node_type)
        if not spec.expressions:
            return []
        record = spec.codec.decode(configuration)
        found = []
        for expression in spec.expressions:
            for key, text in expression.extract(record):
                found.append((key, text, expression))
        return found


def _script(record: ScriptConfig) -> list[tuple[str, str]]:
    return [("script", record.script)]


def _array_path(record: SplitArrayConfig) -> list[tuple[str, str]]:
    return [("arrayPath", record.array_path)]


def _calculated_expressions(record: CalculatedFieldsConfig) -> list[tuple[str, str]]:
    return [(f"fields.{index}.expression", item.expression) for index, item in enumerate(record.fields)]


_TRUE_FALSE = StaticRelations(["True", "False"])
_WEBHOOK_HEADERS = {"Content-Type": "application/json"}
_HOT_TEMPLATE = "Device ${deviceName} has high temperature $[temperature]"


def _builtin_specs() -> list[NodeTypeSpec]:
    return [
        NodeTypeSpec(
            "Telemetry.MsgTimeseriesNode",
            "Save Timeseries",
            "storage",
            codec=TimeseriesCodec(),
            default_configuration={
                "deviceIdPath": "device_id",
                "useServerTs": True,
                "tsPath": "",
                "values": [],
            },
            configuration_version=1,
            check=checks.check_timeseries,
        ),
        NodeTypeSpec(
            "Telemetry.MsgAttributesNode",
            "Save Client Attributes",
            "storage",
            codec=AttributesCodec(),
            default_configuration={
                "processingSettings": {"type": "ON_EVERY_MESSAGE"},
                "scope": "CLIENT_SCOPE",
                "notifyDevice": False,
                "sendAttributesUpdatedNotification": False,
                "updateAttributesOnlyOnValueChange": True,
            },
            configuration_version=3,
            check=checks.check_attributes,
        ),
        NodeTypeSpec(
            "Filter.MsgTypeSwitchNode",
            "Message Type Switch",
            "filter",
            codec=MessageTypeSwitchCodec(),
            relations=MessageTypeSwitchRelations(),
            default_configuration={"version": 0},
            check=checks.check_message_type_switch,
            ingest=True,
        ),
        NodeTypeSpec(
            "Action.LogNode",
            "Log",
            "action",
            codec=LogCodec(),
            default_configuration={"label": "Incoming message"},
            check=checks.check_log,
            ingest=True,
        ),
        NodeTypeSpec(
            "Rpc.SendRPCRequestNode",
            "RPC Call Request",
            "rpc",
            default_configuration={"timeoutInSeconds": 60},
            check=checks.check_rpc_request,
        ),
        NodeTypeSpec(
            "Rpc.SendRPCReplyNode",
            "RPC Reply",
            "rpc",
            default_configuration={"status": 200, "headers": {}, "bodyTemplate": ""},
            ingest=True,
        ),
        NodeTypeSpec(
            "Transform.TransformMsgNode",
            "Transform Message",
            "transform",
            codec=ScriptCodec("expression", "jq"),
            default_configuration={"script": ".payload"},
            check=checks.check_script,
            expressions=(ExpressionField(_script, ExpectedResult.OBJECT),),
        ),
        NodeTypeSpec(
            "Filter.JsFilterNode",
            "Script Filter",
            "filter",
            codec=ScriptCodec("expression", "js"),
            relations=_TRUE_FALSE,
            default_configuration={"script": ".payload.temperature > 20"},
            check=checks.check_script,
            expressions=(ExpressionField(_script, ExpectedResult.BOOLEAN),),
        ),
        NodeTypeSpec(
            "Filter.MsgTypeFilterNode",
            "Message Type Filter",
            "filter",
            codec=MessageTypeFilterCodec(),
            relations=StaticRelations(["True", "False", "Missing"]),
            default_configuration={
                "messageTypes": [
                    "POST_ATTRIBUTES_REQUEST",
                    "POST_TELEMETRY_REQUEST",
                    "TO_SERVER_RPC_REQUEST",
                ]
            },
            check=checks.check_message_type_filter,
            ingest=True,
        ),
        NodeTypeSpec(
            "Delay.MsgDelayNode",
            "Delay",
            "flow",
            default_configuration={
                "periodInSeconds": 60,
                "maxPendingMsgs": 1000,
                "periodInSecondsPattern": "",
                "useMetadataPeriodInSecondsPatterns": False,
            },
            check=checks.check_delay,
        ),
        NodeTypeSpec("Flow.CheckpointNode", "Checkpoint", "flow", ingest=True),
        NodeTypeSpec(
            "Flow.RuleChainInputNode",
            "Rule Chain",
            "flow",
            default_configuration={"ruleChainId": "", "forwardMsgToDefaultRuleChain": False},
            check=checks.check_rule_chain_input,
        ),
        NodeTypeSpec("Flow.RuleChainOutputNode", "Rule Chain Output", "flow", ingest=True),
        NodeTypeSpec("Flow.AckNode", "Ack", "flow", ingest=True),
        NodeTypeSpec(
            "Rest.RestApiCallNode",
            "REST API Call",
            "action",
            default_configuration={
                "restEndpointUrlPattern": "http://localhost/api",
                "requestMethod": "POST",
                "headers": dict(_WEBHOOK_HEADERS),
                "useSimpleClientHttpFactory": False,
                "readTimeoutMs": 0,
                "maxParallelRequestsCount": 0,
                "parseToPlainText": False,
                "enableProxy": False,
                "credentials": {"type": "anonymous"},
                "ignoreRequestBody": False,
                "maxInMemoryBufferSizeInKb": 256,
            },
            check=checks.check_rest_call,
        ),
        NodeTypeSpec(
            "Mail.MsgToEmailNode",
            "To Email",
            "action",
            default_configuration={
                "fromTemplate": "info@example.com",
                "toTemplate": "${userEmail}",
                "ccTemplate": "",
                "bccTemplate": "",
                "subjectTemplate": "Device ${deviceName} alert",
                "bodyTemplate": _HOT_TEMPLATE,
                "isHtmlTemplate": "false",
                "mailBodyType": "false",
            },
            check=checks.check_to_email,
        ),
        NodeTypeSpec(
            "Mail.SendEmailNode",
            "Send Email",
            "action",
            default_configuration={
                "endpointUrl": "http://localhost:8090/webhooks/email",
                "headers": dict(_WEBHOOK_HEADERS),
                "timeout": 10000,
            },
            check=checks.check_send_email,
        ),
        NodeTypeSpec(
            "Sms.SendSmsNode",
            "Send SMS",
            "action",
            default_configuration={
                "numbersToTemplate": "${userPhone}",
                "smsMessageTemplate": _HOT_TEMPLATE,
                "endpointUrl": "http://localhost:8090/webhooks/sms",
                "headers": dict(_WEBHOOK_HEADERS),
                "timeout": 10000,
            },
            check=checks.check_send_sms,
        ),
        NodeTypeSpec(
            "Telegram.SendTelegramNode",
            "Send Telegram",
            "action",
            default_configuration={
                "botToken": "",
                "chatIdTemplate": "",
                "messageTemplate": _HOT_TEMPLATE,
                "parseMode": "MarkdownV2",
                "timeout": 10000,
            },
            check=checks.check_send_telegram,
        ),
        NodeTypeSpec("Filter.AssetTypeSwitchNode", "Asset Type Switch", "filter"),
        NodeTypeSpec(
            "Filter.CheckMessageNode",
            "Check Message",
            "filter",
            codec=CheckMessageCodec(),
            relations=_TRUE_FALSE,
            ingest=True,
        ),
        NodeTypeSpec(
            "Filter.CheckAlarmStatusNode", "Check Alarm Status", "filter", relations=_TRUE_FALSE
        ),
        NodeTypeSpec("Filter.DeviceTypeSwitchNode", "Device Type Switch", "filter"),
        NodeTypeSpec("Action.CreateAlarmNode", "Create Alarm", "action"),
        NodeTypeSpec("Action.ClearAlarmNode", "Clear Alarm", "action"),
        NodeTypeSpec("Action.MsgCountNode", "Message Count", "action"),
        NodeTypeSpec("Action.DeviceStateNode", "Device State", "action"),
        NodeTypeSpec("Kafka.KafkaNode", "Kafka", "action"),
        NodeTypeSpec("Action.CreateRelationNode", "Create Relation", "relations"),
        NodeTypeSpec("Action.DeleteRelationNode", "Delete Relation", "relations"),
        NodeTypeSpec(
            "Filter.CheckRelationNode", "Check Relation", "relations", relations=_TRUE_FALSE
        ),
        NodeTypeSpec("Math.MathNode", "Math", "math"),
        NodeTypeSpec("Metadata.CalculateDeltaNode", "Calculate Delta", "math"),
        NodeTypeSpec("Metadata.GetAttributesNode", "Get Attributes", "metadata"),
        NodeTypeSpec("Metadata.GetDeviceAttrNode", "Get Device Attributes", "metadata"),
        NodeTypeSpec("Metadata.GetRelatedAttributeNode", "Get Related Attributes", "metadata"),
        NodeTypeSpec("Metadata.GetTelemetryNode", "Get Telemetry", "metadata"),
        NodeTypeSpec(
            "Metadata.FetchDeviceCredentialsNode",
            "Fetch Device Credentials",
            "metadata",
            default_configuration={"fetchTo": "METADATA"},
        ),
        NodeTypeSpec(
            "Profile.DeviceProfileNode",
            "Device Profile",
            "metadata",
            default_configuration={
                "fetchTo": "METADATA",
                "deviceKey": "device",
                "profileKey": "device_model",
                "includeDevice": True,
                "includeProfile": True,
            },
        ),
        NodeTypeSpec(
            "Telemetry.CalculatedFieldsNode",
            "Calculated Fields",
            "telemetry",
            codec=CalculatedFieldsCodec(),
            expressions=(ExpressionField(_calculated_expressions),),
        ),
        NodeTypeSpec("Telemetry.MsgDeleteAttributesNode", "Delete Attributes", "telemetry"),
        NodeTypeSpec("Transform.CopyKeysNode", "Copy Keys", "transform", ingest=True),
        NodeTypeSpec(
            "Transform.DeleteKeysNode",
            "Delete Keys",
            "transform",
            codec=DeleteKeysCodec(),
            check=checks.check_delete_keys,
            ingest=True,
        ),
        NodeTypeSpec(
            "Transform.RenameKeysNode",
            "Rename Keys",
            "transform",
            codec=RenameKeysCodec(),
            check=checks.check_rename_keys,
            ingest=True,
        ),
        NodeTypeSpec(
            "Transform.SplitArrayToMsgNode",
            "SplitArrayToMsg",
            "transform",
            codec=SplitArrayCodec(),
            relations=StaticRelations(["Success", "Failure"]),
            expressions=(
                ExpressionField(
                    _array_path,
                    ExpectedResult.ARRAY,
                    required_message=JQ_PATH_REQUIRED,
                    payload_sample=True,
                    fast=True,
                ),
            ),
            ingest=True,
        ),
        NodeTypeSpec("Deduplication.MsgDeduplicationNode", "Message Deduplication", "transform"),
    ]


def default_registry() -> NodeTypeRegistry:
    """A fresh registry holding the built-in node-type catalog."""
    return NodeTypeRegistry(_builtin_specs())
