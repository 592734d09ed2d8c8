"""RuleChainEditor: the DI-constructed entry point for editing one rule chain."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Collection
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import RulegraphError
from ..models import ChainForward, Edge, Node, RuleGraph, ValidationState
from ..paths import PathSuggestion, filter_suggestions
from ..registry import ExpressionField, NodeTypeRegistry, NodeTypeSpec, default_registry
from ..relations import RelationCatalog, RelationOption, RelationResolver
from ..sample import SampleMessage
from .editor_config import EditorConfig
from .hooks import ValidationHook
from .jq_client import HttpJqValidator, JqValidator
from .validator import ExpressionValidator

INVALID_JSON = "Invalid JSON"
INVALID_JQ_EXPRESSION = "Invalid jq expression."


class NodeUpdateResult(BaseModel):
    """Outcome of ``RuleChainEditor.apply_node_updates``."""

    model_config = ConfigDict(frozen=True)

    applied: bool
    errors: list[str] = Field(default_factory=list)


def validator_key(node_id: str, field_key: str) -> str:
    return f"{node_id}:{field_key}"


class RuleChainEditor:
    """Owns a graph plus everything needed to edit it.

    Structural edits that break an invariant raise (see ``rulegraph.exceptions``).
    Configuration text is never an exception: ``apply_node_updates`` reports
    problems in its result. Expression validation is advisory and never
    blocks a save.
    """

    def __init__(
        self,
        graph: RuleGraph | None = None,
        *,
        config: EditorConfig | None = None,
        registry: NodeTypeRegistry | None = None,
        catalog: RelationCatalog | None = None,
        validator: JqValidator | None = None,
        hooks: list[ValidationHook] | None = None,
    ) -> None:
        self.graph = graph if graph is not None else RuleGraph()
        self.config = config or EditorConfig()
        self.registry = registry or default_registry()
        self.relations = RelationResolver(self.registry, catalog)
        self.hooks: list[ValidationHook] = hooks or []
        self._owned_client: HttpJqValidator | None = None
        if validator is None and self.config.validator_url:
            self._owned_client = HttpJqValidator(
                self.config.validator_url,
                timeout=self.config.validator_timeout,
            )
            validator = self._owned_client
        self.validator = validator
        self.sample = SampleMessage()
        self._validators: dict[str, ExpressionValidator] = {}

    def palette(self, *, ingest: bool = False) -> list[NodeTypeSpec]:
        return self.registry.templates(ingest=ingest)

    def add_node(self, node_type: str, *, label: str | None = None) -> Node:
        return self.graph.add_node(node_type, label=label, registry=self.registry)

    def change_node_type(self, node_id: str, node_type: str) -> Node:
        self._close_validators(node_id)
        return self.graph.change_node_type(node_id, node_type, registry=self.registry)

    def delete_node(self, node_id: str) -> None:
        """Delete a node; its validators are torn down so late answers are dropped."""
        self.graph.delete_node(node_id)
        self._close_validators(node_id)

    def node_settings(self, node_id: str) -> Any:
        """The node's configuration decoded into its canonical record."""
        node = self.graph.get_node(node_id)
        return self.registry.decode(node.node_type, node.configuration)

    def update_node_settings(self, node_id: str, record: Any) -> Node:
        node = self.graph.get_node(node_id)
        return self.graph.update_configuration(node_id, self.registry.encode(node.node_type, record))

    def check_node(self, node_id: str) -> list[str]:
        node = self.graph.get_node(node_id)
        return self.registry.check(node.node_type, node.configuration)

    def apply_node_updates(
        self,
        node_id: str,
        configuration: str | dict[str, object],
        *,
        label: str | None = None,
    ) -> NodeUpdateResult:
        """Save raw configuration (JSON text or object) and optionally a new label.

        Nothing is written unless the text parses to an object and the
        type's shape check passes.
        """
        node = self.graph.get_node(node_id)
        if isinstance(configuration, str):
            try:
                parsed = json.loads(configuration)
            except (ValueError, RecursionError):
                return NodeUpdateResult(applied=False, errors=[INVALID_JSON])
        else:
            parsed = configuration
        if not isinstance(parsed, dict):
            return NodeUpdateResult(applied=False, errors=[INVALID_JSON])

        errors = self.registry.check(node.node_type, parsed)
        if errors:
            return NodeUpdateResult(applied=False, errors=errors)

        self.graph.update_configuration(node_id, parsed)
        self._close_validators(
            node_id,
            keep={
                validator_key(node_id, field_key)
                for field_key, _, _ in self.registry.expressions(node.node_type, node.configuration)
            },
        )
        if label is not None:
            self.graph.rename_node(node_id, label)
        return NodeUpdateResult(applied=True)

    def relation_options(
        self,
        source_id: str,
        *,
        editing_edge_id: str | None = None,
        editing_forward_index: int | None = None,
    ) -> list[RelationOption]:
        return self.relations.resolve(
            self.graph,
            source_id,
            editing_edge_id=editing_edge_id,
            editing_forward_index=editing_forward_index,
        )

    def connect(self, source_id: str, target_id: str, relation: str | None = None) -> Edge:
        """Connect two nodes. Without ``relation`` the first free option is used."""
        if relation is None or not relation.strip():
            relation = self.relations.default_relation(self.graph, source_id)
        return self.graph.connect(source_id, target_id, relation)

    def add_forward(
        self,
        source_id: str,
        target_chain_id: int | str,
        relation: str | None = None,
    ) -> ChainForward:
        if relation is None or not relation.strip():
            return self.graph.add_forward(source_id, target_chain_id)
        return self.graph.add_forward(source_id, target_chain_id, relation)

    def set_sample(
        self,
        body_text: str = "",
        headers_text: str = "",
        message_type: str = "",
    ) -> SampleMessage:
        self.sample = SampleMessage.from_text(body_text, headers_text, message_type)
        return self.sample

    def path_suggestions(self, query: str = "") -> list[PathSuggestion]:
        suggestions = self.sample.body_suggestions(**self.config.path_limits())
        return filter_suggestions(suggestions, query, limit=self.config.max_visible_suggestions)

    def validator_for(self, node_id: str, field_key: str, field: ExpressionField) -> ExpressionValidator:
        key = validator_key(node_id, field_key)
        existing = self._validators.get(key)
        if existing is not None and existing.expected == field.expected:
            return existing
        if existing is not None:
            existing.close()
        if self.validator is None:
            raise RulegraphError(
                "No expression validator configured; pass validator= or set validator_url"
            )
        created = ExpressionValidator(
            self.validator,
            key=key,
            expected=field.expected,
            debounce=(
                self.config.split_array_debounce_seconds if field.fast else self.config.debounce_seconds
            ),
            hooks=self.hooks,
            required_message=field.required_message,
            invalid_message=INVALID_JQ_EXPRESSION,
        )
        self._validators[key] = created
        return created

    def _expression_jobs(self, node_id: str) -> list[tuple[ExpressionValidator, str, object]]:
        node = self.graph.get_node(node_id)
        jobs = []
        for field_key, text, field in self.registry.expressions(node.node_type, node.configuration):
            sample = self.sample.payload_sample() if field.payload_sample else self.sample.evaluation_context()
            jobs.append((self.validator_for(node_id, field_key, field), text, sample))
        self._close_validators(node_id, keep={validator.key for validator, _, _ in jobs})
        return jobs

    def submit_validation(self, node_id: str) -> list[str]:
        """Schedule debounced checks for every expression of a node; returns their keys."""
        keys = []
        for validator, text, sample in self._expression_jobs(node_id):
            validator.submit(text, sample)
            keys.append(validator.key)
        return keys

    async def validate_node(self, node_id: str) -> dict[str, ValidationState]:
        """Check every expression of a node right away."""
        jobs = self._expression_jobs(node_id)
        states = await asyncio.gather(*(validator.validate(text, sample) for validator, text, sample in jobs))
        return {validator.key: state for (validator, _, _), state in zip(jobs, states)}

    def validation_state(self, node_id: str, field_key: str) -> ValidationState:
        validator = self._validators.get(validator_key(node_id, field_key))
        if validator is None:
            return ValidationState.idle()
        return validator.state

    async def wait_for_validation(self) -> dict[str, ValidationState]:
        for validator in list(self._validators.values()):
            await validator.wait()
        return {key: validator.state for key, validator in self._validators.items()}

    def _close_validators(self, node_id: str, *, keep: Collection[str] = ()) -> None:
        """Drop the node's validators, except those under ``keep``."""
        prefix = validator_key(node_id, "")
        for key in [key for key in self._validators if key.startswith(prefix) and key not in keep]:
            self._validators.pop(key).close()

    async def aclose(self) -> None:
        for validator in self._validators.values():
            validator.close()
        self._validators.clear()
        if self._owned_client is not None:
            await self._owned_client.aclose()
            self._owned_client = None
