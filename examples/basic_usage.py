"""Basic usage example: build a small ingest chain and save it."""

from __future__ import annotations

from pathlib import Path

from rulegraph import EditorConfig, RuleChainEditor
from rulegraph.renderers import render_rule_chain
from rulegraph.serializers import save_rule_chain_json


def main() -> None:
    output_dir = Path("artifacts")
    output_dir.mkdir(exist_ok=True)
    editor = RuleChainEditor(config=EditorConfig())

    switch = editor.add_node("Filter.MsgTypeSwitchNode", label="Route by type")
    editor.apply_node_updates(
        switch.id,
        {"version": 0, "mappings": [{"type": "POST_TELEMETRY_REQUEST", "relation": "Telemetry"}]},
    )
    split = editor.add_node("Transform.SplitArrayToMsgNode")
    log = editor.add_node("Action.LogNode")

    editor.connect(switch.id, split.id, "Telemetry")
    editor.connect(switch.id, log.id)
    editor.connect(split.id, log.id)
    editor.add_forward(split.id, 2, "Failure")

    editor.set_sample('{"data": [{"temperature": 21}, {"temperature": 23}]}')
    print("Paths:", ", ".join(item.value for item in editor.path_suggestions()))
    print("Free relations on switch:", [o.label for o in editor.relation_options(switch.id) if not o.used])

    chain_path = save_rule_chain_json(editor.graph, output_dir / "ingest_chain.json")
    print(render_rule_chain(editor.graph, verbosity="full", registry=editor.registry))
    print(f"Rule chain saved to: {chain_path}")


if __name__ == "__main__":
    main()
