"""Unit tests for the rule document to Mermaid translator."""

import re

import pytest

from backend.translator import (
    DanglingReferenceError,
    MalformedDocumentError,
    MermaidTranslator,
    convert_yaml_to_mermaid,
    parse_rule_document,
    sanitize,
    translate,
)
from shared.schemas import NodeKind

SCENARIO_ONE = """
conditions:
  A:
    description: Is X?
    Check: isX
    true:
      next: B
    false:
      terminate: true
  B:
"""


def declarations(diagram: str, node_id: str) -> int:
    pattern = re.compile(rf"^    {re.escape(node_id)}(\{{|\[|\(\(\()")
    return sum(1 for line in diagram.splitlines() if pattern.match(line))


def test_direct_next_and_direct_terminate():
    diagram = convert_yaml_to_mermaid(SCENARIO_ONE)
    assert diagram == (
        "flowchart TD\n"
        '    A{"`Is X?`"}\n'
        "    A -->|true| B\n"
        "    A_false_end((( )))\n"
        "    A -->|false| A_false_end\n"
        '    B{"`B`"}\n'
    )


def test_action_then_next():
    result = translate({"conditions": {"A": {"true": {"action": "do it", "next": "B"}}, "B": {}}})
    lines = result.diagram.splitlines()
    assert lines[1:5] == [
        '    A{"`A`"}',
        '    A_true["`do it`"]',
        "    A -->|true| A_true",
        "    A_true -->|true| B",
    ]


def test_action_description_wins_over_action_name():
    result = translate({"conditions": {"A": {"false": {"description": "Log it", "action": "logIt"}}}})
    assert '    A_false["`Log it`"]' in result.diagram
    assert "    A -->|false| A_false" in result.diagram
    # action only: nothing leaves the action node
    assert "    A_false -->" not in result.diagram


def test_action_then_terminate():
    result = translate({"conditions": {"A": {"true": {"action": "stop", "terminate": True}}}})
    assert result.diagram.splitlines()[2:] == [
        '    A_true["`stop`"]',
        "    A -->|true| A_true",
        "    A_true_end((( )))",
        "    A_true --> A_true_end",
    ]


def test_condition_without_outcomes_has_no_edges():
    diagram = convert_yaml_to_mermaid("conditions:\n  A:\n    description: Lonely\n")
    assert diagram == 'flowchart TD\n    A{"`Lonely`"}\n'


def test_dangling_branch_produces_no_edge():
    result = translate({"conditions": {"A": {"true": {"description": "nowhere"}}}})
    assert "-->" not in result.diagram


def test_empty_condition_name_skips_branches():
    result = translate({"conditions": {"": {"true": {"next": "B"}}}})
    assert result.diagram.splitlines() == ["flowchart TD", '    {"``"}']


def test_empty_description_falls_back_to_id():
    result = translate({"conditions": {"A": {"description": ""}}})
    assert result.diagram == 'flowchart TD\n    A{"`A`"}\n'
    assert [(w.code, w.node_id) for w in result.warnings] == [("empty_label", "A")]


def test_numeric_condition_names_and_next():
    diagram = convert_yaml_to_mermaid(
        "conditions:\n"
        "  1:\n"
        "    description: First\n"
        "    true:\n"
        "      next: 2\n"
        "  2:\n"
        "    description: Second\n"
    )
    assert diagram == (
        "flowchart TD\n"
        '    1{"`First`"}\n'
        "    1 -->|true| 2\n"
        '    2{"`Second`"}\n'
    )


def test_yaml_11_boolean_words_stay_strings():
    result = translate(
        "conditions:\n"
        "  on:\n"
        "    description: No\n"
        "    Check: yes\n"
        "    false:\n"
        "      action: off\n"
        "      terminate: true\n"
    )
    assert result.diagram.splitlines()[1:3] == ['    on{"`No`"}', '    on_false["`off`"]']
    assert result.metadata_json()["on"] == {"func": "yes", "type": "condition"}
    assert result.metadata["on_false"].func == "off"


def test_shared_next_target_declared_once():
    result = translate(
        {
            "conditions": {
                "A": {"true": {"next": "C"}},
                "B": {"true": {"next": "C"}},
                "C": {"description": "Target"},
            }
        }
    )
    assert declarations(result.diagram, "C") == 1
    assert "    A -->|true| C" in result.diagram
    assert "    B -->|true| C" in result.diagram


def test_deterministic_output():
    first = translate(SCENARIO_ONE)
    second = translate(SCENARIO_ONE)
    assert first.diagram == second.diagram
    assert first.metadata_json() == second.metadata_json()


def test_action_id_colliding_with_condition_is_declared_once():
    result = translate(
        {
            "conditions": {
                "A": {"true": {"action": "act", "terminate": True}},
                "A_true": {"description": "Also a condition"},
            }
        }
    )
    assert declarations(result.diagram, "A_true") == 1
    assert declarations(result.diagram, "A_true_end") == 1


def test_quotes_in_labels_are_escaped():
    result = translate({"conditions": {"A": {"description": 'Say "hi"', "true": {"action": 'print "x"'}}}})
    condition_line = result.diagram.splitlines()[1]
    assert condition_line == '    A{"`Say #quot;hi#quot;`"}'
    assert condition_line.count('"') == 2
    assert '    A_true["`print #quot;x#quot;`"]' in result.diagram


def test_sanitize_leaves_plain_text_alone():
    assert sanitize("no quotes here") == "no quotes here"
    assert sanitize('"') == "#quot;"


def test_both_branches_give_two_labeled_edges():
    result = translate(
        {
            "conditions": {
                "A": {
                    "true": {"action": "yes", "next": "B"},
                    "false": {"action": "no", "next": "B"},
                },
                "B": {},
            }
        }
    )
    leaving = [line for line in result.diagram.splitlines() if line.startswith("    A -->|")]
    assert leaving == ["    A -->|true| A_true", "    A -->|false| A_false"]


def test_metadata_for_conditions_and_actions():
    result = translate(
        {
            "conditions": {
                "A": {
                    "Check": "isReady",
                    "true": {"action": "go", "next": "B"},
                    "false": {"terminate": True},
                },
                "B": {"Check": "isDone"},
            }
        }
    )
    assert result.metadata_json() == {
        "A": {"func": "isReady", "type": "condition"},
        "A_true": {"func": "go", "type": "action", "value": True},
        "B": {"func": "isDone", "type": "condition"},
    }
    assert result.metadata["A_true"].type == NodeKind.ACTION


def test_false_action_metadata_value():
    result = translate({"conditions": {"A": {"false": {"action": "undo", "terminate": True}}}})
    assert result.metadata["A_false"].value is False


def test_empty_label_warnings():
    result = translate(SCENARIO_ONE)
    assert [(w.code, w.node_id) for w in result.warnings] == [("empty_label", "B")]


def test_unknown_next_warns_in_lenient_mode():
    result = translate({"conditions": {"A": {"description": "a", "true": {"next": "Missing"}}}})
    assert "    A -->|true| Missing" in result.diagram
    assert [w.code for w in result.warnings] == ["dangling_reference"]


def test_unknown_next_raises_in_strict_mode():
    with pytest.raises(DanglingReferenceError) as exc:
        translate({"conditions": {"A": {"false": {"action": "x", "next": "Missing"}}}}, strict=True)
    assert exc.value.condition == "A"
    assert exc.value.branch == "false"
    assert exc.value.target == "Missing"


@pytest.mark.parametrize(
    "source",
    [
        "",
        "- just\n- a list\n",
        "rules: {}\n",
        "conditions:\n  - A\n",
        "conditions: [unclosed\n",
    ],
)
def test_malformed_documents(source):
    with pytest.raises(MalformedDocumentError):
        parse_rule_document(source)


def test_wrong_field_type_lists_errors():
    with pytest.raises(MalformedDocumentError) as exc:
        translate({"conditions": {"A": {"description": ["not", "text"]}}})
    assert any("description" in err["loc"] for err in exc.value.errors)


def test_translator_state_is_per_instance():
    doc = parse_rule_document(SCENARIO_ONE)
    first = MermaidTranslator(doc).run()
    second = MermaidTranslator(doc).run()
    assert first.diagram == second.diagram
    assert declarations(second.diagram, "A") == 1
