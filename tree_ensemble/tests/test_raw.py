"""
Tests for decoding JSON dumps into RawNode trees.
"""
import io
import json

import pytest

from dump_helpers import count_nodes, full_tree, stump
from tree_ensemble.core.errors import DecodeError, TreeStructureError
from tree_ensemble.models.raw import decode_model, decode_tree


def test_decode_stump():
    model = decode_model(json.dumps([stump("f4", 2.5)]))

    assert len(model) == 1
    root = model.trees[0]
    assert not root.is_leaf
    assert root.node_id == 0
    assert root.split == "f4"
    assert root.split_condition == 2.5
    assert (root.yes, root.no, root.missing) == (1, 2, 1)
    assert [c.node_id for c in root.children] == [1, 2]
    assert root.children[0].is_leaf
    assert root.children[1].leaf == 0.75


def test_decode_from_binary_stream():
    model = decode_model(io.BytesIO(json.dumps([stump(), stump()]).encode("utf-8")))

    assert len(model) == 2


def test_children_order_is_preserved():
    tree = full_tree(3)
    root = decode_tree(tree)

    level = root.children
    assert [c.node_id for c in level] == [1, 2]
    assert [c.node_id for c in level[1].children] == [5, 6]


def test_absent_fields_take_zero_values():
    root = decode_tree({"leaf": 1})

    assert root.node_id == 0
    assert root.is_leaf
    assert root.leaf == 1.0
    assert root.split is None


def test_children_key_marks_split_even_when_empty():
    root = decode_tree({"nodeid": 0, "leaf": 3.0, "children": []})

    assert not root.is_leaf
    assert root.children == []


def test_integer_thresholds_are_accepted():
    root = decode_tree({"nodeid": 0, "split": "f0", "split_condition": 3, "yes": 1, "no": 2, "missing": 1,
                        "children": [{"nodeid": 1, "leaf": 0}, {"nodeid": 2, "leaf": 1}]})

    assert root.split_condition == 3.0
    assert isinstance(root.split_condition, float)


def test_full_tree_node_count():
    tree = full_tree(4)
    counts = count_nodes(tree)
    root = decode_tree(tree)

    seen = 0
    stack = [root]
    while stack:
        n = stack.pop()
        seen += 1
        if not n.is_leaf:
            stack.extend(n.children)
    assert seen == counts["split"] + counts["leaf"] == 31


@pytest.mark.parametrize("payload", ["[", "{\"nodeid\": 0", "not json", ""])
def test_malformed_json(payload):
    with pytest.raises(DecodeError, match="malformed JSON"):
        decode_model(payload, path="model.json")


def test_top_level_must_be_an_array():
    with pytest.raises(DecodeError, match="expected a JSON array"):
        decode_model(json.dumps(stump()))


def test_empty_array_decodes_to_no_trees():
    assert len(decode_model("[]")) == 0


@pytest.mark.parametrize(
    "bad_node,field",
    [
        ({"nodeid": "0", "leaf": 1.0}, "nodeid"),
        ({"nodeid": 1.5, "leaf": 1.0}, "nodeid"),
        ({"nodeid": 0, "leaf": True}, "leaf"),
        ({"nodeid": 0, "leaf": "0.3"}, "leaf"),
        ({"nodeid": 0, "split": 3, "yes": 1, "no": 2, "missing": 1, "children": []}, "split"),
    ],
)
def test_wrong_field_types(bad_node, field):
    with pytest.raises(DecodeError, match=f"field '{field}'") as exc:
        decode_model(json.dumps([stump(), bad_node]), path="m.json")

    assert exc.value.tree_index == 1
    assert exc.value.context["path"] == "m.json"


def test_nested_error_reports_node_path():
    tree = stump()
    tree["children"][1]["leaf"] = "x"

    with pytest.raises(DecodeError) as exc:
        decode_model(json.dumps([tree]))

    assert exc.value.context["node_path"] == "root/children[1]"


def test_children_must_be_an_array():
    with pytest.raises(DecodeError, match="'children' must be an array"):
        decode_tree({"nodeid": 0, "children": {"nodeid": 1}})


def test_tree_must_be_an_object():
    with pytest.raises(DecodeError, match="expected a JSON object"):
        decode_model("[1, 2]")


def test_negative_node_id():
    with pytest.raises(TreeStructureError, match="negative node id"):
        decode_model(json.dumps([{"nodeid": -3, "leaf": 0.0}]))
