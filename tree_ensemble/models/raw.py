"""Decode an XGBoost JSON tree dump into `RawNode` trees.

The dump is a JSON array with one nested object per tree:

    {"nodeid": 0, "split": "f2", "split_condition": 2.45, "yes": 1, "no": 2,
     "missing": 1, "children": [{"nodeid": 1, "leaf": 0.43}, ...]}

Every field is optional and takes its zero value when absent. A node that
carries a `children` key is a split node, whatever its other fields say.
Conversion walks the nested objects with an explicit stack so a deep tree
cannot exhaust the interpreter stack here either.
"""
from __future__ import annotations
import json
from dataclasses import dataclass, field
from typing import Any, IO, List, Optional, Union

from ..core.errors import DecodeError, TreeStructureError

_INT_FIELDS = ("nodeid", "yes", "no", "missing")
_FLOAT_FIELDS = ("split_condition", "leaf")


@dataclass
class RawNode:
    """One node of a decoded tree. Children are owned by their parent."""
    node_id: int = 0
    split: Optional[str] = None
    split_condition: float = 0.0
    yes: int = 0
    no: int = 0
    missing: int = 0
    leaf: float = 0.0
    children: Optional[List["RawNode"]] = None

    @property
    def is_leaf(self) -> bool:
        return self.children is None


@dataclass
class RawModel:
    """Decoded dump: one root per tree, in file order."""
    trees: List[RawNode] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.trees)


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _node_from_object(obj: Any, tree_index: int, path: str) -> RawNode:
    if not isinstance(obj, dict):
        raise DecodeError(
            f"expected a JSON object for a tree node, got {type(obj).__name__}",
            tree_index=tree_index, node_path=path,
        )
    kwargs = {}
    for key in _INT_FIELDS:
        if key in obj:
            v = obj[key]
            if not _is_int(v):
                raise DecodeError(f"field '{key}' must be an integer, got {v!r}", tree_index=tree_index, node_path=path)
            kwargs["node_id" if key == "nodeid" else key] = v
    for key in _FLOAT_FIELDS:
        if key in obj:
            v = obj[key]
            if not _is_number(v):
                raise DecodeError(f"field '{key}' must be a number, got {v!r}", tree_index=tree_index, node_path=path)
            kwargs[key] = float(v)
    if "split" in obj:
        v = obj["split"]
        if not isinstance(v, str):
            raise DecodeError(f"field 'split' must be a string, got {v!r}", tree_index=tree_index, node_path=path)
        kwargs["split"] = v
    node = RawNode(**kwargs)
    if node.node_id < 0:
        raise TreeStructureError("negative node id", tree_index=tree_index, node_id=node.node_id, node_path=path)
    return node


def decode_tree(obj: Any, tree_index: int = 0) -> RawNode:
    """Convert one nested tree object into a `RawNode` hierarchy (iteratively)."""
    root = _node_from_object(obj, tree_index, "root")
    # (json object, decoded node, path) pairs whose children still need decoding
    pending = [(obj, root, "root")]
    while pending:
        src, node, path = pending.pop()
        if "children" not in src or src["children"] is None:
            continue
        kids = src["children"]
        if not isinstance(kids, list):
            raise DecodeError(
                f"field 'children' must be an array, got {type(kids).__name__}",
                tree_index=tree_index, node_path=path,
            )
        node.children = []
        for i, child_obj in enumerate(kids):
            child_path = f"{path}/children[{i}]"
            child = _node_from_object(child_obj, tree_index, child_path)
            node.children.append(child)
            pending.append((child_obj, child, child_path))
    return root


def decode_model(source: Union[str, bytes, IO[str], IO[bytes]], path: Optional[str] = None) -> RawModel:
    """Decode a whole dump from JSON text or an open file object.

    Raises DecodeError for malformed JSON or a payload that does not follow
    the dump layout. An empty array decodes to an empty `RawModel`; rejecting
    it is the caller's decision.
    """
    try:
        if isinstance(source, (str, bytes, bytearray)):
            payload = json.loads(source)
        else:
            payload = json.load(source)
    except json.JSONDecodeError as e:
        raise DecodeError(f"malformed JSON: {e.msg} at line {e.lineno} column {e.colno}", path=path) from e
    except UnicodeDecodeError as e:
        raise DecodeError(f"model file is not valid UTF-8: {e}", path=path) from e
    except RecursionError as e:
        raise DecodeError("JSON nesting is too deep to decode", path=path) from e

    if not isinstance(payload, list):
        raise DecodeError(f"expected a JSON array of trees, got {type(payload).__name__}", path=path)

    model = RawModel()
    for i, tree_obj in enumerate(payload):
        try:
            model.trees.append(decode_tree(tree_obj, tree_index=i))
        except (DecodeError, TreeStructureError) as e:
            e.with_context(path=path)
            raise
    return model


__all__ = ["RawNode", "RawModel", "decode_tree", "decode_model"]
