"""Flatten one decoded tree into an index-addressed `Tree`.

Two layouts are supported:

- depth hint > 0: the arena is pre-sized to 2**(depth+1) - 1 slots (a full
  binary tree of that depth) and every node lands in the slot equal to its
  node id. Ids are positions, so child references need no rewriting. A node
  id beyond the capacity means the hint was wrong for this model and is
  reported as `DepthCapacityExceededError`.
- depth hint == 0: nodes are appended in traversal order, stably sorted by
  node id once at the end and child ids are rewritten to positions.

Traversal uses an explicit stack; tree depth is never bounded by the
interpreter's recursion limit.
"""
from __future__ import annotations
import dataclasses
from typing import Dict, List, NamedTuple, Optional, Set

from ..core.errors import DepthCapacityExceededError, InvalidDepthError, ModelLoadError, TreeStructureError
from .feature_map import ConventionFeatureResolver, FeatureResolver
from .raw import RawNode
from .tree import LeafNode, Node, SplitNode, Tree

_BRANCHES = ("yes", "no", "missing")

# 2**21 - 1 slots per tree; deeper models load with max_depth=0
MAX_DEPTH_HINT = 20


class BuildResult(NamedTuple):
    tree: Tree
    num_features: int


def capacity_for_depth(max_depth: int) -> int:
    """Slots needed for a full binary tree with `max_depth` levels below the root."""
    return 2 ** (max_depth + 1) - 1


def check_depth_hint(max_depth: int) -> None:
    if max_depth < 0:
        raise InvalidDepthError(f"max depth cannot be smaller than 0: {max_depth}", max_depth=max_depth)
    if max_depth > MAX_DEPTH_HINT:
        raise InvalidDepthError(
            f"max depth {max_depth} is above the supported hint {MAX_DEPTH_HINT}; "
            f"pass max_depth=0 to size trees automatically",
            max_depth=max_depth,
        )


def _split_from_raw(raw: RawNode, resolver: FeatureResolver) -> SplitNode:
    child_ids = {c.node_id for c in raw.children}
    for branch in _BRANCHES:
        ref = getattr(raw, branch)
        if ref not in child_ids:
            raise TreeStructureError(
                f"'{branch}' branch points to node {ref}, which is not a child of this node",
                node_id=raw.node_id, children=sorted(child_ids),
            )
    orphans = child_ids - {raw.yes, raw.no, raw.missing}
    if orphans:
        raise TreeStructureError(
            f"children {sorted(orphans)} are not reachable from any branch of this node",
            node_id=raw.node_id, children=sorted(child_ids),
        )
    try:
        # the node's own split field, never the root's
        feature = resolver(raw.split)
    except ModelLoadError as e:
        e.with_context(node_id=raw.node_id)
        raise
    return SplitNode(
        node_id=raw.node_id,
        feature=feature,
        threshold=raw.split_condition,
        yes=raw.yes,
        no=raw.no,
        missing=raw.missing,
    )


def _reindex(nodes: List[Node]) -> List[Node]:
    """Sort by node id and rewrite child ids into array positions."""
    nodes.sort(key=lambda n: n.node_id)
    positions: Dict[int, int] = {}
    for pos, node in enumerate(nodes):
        if node.node_id in positions:
            raise TreeStructureError("duplicate node id", node_id=node.node_id)
        positions[node.node_id] = pos
    out: List[Node] = []
    for node in nodes:
        if not node.is_leaf:
            node = dataclasses.replace(
                node,
                yes=positions[node.yes],
                no=positions[node.no],
                missing=positions[node.missing],
            )
        out.append(node)
    return out


def build_tree(
    root: RawNode,
    max_depth: int = 0,
    resolver: Optional[FeatureResolver] = None,
) -> BuildResult:
    """Build a flat `Tree` and count the distinct features it splits on."""
    if resolver is None:
        resolver = ConventionFeatureResolver()
    if root.node_id != 0:
        raise TreeStructureError("root node must have node id 0", node_id=root.node_id)
    check_depth_hint(max_depth)

    capacity = capacity_for_depth(max_depth) if max_depth > 0 else 0
    nodes: List[Optional[Node]] = [None] * capacity
    features: Set[int] = set()

    stack = [root]
    while stack:
        raw = stack.pop()
        if raw.node_id < 0:
            raise TreeStructureError("negative node id", node_id=raw.node_id)
        if raw.is_leaf:
            node: Node = LeafNode(node_id=raw.node_id, value=raw.leaf)
        else:
            node = _split_from_raw(raw, resolver)
            features.add(node.feature)
            stack.extend(raw.children)

        if capacity:
            if node.node_id >= capacity:
                raise DepthCapacityExceededError(max_depth, node.node_id, capacity)
            if nodes[node.node_id] is not None:
                raise TreeStructureError("duplicate node id", node_id=node.node_id)
            nodes[node.node_id] = node
        else:
            nodes.append(node)

    if not capacity:
        nodes = _reindex(nodes)

    return BuildResult(Tree(nodes=tuple(nodes), num_features=len(features)), len(features))


__all__ = ["BuildResult", "MAX_DEPTH_HINT", "build_tree", "capacity_for_depth", "check_depth_hint"]
