"""
Flattened tree ensemble types.

A `Tree` is an arena: a tuple of nodes where split nodes reference their
children by position instead of by object. Position 0 is always the root.
Trees built with a depth hint keep the pre-sized layout, so slots whose id
never appeared in the dump stay `None`.

All objects here are frozen; nothing is mutated after a load returns.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple, Union

import numpy as np

from .transformation import TransformRaw


@dataclass(frozen=True)
class LeafNode:
    node_id: int
    value: float

    @property
    def is_leaf(self) -> bool:
        return True


@dataclass(frozen=True)
class SplitNode:
    """Internal node. `yes`, `no` and `missing` are positions in the owning tree."""
    node_id: int
    feature: int
    threshold: float
    yes: int
    no: int
    missing: int

    @property
    def is_leaf(self) -> bool:
        return False

    def children(self) -> Tuple[int, ...]:
        """Distinct child positions, yes branch first."""
        out = [self.yes]
        if self.no != self.yes:
            out.append(self.no)
        if self.missing not in out:
            out.append(self.missing)
        return tuple(out)


Node = Union[LeafNode, SplitNode]


@dataclass(frozen=True)
class Tree:
    nodes: Tuple[Optional[Node], ...]
    num_features: int = 0

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, pos: int) -> Optional[Node]:
        return self.nodes[pos]

    def __iter__(self) -> Iterator[Node]:
        """Populated nodes in position order."""
        return (n for n in self.nodes if n is not None)

    @property
    def root(self) -> Node:
        return self.nodes[0]

    @property
    def capacity(self) -> int:
        return len(self.nodes)

    @property
    def node_count(self) -> int:
        return sum(1 for n in self.nodes if n is not None)

    @property
    def num_leaves(self) -> int:
        return sum(1 for n in self if n.is_leaf)

    def walk(self) -> List[int]:
        """Positions reachable from the root, depth first, yes branch first."""
        order: List[int] = []
        stack = [0]
        while stack:
            pos = stack.pop()
            order.append(pos)
            node = self.nodes[pos]
            if not node.is_leaf:
                stack.extend(reversed(node.children()))
        return order

    def depth(self) -> int:
        best = 0
        stack = [(0, 0)]
        while stack:
            pos, d = stack.pop()
            best = max(best, d)
            node = self.nodes[pos]
            if not node.is_leaf:
                stack.extend((c, d + 1) for c in node.children())
        return best

    def to_arrays(self) -> Dict[str, np.ndarray]:
        """Columnar copy of the arena for vectorized consumers.

        Empty slots get node_id/feature/child = -1 and NaN values.
        """
        n = len(self.nodes)
        node_id = np.full(n, -1, dtype=np.int64)
        feature = np.full(n, -1, dtype=np.int64)
        yes = np.full(n, -1, dtype=np.int64)
        no = np.full(n, -1, dtype=np.int64)
        missing = np.full(n, -1, dtype=np.int64)
        threshold = np.full(n, np.nan, dtype=np.float64)
        leaf_value = np.full(n, np.nan, dtype=np.float64)
        is_leaf = np.zeros(n, dtype=bool)
        for pos, node in enumerate(self.nodes):
            if node is None:
                continue
            node_id[pos] = node.node_id
            if node.is_leaf:
                is_leaf[pos] = True
                leaf_value[pos] = node.value
            else:
                feature[pos] = node.feature
                threshold[pos] = node.threshold
                yes[pos] = node.yes
                no[pos] = node.no
                missing[pos] = node.missing
        return {
            "node_id": node_id,
            "feature": feature,
            "threshold": threshold,
            "yes": yes,
            "no": no,
            "missing": missing,
            "leaf_value": leaf_value,
            "is_leaf": is_leaf,
        }


@dataclass(frozen=True)
class Ensemble:
    """Trees of one model plus the metadata the evaluator needs."""
    trees: Tuple[Tree, ...]
    num_classes: int
    num_features: int
    name: str = "xgboost"

    @property
    def num_trees(self) -> int:
        return len(self.trees)

    @property
    def trees_per_class(self) -> int:
        return len(self.trees) // self.num_classes


@dataclass(frozen=True)
class LoadedModel:
    ensemble: Ensemble
    transform: TransformRaw = field(default_factory=TransformRaw)

    @property
    def num_classes(self) -> int:
        return self.ensemble.num_classes

    @property
    def num_features(self) -> int:
        return self.ensemble.num_features


__all__ = ["LeafNode", "SplitNode", "Node", "Tree", "Ensemble", "LoadedModel"]
