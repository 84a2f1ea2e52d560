"""
Exception hierarchy for model loading.

Every failure raised while loading an ensemble derives from `ModelLoadError`.
Errors keep a `context` dict (file path, tree index, node id, feature name,
line number...) which is rendered into the message so a failed load can be
diagnosed without re-running it with extra logging.

A load is all-or-nothing: none of these errors leave a partially built
ensemble behind and none of them are retried internally.
"""
from __future__ import annotations
from typing import Any, Dict


class ModelLoadError(Exception):
    """Base class for every model loading failure."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = {k: v for k, v in context.items() if v is not None}

    def with_context(self, **context: Any) -> "ModelLoadError":
        """Attach extra context (e.g. the failing tree index) and return self."""
        for k, v in context.items():
            if v is not None:
                self.context.setdefault(k, v)
        return self

    @property
    def tree_index(self):
        return self.context.get("tree_index")

    def __str__(self) -> str:
        if not self.context:
            return self.message
        ctx = ", ".join(f"{k}={v!r}" if isinstance(v, str) else f"{k}={v}" for k, v in self.context.items())
        return f"{self.message} ({ctx})"


class ModelIOError(ModelLoadError):
    """A model or feature-map file could not be opened or read."""


class DecodeError(ModelLoadError):
    """The model file is not valid JSON or does not follow the dump layout."""


class EmptyModelError(ModelLoadError):
    """The model file decoded to zero trees."""


class InvalidClassCountError(ModelLoadError):
    """Declared class count is zero or negative."""


class InvalidDepthError(ModelLoadError):
    """Depth hint is negative or too large to pre-size a tree with."""


class TreeClassMismatchError(ModelLoadError):
    """Tree count is not evenly divisible by the declared class count."""

    def __init__(self, num_trees: int, num_classes: int, **context: Any):
        super().__init__(
            f"wrong number of trees {num_trees} for number of classes {num_classes}",
            trees=num_trees,
            classes=num_classes,
            **context,
        )
        self.num_trees = num_trees
        self.num_classes = num_classes


class MalformedMappingError(ModelLoadError):
    """A feature-map line is not `<int index> <name> <type>`."""


class DuplicateFeatureNameError(MalformedMappingError):
    """A feature name appears more than once in a feature map."""


class UnknownFeatureError(ModelLoadError):
    """A split references a feature that the feature map does not define."""


class InvalidFeatureNameError(ModelLoadError):
    """Without a feature map, a split feature is not `<marker><digits>` (f0, f1, ...)."""


class DepthCapacityExceededError(ModelLoadError):
    """A node id does not fit the array pre-sized from the depth hint."""

    def __init__(self, max_depth: int, node_id: int, capacity: int, **context: Any):
        super().__init__(
            f"wrong tree max depth {max_depth}: node id {node_id} does not fit capacity {capacity}; "
            f"check the model's real max depth or pass max_depth=0 to size trees automatically",
            max_depth=max_depth,
            node_id=node_id,
            capacity=capacity,
            **context,
        )
        self.max_depth = max_depth
        self.node_id = node_id
        self.capacity = capacity


class TreeStructureError(ModelLoadError):
    """The dump is not a proper tree (duplicate ids, dangling child references, bad root)."""


__all__ = [
    "ModelLoadError",
    "ModelIOError",
    "DecodeError",
    "EmptyModelError",
    "InvalidClassCountError",
    "InvalidDepthError",
    "TreeClassMismatchError",
    "MalformedMappingError",
    "DuplicateFeatureNameError",
    "UnknownFeatureError",
    "InvalidFeatureNameError",
    "DepthCapacityExceededError",
    "TreeStructureError",
]
