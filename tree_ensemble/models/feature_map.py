"""Feature-map parsing and split-feature resolution.

A feature map is the `fmap.txt` file xgboost accepts next to a dump, one
feature per line:

    0 sepal_length q
    1 sepal_width q

Without a feature map, split features follow xgboost's default names
(`f0`, `f1`, ...) and the index is read from the name itself. Which of the
two rules applies is decided once per load by `make_feature_resolver`.
"""
from __future__ import annotations
import re
from typing import Dict, Optional, Protocol

from loguru import logger

from ..core.errors import (
    DuplicateFeatureNameError,
    InvalidFeatureNameError,
    MalformedMappingError,
    ModelIOError,
    UnknownFeatureError,
)

FeatureMap = Dict[str, int]

_INDEX_RE = re.compile(r"[0-9]+")


def load_feature_map(path: str) -> FeatureMap:
    """Read `<index> <name> <type>` lines into a name -> index dict.

    Any repeated name is an error, wherever it appears in the file.
    """
    feature_map: FeatureMap = {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                tokens = line.split()
                if len(tokens) != 3:
                    raise MalformedMappingError(
                        f"wrong feature map format: expected 3 fields, got {len(tokens)}",
                        path=path, line=line_no, text=line.rstrip("\r\n"),
                    )
                idx_token, name, _ftype = tokens
                if not _INDEX_RE.fullmatch(idx_token):
                    raise MalformedMappingError(
                        f"feature index '{idx_token}' is not a non-negative integer",
                        path=path, line=line_no, text=line.rstrip("\r\n"),
                    )
                if name in feature_map:
                    raise DuplicateFeatureNameError(
                        f"duplicate feature name '{name}'", path=path, line=line_no, feature=name,
                    )
                feature_map[name] = int(idx_token)
    except OSError as e:
        raise ModelIOError(f"cannot read feature map: {e.strerror or e}", path=path) from e
    except UnicodeDecodeError as e:
        raise MalformedMappingError(f"feature map is not valid UTF-8: {e.reason}", path=path) from e
    logger.debug(f"[FeatureMap] loaded path={path} features={len(feature_map)}")
    return feature_map


class FeatureResolver(Protocol):
    def __call__(self, name: Optional[str]) -> int: ...


class MappedFeatureResolver:
    """Resolve names through an explicit feature map."""

    def __init__(self, feature_map: FeatureMap):
        self.feature_map = feature_map

    def __call__(self, name: Optional[str]) -> int:
        try:
            return self.feature_map[name]
        except KeyError:
            raise UnknownFeatureError(f"cannot find feature {name!r} in feature map", feature=name) from None


class ConventionFeatureResolver:
    """Resolve xgboost default names: one marker character followed by digits."""

    def __call__(self, name: Optional[str]) -> int:
        if not name or not _INDEX_RE.fullmatch(name[1:]):
            raise InvalidFeatureNameError(
                f"feature name {name!r} does not follow the '<marker><digits>' convention (e.g. f0); "
                f"pass a feature map to use custom names",
                feature=name,
            )
        return int(name[1:])


def make_feature_resolver(feature_map: Optional[FeatureMap] = None) -> FeatureResolver:
    if feature_map is not None:
        return MappedFeatureResolver(feature_map)
    return ConventionFeatureResolver()


__all__ = [
    "FeatureMap",
    "FeatureResolver",
    "MappedFeatureResolver",
    "ConventionFeatureResolver",
    "load_feature_map",
    "make_feature_resolver",
]
