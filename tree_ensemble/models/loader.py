"""
Load an XGBoost JSON dump into an immutable `LoadedModel`.

Steps, each of which can fail the whole load:
1. open and decode the dump (at least one tree),
2. read the optional feature map,
3. validate class count, depth hint and tree/class divisibility,
4. build every tree in file order,
5. record the widest per-tree feature count and attach the raw transform.

Nothing partial is ever returned; the first error aborts the load and is
raised with the failing tree index in its context.
"""
from __future__ import annotations
from typing import Optional

from loguru import logger

from ..core.config import ModelSettings, Settings
from ..core.errors import (
    EmptyModelError,
    InvalidClassCountError,
    ModelIOError,
    ModelLoadError,
    TreeClassMismatchError,
)
from ..core.logsetup import setup_logging
from .builder import build_tree, check_depth_hint
from .feature_map import FeatureMap, load_feature_map, make_feature_resolver
from .raw import RawModel, decode_model
from .transformation import TransformRaw
from .tree import Ensemble, LoadedModel


def read_model_file(model_path: str) -> RawModel:
    """Open and decode a dump; the file is closed on every exit path."""
    try:
        with open(model_path, "rb") as f:
            return decode_model(f, path=model_path)
    except OSError as e:
        raise ModelIOError(f"cannot read model file: {e.strerror or e}", path=model_path) from e


def _load(
    model_path: str,
    feature_map_path: str,
    num_classes: int,
    max_depth: int,
) -> LoadedModel:
    raw = read_model_file(model_path)
    num_trees = len(raw)
    if num_trees == 0:
        raise EmptyModelError("no trees in file", path=model_path)

    feature_map: Optional[FeatureMap] = None
    if feature_map_path:
        feature_map = load_feature_map(feature_map_path)

    if num_classes <= 0:
        raise InvalidClassCountError(f"num classes cannot be 0 or smaller: {num_classes}", classes=num_classes)
    check_depth_hint(max_depth)
    if num_trees % num_classes != 0:
        raise TreeClassMismatchError(num_trees, num_classes, path=model_path)

    resolver = make_feature_resolver(feature_map)
    trees = []
    max_feat = 0
    for i, root in enumerate(raw.trees):
        try:
            tree, num_feat = build_tree(root, max_depth=max_depth, resolver=resolver)
        except ModelLoadError as e:
            e.with_context(tree_index=i, path=model_path)
            raise
        trees.append(tree)
        max_feat = max(max_feat, num_feat)
        logger.debug(f"[Loader] tree={i} nodes={tree.node_count} features={num_feat}")

    ensemble = Ensemble(trees=tuple(trees), num_classes=num_classes, num_features=max_feat)
    # Only the raw transform is produced here; other kinds belong to the evaluator.
    transform = TransformRaw(num_output_groups=num_classes)
    return LoadedModel(ensemble=ensemble, transform=transform)


def load_xgboost_from_json(
    model_path: str,
    feature_map_path: str = "",
    num_classes: int = 1,
    max_depth: int = 0,
    load_transformation: bool = False,
) -> LoadedModel:
    """Load an XGBoost JSON dump.

    Args:
        model_path: Path of the JSON dump (array of nested tree objects).
        feature_map_path: Optional `index name type` file. Empty string means
            split features use the default `f<index>` names.
        num_classes: Number of output groups; must divide the tree count.
        max_depth: Upper bound on tree depth used to pre-size each tree. 0
            means unknown: trees grow as needed and are sorted by node id.
        load_transformation: Reserved. The flag is accepted but not read; the
            raw (identity) transform is always attached.

    Raises:
        ModelLoadError: any subclass, see `tree_ensemble.core.errors`.
    """
    logger.info(
        f"[Loader] loading model={model_path} fmap={feature_map_path or '-'} "
        f"classes={num_classes} max_depth={max_depth}"
    )
    try:
        model = _load(model_path, feature_map_path, num_classes, max_depth)
    except ModelLoadError as e:
        logger.error(f"[Loader] failed model={model_path} err={e}")
        raise
    logger.info(
        f"[Loader] loaded model={model_path} trees={model.ensemble.num_trees} "
        f"classes={model.num_classes} features={model.num_features}"
    )
    return model


def load_model_from_settings(settings: Settings | ModelSettings) -> LoadedModel:
    """Run `load_xgboost_from_json` with the `model` section of the settings.

    A full `Settings` with a `logging` section also reconfigures the loguru sink.
    """
    if isinstance(settings, Settings):
        if settings.logging is not None:
            setup_logging(settings.logging.level)
        ms = settings.model
    else:
        ms = settings
    return load_xgboost_from_json(
        ms.path,
        feature_map_path=ms.feature_map_path,
        num_classes=ms.num_classes,
        max_depth=ms.max_depth,
        load_transformation=ms.load_transformation,
    )


__all__ = ["load_xgboost_from_json", "load_model_from_settings", "read_model_file"]
