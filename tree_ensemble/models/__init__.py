"""Models package: decode, flatten and assemble XGBoost tree dumps.

`load_xgboost_from_json` is the entry point; the other names are exported
for callers that already hold decoded trees or a feature map.
"""

from .builder import BuildResult, build_tree
from .feature_map import load_feature_map, make_feature_resolver
from .loader import load_model_from_settings, load_xgboost_from_json
from .raw import RawModel, RawNode, decode_model
from .transformation import TransformRaw
from .tree import Ensemble, LeafNode, LoadedModel, SplitNode, Tree

__all__ = [
    "BuildResult",
    "build_tree",
    "load_feature_map",
    "make_feature_resolver",
    "load_model_from_settings",
    "load_xgboost_from_json",
    "RawModel",
    "RawNode",
    "decode_model",
    "TransformRaw",
    "Ensemble",
    "LeafNode",
    "LoadedModel",
    "SplitNode",
    "Tree",
]
