"""Loader for XGBoost JSON tree dumps."""

from .models.loader import load_xgboost_from_json

__all__ = ["load_xgboost_from_json"]
