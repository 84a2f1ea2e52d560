"""Output transformation descriptors.

The numeric transform applied to raw ensemble scores lives with the
evaluator. The loader only records which transform to use and how many
output groups it produces.
"""
from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class TransformRaw:
    """Identity transform: raw scores, one per output group."""
    num_output_groups: int = 1
    name: str = "raw"


__all__ = ["TransformRaw"]
