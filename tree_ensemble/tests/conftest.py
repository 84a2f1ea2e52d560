"""
Pytest fixtures for the tree ensemble loader test suite.

Model dumps are generated in code rather than shipped as files so each test
states the exact tree shape it relies on.
"""
import json
from typing import Dict, List

import pytest

from dump_helpers import full_tree


@pytest.fixture
def write_model(tmp_path):
    """Write a list of tree objects as a JSON dump and return its path."""
    def _write(trees: List[Dict], name: str = "model.json") -> str:
        path = tmp_path / name
        path.write_text(json.dumps(trees), encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def write_fmap(tmp_path):
    """Write feature-map lines and return the file path."""
    def _write(lines: List[str], name: str = "fmap.txt") -> str:
        path = tmp_path / name
        path.write_text("".join(line + "\n" for line in lines), encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def two_class_depth4_trees() -> List[Dict]:
    """8 full depth-4 trees; tree t splits on features f0..f{t}, so it uses t+1 distinct features."""
    return [full_tree(4, feature_of=lambda nid, t=t: f"f{nid % (t + 1)}") for t in range(8)]
