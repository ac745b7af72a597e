"""Pytest configuration and fixtures for GraphDiff tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from graphdiff_cli.models import Graph
from graphdiff_cli.parser import DotGraphParser


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path_factory, monkeypatch):
    """Point the config file at a throwaway location for every test."""
    config_file = tmp_path_factory.mktemp("graphdiff_home") / "config.toml"
    monkeypatch.setattr("graphdiff_cli.config.CONFIG_FILE", config_file)
    monkeypatch.setattr("graphdiff_cli.config_manager.CONFIG_FILE", config_file)
    return config_file


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def fixtures_path() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_dot() -> str:
    """Three nodes: va fans out to vb and vc."""
    return """digraph G {
  va -> vb;
  va -> vc;
  { rank = same; 1.0; va; }
  { rank = same; 2.0; vb; vc; }
}
"""


@pytest.fixture
def sample_graph(sample_dot: str) -> Graph:
    return DotGraphParser().parse_text(sample_dot, source="sample")


@pytest.fixture
def dot_pair(temp_dir: Path, sample_dot: str):
    """Two identical graph files on disk."""
    left = temp_dir / "left.dot"
    right = temp_dir / "right.dot"
    left.write_text(sample_dot)
    right.write_text(sample_dot)
    return left, right
