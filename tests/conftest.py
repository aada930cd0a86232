"""Shared fixtures: project root, sample paths and fresh graphs."""

import shutil
from pathlib import Path

import pytest

from drawiograph.config import DiagramConfig
from drawiograph.logger import DiagramLogger
from drawiograph.model.graph import Graph

# Repository root (drawiograph/)
ROOT_DIR = Path(__file__).resolve().parent.parent


@pytest.fixture
def sample_dir() -> Path:
    """Path to the sample/ directory."""
    return ROOT_DIR / "sample"


@pytest.fixture
def sample_drawio_path(sample_dir: Path) -> Path:
    """Path to sample/two_tabs.drawio (tabs "Overview" and "Schema & Data")."""
    path = sample_dir / "two_tabs.drawio"
    if not path.exists():
        pytest.skip(f"Sample file not found: {path}")
    return path


@pytest.fixture
def sample_copy(sample_drawio_path: Path, tmp_path: Path) -> Path:
    """Writable copy of the sample document."""
    path = tmp_path / "two_tabs.drawio"
    shutil.copyfile(sample_drawio_path, path)
    return path


@pytest.fixture
def logger() -> DiagramLogger:
    """Logger with an empty warning list."""
    diagram_logger = DiagramLogger(config=DiagramConfig())
    diagram_logger.clear_warnings()
    return diagram_logger


@pytest.fixture
def graph(logger: DiagramLogger) -> Graph:
    """Empty graph (root and layer cells only)."""
    return Graph(logger=logger)
