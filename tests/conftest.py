# Copyright (c) Syntropy Systems
"""Pytest fixtures for pasta tests."""

import os
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

# Store original cwd at module load time
_original_cwd = Path.cwd()

# Three well separated groups of four records each
RECORDS_CSV = """\
student,math,language
a1,0.0,0.2
a2,0.3,0.0
a3,0.1,0.4
a4,0.4,0.3
b1,10.0,10.2
b2,10.3,10.0
b3,10.1,10.4
b4,10.4,10.3
c1,20.0,0.2
c2,20.3,0.0
c3,20.1,0.4
c4,20.4,0.3
"""


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def records_csv(temp_dir: Path) -> Path:
    """Write a small record file with three obvious clusters."""
    path = temp_dir / "5de-jaar.csv"
    _ = path.write_text(RECORDS_CSV)
    return path


@pytest.fixture
def pasta_project(temp_dir: Path) -> Generator[Path, None, None]:
    """Create a temporary project directory with a pasta.yaml."""
    _ = (temp_dir / "pasta.yaml").write_text(
        "build:\n"
        "  mode: fast\n"
        "learn:\n"
        "  rounds: 1000\n"
    )
    _ = (temp_dir / "5de-jaar.csv").write_text(RECORDS_CSV)
    _ = (temp_dir / "6de-jaar.csv").write_text(RECORDS_CSV)

    # Change to temp directory
    os.chdir(temp_dir)

    yield temp_dir

    # Always return to original cwd
    os.chdir(_original_cwd)
