from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared directory-tree fixtures used by the scanner, engine and CLI tests.
3. Isolation of the persisted configuration from the real user folder.
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, Iterator

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """
    Create the canonical small tree.

    Structure:
    /root
      a.txt
      /sub
        b.TXT
        c.log
    """
    root = tmp_path / "root"
    root.mkdir()
    (root / "a.txt").write_text("a", encoding="utf-8")

    sub = root / "sub"
    sub.mkdir()
    (sub / "b.TXT").write_text("b", encoding="utf-8")
    (sub / "c.log").write_text("c", encoding="utf-8")

    return root


@pytest.fixture
def wide_tree(tmp_path: Path) -> Path:
    """
    Create a tree several levels deep with a few files per directory.

    Every directory holds 'data_NN.csv', 'notes.TXT' and 'skip.bin', and has
    three sub-directories until depth 3 (40 directories in total).
    """
    root = tmp_path / "wide"
    root.mkdir()

    def populate(directory: Path, depth: int) -> None:
        for i in range(2):
            (directory / f"data_{depth}{i}.csv").write_text("x", encoding="utf-8")
        (directory / "notes.TXT").write_text("x", encoding="utf-8")
        (directory / "skip.bin").write_bytes(b"\x00")
        if depth >= 3:
            return
        for name in ("alpha", "beta", "gamma"):
            child = directory / name
            child.mkdir()
            populate(child, depth + 1)

    populate(root, 0)
    return root


@pytest.fixture
def isolated_user_data(tmp_path: Path) -> Iterator[Path]:
    """
    Redirect the user data directory to a temporary folder.

    Prevents tests from reading or writing the real ~/.filefinder.
    """
    data_dir = tmp_path / "user_data"
    data_dir.mkdir()

    mp = pytest.MonkeyPatch()
    mp.setattr("filefinder.domain.config.get_user_data_dir", lambda: str(data_dir))
    mp.setattr("filefinder.infra.logging.core.get_user_data_dir", lambda: str(data_dir))
    yield data_dir
    mp.undo()


@pytest.fixture
def mock_config_dict() -> Dict[str, Any]:
    """
    Return a valid, complete configuration dictionary for testing.

    Reflects the structure defined in 'filefinder.domain.config'.
    """
    return {
        "root_path": "/tmp/search_root",
        "pattern": "*.txt",
        "workers": 4,
        "match_mode": "exact",
        "matcher_strategy": "backtrack",
        "save_error_log": False,
        "error_log_path": "filefinder_errors.txt",
    }
