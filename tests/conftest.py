"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_sessionstart() -> None:
    """Add src and repository root to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    for import_root in (project_root / "src", project_root):
        if str(import_root) not in sys.path:
            sys.path.insert(0, str(import_root))


@pytest.fixture
def base_mappings_path() -> Path:
    """Base intermediary-to-named table shared by cache tests."""
    return Path(__file__).resolve().parent / "fixtures" / "mappings" / "base.tiny"
