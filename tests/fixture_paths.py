"""Shared fixture path helpers for tests."""

from __future__ import annotations

from pathlib import Path


def fixture_path(relative_path: str) -> Path:
    """Resolve a fixture path relative to tests/fixtures.

    Args:
        relative_path: Path under fixtures root.

    Returns:
        Absolute fixture path.
    """
    tests_root = Path(__file__).resolve().parent
    return tests_root / "fixtures" / relative_path


def mappings_fixture_text(file_name: str) -> str:
    """Read a Tiny v2 fixture from tests/fixtures/mappings as text."""
    return fixture_path(f"mappings/{file_name}").read_text(encoding="utf-8")
