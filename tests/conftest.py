"""Pytest fixtures for linqpadc tests."""
from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture
def write_script(tmp_path: Path) -> Callable[..., Path]:
    """Write a .linq file from a header and body; returns its path."""

    def _write(body: str, header: str = '<Query Kind="Program" />', name: str = "hello.linq") -> Path:
        path = tmp_path / name
        path.write_text(f"{header}\n\n{body}", encoding="utf-8")
        return path

    return _write
