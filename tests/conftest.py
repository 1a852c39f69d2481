"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from iofs.config import Settings
from iofs.filesystem import AsyncFileSystem


@pytest.fixture
def fs() -> AsyncFileSystem:
    """Filesystem with a tiny chunk size so copies stream in many chunks."""
    return AsyncFileSystem.create(Settings(chunk_size=7))


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """Create tree/{x, sub/{y, z}} with distinct content in each file."""
    root = tmp_path / "tree"
    (root / "sub").mkdir(parents=True)
    (root / "x").write_bytes(b"x-content")
    (root / "sub" / "y").write_bytes(b"y-content")
    (root / "sub" / "z").write_bytes(b"z" * 100)
    return root


@pytest.fixture
def in_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test with tmp_path as the working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path
