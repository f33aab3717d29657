"""Pytest configuration and fixtures for Shopbot tests."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from shopbot.config.settings import Settings

from tests.fakes import SAMPLE_KB


@pytest.fixture
def kb_file(tmp_path: Path) -> Path:
    path = tmp_path / "kb" / "restaurant.md"
    path.parent.mkdir()
    path.write_text(SAMPLE_KB, encoding="utf-8")
    return path


@pytest.fixture
def make_settings(tmp_path: Path, kb_file: Path):
    """Factory for isolated ``Settings`` (no ``.env``), pointing at ``kb_file``."""

    def _make(**overrides) -> Settings:
        values = {
            "KB_PATH": kb_file,
            "IMAGES_DIR": tmp_path / "images",
            "OPENROUTER_API_KEY": "sk-test",
            "KB_RELOAD_MODE": "request",
            "RETRIEVAL_STRATEGY": "lexical",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def completer() -> AsyncMock:
    """Completer whose ``complete`` returns a valid answer envelope by default."""
    fake = AsyncMock()
    fake.complete = AsyncMock(return_value='{"answer": "10:00-20:00"}')
    return fake
