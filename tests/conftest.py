"""Shared pytest fixtures and test configuration."""

from __future__ import annotations

import pytest

from tests.helpers import BACKEND, FakeUpstream
from thesisbot.config import ENV_ANALYSIS_URL, ENV_SEARCH_PROVIDER, Settings


@pytest.fixture
def settings(tmp_path, monkeypatch):
    """Fresh Settings singleton rooted in a temp dir, with zero retry delay."""
    monkeypatch.delenv(ENV_ANALYSIS_URL, raising=False)
    monkeypatch.delenv(ENV_SEARCH_PROVIDER, raising=False)
    Settings.reset()
    s = Settings.load(base_dir=tmp_path)
    s.update(analysis_url=BACKEND, retry_delay=0.0)
    yield s
    Settings.reset()


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()
