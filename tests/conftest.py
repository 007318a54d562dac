"""Shared pytest fixtures."""

from __future__ import annotations

import os

import pytest

_ENV_PREFIX = "DELTA_FEATURES_"


@pytest.fixture(autouse=True)
def _isolate_support_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear support-bound overrides inherited from the outer environment."""
    for key in [key for key in os.environ if key.startswith(_ENV_PREFIX)]:
        monkeypatch.delenv(key, raising=False)
