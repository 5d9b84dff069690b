"""Shared fixtures for the memos_cloud test suites."""

import os

import pytest

from memos_cloud.plugins.memos import env


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Hide real MEMOS_* variables and ~/.openclaw/.env from every test."""
    for name in list(os.environ):
        if name.startswith("MEMOS_"):
            monkeypatch.delenv(name, raising=False)
    env.reset_env_cache(tmp_path / "missing.env")
    yield tmp_path
    env.reset_env_cache()
