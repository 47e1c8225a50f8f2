"""Shared fixtures for Stencil tests."""

from __future__ import annotations

import pytest

from stencil.config import DEFAULT_PROVIDERS, StencilConfig, load_config
from stencil.schema import FileSystem


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def no_provider_env(monkeypatch):
    """Keep real API keys from the environment out of every test."""
    for defaults in DEFAULT_PROVIDERS.values():
        for var in defaults.get("api_key_env", []):
            monkeypatch.delenv(var, raising=False)


@pytest.fixture
def cfg(tmp_path) -> StencilConfig:
    """Default configuration, never read from the developer's machine."""
    return load_config(tmp_path / "absent.yaml")


@pytest.fixture
def sample_fs() -> FileSystem:
    return FileSystem.parse({
        "fileContents": [
            {"path": "./src/__name__/__init__.py", "type": "file", "content": '"""__name__ package."""\n'},
            {"path": "./src/__name__/core.py", "type": "file", "content": "def run():\n    return 1\n"},
            {"path": "./docs", "type": "directory"},
            {"path": "./README.md", "type": "file", "content": "# __name__\n"},
            {"path": "./.gitkeep", "type": "file"},
        ]
    })
