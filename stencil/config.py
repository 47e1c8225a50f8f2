"""Configuration management for Stencil."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

CONFIG_FILENAME = "stencil.yaml"

# Supported provider identifiers, in the order they are offered to the user.
PROVIDERS: tuple[str, ...] = ("openai", "anthropic", "google", "huggingface", "ollama")


class ProviderConfig(BaseModel):
    """Configuration for a single LLM provider.

    api_key: Token stored in the config file (env vars are preferred)
    api_key_env: Env vars checked, in order, when no token is given
    base_url: Override for the provider's API endpoint
    """
    enabled: bool = True
    model: str = ""
    api_key: str | None = None
    api_key_env: list[str] = Field(default_factory=list)
    base_url: str | None = None
    max_tokens: int = 16384
    temperature: float | None = None
    requires_key: bool = True


class RenderConfig(BaseModel):
    """How generated file systems are written out."""
    placeholder: str = "__name__"
    substitute_name: bool = True
    extra_instructions: list[str] = Field(default_factory=list)


class GlobalConfig(BaseModel):
    """Global Stencil configuration."""
    timeout: int = 300
    max_parallel: int = 4
    default_provider: str = "openai"


class StencilConfig(BaseModel):
    """Root configuration model."""
    global_: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    providers: dict[str, ProviderConfig] = Field(default_factory=dict)
    render: RenderConfig = Field(default_factory=RenderConfig)

    model_config = {"populate_by_name": True}


DEFAULT_PROVIDERS: dict[str, dict[str, Any]] = {
    "openai": {
        "model": "gpt-4o",
        "api_key_env": ["OPENAI_API_KEY"],
    },
    "anthropic": {
        "model": "claude-sonnet-4-20250514",
        "api_key_env": ["ANTHROPIC_API_KEY"],
    },
    "google": {
        "model": "gemini-2.5-flash",
        "api_key_env": ["GOOGLE_API_KEY", "GEMINI_API_KEY"],
    },
    "huggingface": {
        "model": "Qwen/Qwen2.5-Coder-32B-Instruct",
        "api_key_env": ["HF_TOKEN", "HUGGINGFACE_API_KEY"],
        "base_url": "https://router.huggingface.co/v1",
    },
    "ollama": {
        "model": "qwen2.5-coder:14b",
        "api_key_env": ["OLLAMA_API_KEY"],
        "base_url": "http://localhost:11434/v1",
        "requires_key": False,
    },
}


def resolve_api_key(cfg: ProviderConfig, token: str | None = None) -> str | None:
    """Resolve a token: explicit value, then config file, then env vars."""
    if token:
        return token
    if cfg.api_key:
        return cfg.api_key
    for var in cfg.api_key_env:
        value = os.environ.get(var)
        if value:
            return value
    return None


def find_config_file(start_dir: str | Path | None = None) -> Path | None:
    """Find stencil.yaml by walking up from start_dir."""
    if start_dir is None:
        start_dir = Path.cwd()
    else:
        start_dir = Path(start_dir)

    current = start_dir.resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.exists():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent

    # Check home directory
    home_config = Path.home() / ".config" / "stencil" / CONFIG_FILENAME
    if home_config.exists():
        return home_config

    return None


def load_config(config_path: str | Path | None = None) -> StencilConfig:
    """Load configuration from stencil.yaml.

    Priority: specified path > walking up from cwd > ~/.config/stencil/stencil.yaml > defaults
    """
    if config_path:
        path = Path(config_path)
    else:
        path = find_config_file()

    if path and path.exists():
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    else:
        raw = {}

    # Fill in missing providers and missing keys of partial entries
    providers_raw = raw.get("providers") or {}
    for name, defaults in DEFAULT_PROVIDERS.items():
        merged = dict(defaults)
        merged.update(providers_raw.get(name) or {})
        providers_raw[name] = merged

    raw["providers"] = providers_raw
    return StencilConfig.model_validate(raw)
