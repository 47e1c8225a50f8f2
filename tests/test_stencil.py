"""Unit tests for Stencil configuration, schema, prompt and errors."""

import json

import pytest
from pydantic import ValidationError

from stencil.config import (
    DEFAULT_PROVIDERS,
    PROVIDERS,
    ProviderConfig,
    find_config_file,
    load_config,
    resolve_api_key,
)
from stencil.errors import GenerationError, MaterializationError, MissingCredentialError, UnsupportedProviderError
from stencil.prompt import BASE_INSTRUCTIONS, build_system_prompt
from stencil.providers.base import GenerationResult, ProviderStatus
from stencil.schema import FileSystem, FileSystemObject, ObjectType


# ─── Config Tests ─────────────────────────────────────────────


class TestConfig:
    def test_load_defaults(self, cfg):
        for name in PROVIDERS:
            assert name in cfg.providers
        assert cfg.providers["openai"].model == "gpt-4o"
        assert cfg.global_.default_provider == "openai"
        assert cfg.render.placeholder == "__name__"

    def test_default_providers_have_models(self):
        for name, defaults in DEFAULT_PROVIDERS.items():
            assert defaults.get("model"), f"Missing model for {name}"

    def test_ollama_needs_no_key(self, cfg):
        assert cfg.providers["ollama"].requires_key is False
        assert cfg.providers["ollama"].base_url.startswith("http://localhost")

    def test_yaml_overrides_merge_with_defaults(self, tmp_path):
        path = tmp_path / "stencil.yaml"
        path.write_text(
            "global:\n"
            "  timeout: 60\n"
            "  default_provider: anthropic\n"
            "providers:\n"
            "  openai:\n"
            "    model: gpt-4o-mini\n"
            "  google:\n"
            "    enabled: false\n"
            "render:\n"
            "  placeholder: '{{name}}'\n"
            "  extra_instructions:\n"
            "    - Use tabs\n"
        )
        cfg = load_config(path)

        assert cfg.global_.timeout == 60
        assert cfg.global_.default_provider == "anthropic"
        assert cfg.providers["openai"].model == "gpt-4o-mini"
        # Partial entries keep the default env vars
        assert cfg.providers["openai"].api_key_env == ["OPENAI_API_KEY"]
        assert cfg.providers["google"].enabled is False
        assert cfg.providers["anthropic"].model == DEFAULT_PROVIDERS["anthropic"]["model"]
        assert cfg.render.placeholder == "{{name}}"
        assert cfg.render.extra_instructions == ["Use tabs"]

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "stencil.yaml"
        path.write_text("")
        cfg = load_config(path)
        assert "openai" in cfg.providers

    def test_find_config_walks_up(self, tmp_path):
        (tmp_path / "stencil.yaml").write_text("global:\n  timeout: 10\n")
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        assert find_config_file(nested) == (tmp_path / "stencil.yaml").resolve()


class TestResolveApiKey:
    def test_explicit_token_wins(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "env-key")
        cfg = ProviderConfig(model="m", api_key="file-key", api_key_env=["OPENAI_API_KEY"])
        assert resolve_api_key(cfg, "cli-key") == "cli-key"

    def test_config_before_env(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "env-key")
        cfg = ProviderConfig(model="m", api_key="file-key", api_key_env=["OPENAI_API_KEY"])
        assert resolve_api_key(cfg) == "file-key"

    def test_env_fallback_order(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "gemini")
        cfg = ProviderConfig(model="m", api_key_env=["GOOGLE_API_KEY", "GEMINI_API_KEY"])
        assert resolve_api_key(cfg) == "gemini"
        monkeypatch.setenv("GOOGLE_API_KEY", "google")
        assert resolve_api_key(cfg) == "google"

    def test_nothing_set(self):
        cfg = ProviderConfig(model="m", api_key_env=["OPENAI_API_KEY"])
        assert resolve_api_key(cfg) is None


# ─── Schema Tests ─────────────────────────────────────────────


class TestSchema:
    def test_parse_wrapper(self):
        fs = FileSystem.parse({"fileContents": [{"path": "./a.py", "type": "file", "content": "x"}]})
        assert len(fs) == 1
        assert fs.files[0].content == "x"
        assert fs.directories == []

    def test_parse_json_text(self):
        text = json.dumps({"fileContents": [{"path": "./docs", "type": "directory"}]})
        fs = FileSystem.parse(text)
        assert fs.file_contents[0].type == ObjectType.DIRECTORY

    def test_parse_bare_list(self):
        fs = FileSystem.parse([{"path": "./a", "type": "directory"}])
        assert fs.directories[0].path == "./a"

    def test_content_optional(self):
        obj = FileSystemObject(path="./empty.txt", type="file")
        assert obj.content is None
        assert obj.is_file

    def test_relative_path_strips_marker(self):
        obj = FileSystemObject(path="./src/app.py", type="file")
        assert str(obj.relative_path) == "src/app.py"

    def test_backslashes_normalized(self):
        obj = FileSystemObject(path=".\\src\\app.py", type="file")
        assert str(obj.relative_path) == "src/app.py"

    @pytest.mark.parametrize(
        "path", ["/etc/passwd", "../up.txt", "./a/../../b", "C:/win.ini", "", "./a\x00b.txt"],
    )
    def test_rejects_unsafe_paths(self, path):
        with pytest.raises(ValidationError):
            FileSystemObject(path=path, type="file")

    def test_rejects_unknown_type(self):
        with pytest.raises(ValidationError):
            FileSystemObject(path="./x", type="symlink")

    def test_json_schema_uses_wire_names(self):
        schema = FileSystem.json_schema()
        assert "fileContents" in schema["properties"]
        dumped = json.dumps(schema)
        assert '"directory"' in dumped and '"file"' in dumped

    def test_dump_by_alias(self):
        fs = FileSystem.parse([{"path": "./a", "type": "directory"}])
        assert fs.model_dump(by_alias=True, mode="json")["fileContents"][0]["type"] == "directory"


# ─── Prompt Tests ─────────────────────────────────────────────


class TestSystemPrompt:
    def test_base_only(self):
        assert build_system_prompt() == BASE_INSTRUCTIONS

    def test_placeholder_instruction(self):
        prompt = build_system_prompt(placeholder="__name__")
        assert prompt.startswith(BASE_INSTRUCTIONS)
        assert '"__name__"' in prompt

    def test_extra_instructions_in_order(self):
        prompt = build_system_prompt(extra_instructions=["Use TypeScript", "  ", "Add tests"])
        assert prompt.index("Use TypeScript") < prompt.index("Add tests")
        assert "\n\n  \n\n" not in prompt
        assert prompt.count("\n\n") == 2


# ─── Error Tests ──────────────────────────────────────────────


class TestErrors:
    def test_unsupported_lists_known(self):
        err = UnsupportedProviderError("cohere", ["openai", "anthropic"])
        assert "cohere" in str(err)
        assert "openai, anthropic" in str(err)

    def test_no_provider_message(self):
        assert "No LLM provider" in str(UnsupportedProviderError(None))

    def test_missing_credential_mentions_env(self):
        err = MissingCredentialError("openai", ["OPENAI_API_KEY"])
        assert "OPENAI_API_KEY" in str(err)

    def test_generation_error_carries_result(self):
        result = GenerationResult(provider="openai", status=ProviderStatus.FAILED, error="HTTP 500")
        err = GenerationError(result=result)
        assert err.result is result
        assert "HTTP 500" in str(err)
        assert "valid response" in str(err)

    def test_materialization_error_exists(self, tmp_path):
        err = MaterializationError(tmp_path / "a.txt", FileExistsError(17, "File exists"))
        assert "Refusing to overwrite" in str(err)
