"""Generation engine — selects a provider adapter and dispatches the request."""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from stencil.config import PROVIDERS, ProviderConfig, StencilConfig, resolve_api_key
from stencil.errors import (
    ConfigurationError,
    GenerationError,
    MissingCredentialError,
    UnsupportedProviderError,
)
from stencil.prompt import build_system_prompt
from stencil.providers import PROVIDER_CLASSES, GenerationRequest, GenerationResult, ProviderAdapter

logger = logging.getLogger(__name__)


class StencilEngine:
    """Turns a build description into a validated file-system description."""

    def __init__(self, config: StencilConfig):
        self.config = config

    @property
    def provider_names(self) -> list[str]:
        """Enabled providers, in the order they are offered to the user."""
        return [
            name for name in PROVIDERS
            if name in self.config.providers and self.config.providers[name].enabled
        ]

    def _provider_config(self, provider: str | None) -> ProviderConfig:
        if not provider or provider not in self.provider_names:
            raise UnsupportedProviderError(provider, self.provider_names)
        return self.config.providers[provider]

    def create_adapter(
        self,
        provider: str | None,
        model: str | None = None,
        token: str | None = None,
        base_url: str | None = None,
    ) -> ProviderAdapter:
        """Create an adapter for one call, resolving the token up front.

        Raises ``UnsupportedProviderError`` or ``MissingCredentialError``
        without touching the network.
        """
        cfg = self._provider_config(provider)
        api_key = resolve_api_key(cfg, token)
        if cfg.requires_key and not api_key:
            raise MissingCredentialError(provider, cfg.api_key_env)

        cls = PROVIDER_CLASSES[provider]
        return cls(
            model=model or cfg.model,
            api_key=api_key,
            base_url=base_url or cfg.base_url,
            max_tokens=cfg.max_tokens,
            temperature=cfg.temperature,
            timeout=self.config.global_.timeout,
        )

    def get_available_providers(self) -> dict[str, bool]:
        """Check which providers have an SDK installed and a token set."""
        available: dict[str, bool] = {}
        for name in self.provider_names:
            try:
                adapter = self.create_adapter(name)
            except ConfigurationError:
                available[name] = False
                continue
            available[name] = adapter.is_available()
        return available

    async def generate(
        self,
        description: str,
        provider: str | None,
        model: str | None = None,
        token: str | None = None,
        base_url: str | None = None,
        extra_instructions: Iterable[str] = (),
        placeholder: str | None = None,
        on_progress: Callable[[str, str], None] | None = None,
    ) -> GenerationResult:
        """Ask ``provider`` for the file system described by ``description``.

        The result returned always carries a parsed file system; any other
        outcome raises ``GenerationError``.
        """
        if not description or not description.strip():
            raise ConfigurationError("A build description is required")

        adapter = self.create_adapter(provider, model=model, token=token, base_url=base_url)

        instructions = list(self.config.render.extra_instructions)
        instructions.extend(extra_instructions)
        request = GenerationRequest(
            prompt=description,
            system_prompt=build_system_prompt(placeholder, instructions),
            timeout=self.config.global_.timeout,
        )

        if on_progress:
            on_progress(adapter.name, "running")
        logger.info("Generating llm response with %s (%s)", adapter.display_name, adapter.model)

        result = await adapter.generate(request)

        if on_progress:
            on_progress(adapter.name, result.status.value)

        if not result.is_success:
            logger.warning("%s generation failed: %s", adapter.name, result.error)
            raise GenerationError(result=result)

        logger.info(
            "%s returned %d entries in %.1fs",
            adapter.name, len(result.file_system), result.duration_seconds,
        )
        return result
