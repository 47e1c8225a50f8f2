"""Stencil provider adapters."""

from stencil.providers.base import (
    BaseProvider,
    GenerationRequest,
    GenerationResult,
    ProviderAdapter,
    ProviderStatus,
)
from stencil.providers.anthropic_provider import AnthropicProvider
from stencil.providers.google_provider import GoogleProvider
from stencil.providers.openai_provider import HuggingFaceProvider, OllamaProvider, OpenAIProvider

PROVIDER_CLASSES: dict[str, type[BaseProvider]] = {
    "openai": OpenAIProvider,
    "anthropic": AnthropicProvider,
    "google": GoogleProvider,
    "huggingface": HuggingFaceProvider,
    "ollama": OllamaProvider,
}

__all__ = [
    "BaseProvider",
    "GenerationRequest",
    "GenerationResult",
    "ProviderAdapter",
    "ProviderStatus",
    "AnthropicProvider",
    "GoogleProvider",
    "HuggingFaceProvider",
    "OllamaProvider",
    "OpenAIProvider",
    "PROVIDER_CLASSES",
]
