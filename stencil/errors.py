"""Error types surfaced to callers of the engine, the plugin and the CLI.

Three kinds of failure reach the user:

- configuration problems detected before any network call (unknown
  provider, no credential);
- a generation that produced no parsable file-system description;
- file-system errors while materializing the description.

None of them are retried.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from stencil.providers.base import GenerationResult


class StencilError(Exception):
    """Base class for all errors raised by Stencil."""


class ConfigurationError(StencilError):
    """Inputs are incomplete or invalid; raised before contacting a provider."""


class UnsupportedProviderError(ConfigurationError):
    """The requested provider identifier is not one Stencil knows about."""

    def __init__(self, provider: str | None, known: list[str] | tuple[str, ...] = ()):
        self.provider = provider
        self.known = list(known)
        if not provider:
            message = "No LLM provider was selected"
        else:
            message = f"Unsupported API type: {provider}"
        if self.known:
            message += f". Available: {', '.join(self.known)}"
        super().__init__(message)


class MissingCredentialError(ConfigurationError):
    """No API token was given and none of the fallback env vars is set."""

    def __init__(self, provider: str, env_vars: list[str] | tuple[str, ...] = ()):
        self.provider = provider
        self.env_vars = list(env_vars)
        message = f"No API token for provider '{provider}'"
        if self.env_vars:
            message += f". Pass --token or set {' / '.join(self.env_vars)}"
        super().__init__(message)


class GenerationError(StencilError):
    """The provider call did not yield a usable file-system description."""

    def __init__(self, message: str = "LLM didn't return a valid response",
                 result: GenerationResult | None = None):
        self.result = result
        if result is not None and result.error:
            message = f"{message}: {result.error}"
        super().__init__(message)


class MaterializationError(StencilError):
    """Writing a directory or file to disk failed."""

    def __init__(self, path: str | Path, cause: OSError | ValueError):
        self.path = Path(str(path).replace("\x00", "\\x00"))
        self.cause = cause
        if isinstance(cause, FileExistsError):
            message = f"Refusing to overwrite existing file: {self.path}"
        else:
            message = f"Failed to write {self.path}: {getattr(cause, 'strerror', None) or cause}"
        super().__init__(message)
