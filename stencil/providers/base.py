"""Base provider protocol and shared data models."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from pydantic import ValidationError

from stencil.schema import FileSystem

logger = logging.getLogger(__name__)


class ProviderStatus(Enum):
    """Outcome of a generation call."""
    SUCCESS = "success"
    FAILED = "failed"
    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"


@dataclass
class GenerationRequest:
    """Everything a provider needs for one structured-generation call."""
    prompt: str
    system_prompt: str
    timeout: int = 300


@dataclass
class GenerationResult:
    """Result from a provider call."""
    provider: str
    status: ProviderStatus
    file_system: FileSystem | None = None
    duration_ms: int = 0
    model: str | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None
    error: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status == ProviderStatus.SUCCESS and self.file_system is not None

    @property
    def duration_seconds(self) -> float:
        return self.duration_ms / 1000


@runtime_checkable
class ProviderAdapter(Protocol):
    """Protocol that all provider adapters must implement."""

    name: str
    display_name: str
    model: str

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Ask the provider for a file-system description."""
        ...

    def is_available(self) -> bool:
        """Check if the SDK is installed and a token resolves."""
        ...


class BaseProvider:
    """Base class with shared utilities for provider adapters."""

    name: str = "base"
    display_name: str = "Base"
    requires_key: bool = True

    def __init__(
        self,
        model: str,
        api_key: str | None = None,
        base_url: str | None = None,
        max_tokens: int = 16384,
        temperature: float | None = None,
        timeout: int = 300,
    ):
        self.model = model
        self.api_key = api_key
        self.base_url = base_url
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self._client = None

    def _sdk_installed(self) -> bool:
        raise NotImplementedError

    def is_available(self) -> bool:
        """SDK importable and, where the provider needs one, a token is set."""
        if not self._sdk_installed():
            return False
        return bool(self.api_key) or not self.requires_key

    def _make_parsed_result(
        self,
        payload: Any,
        duration_ms: int,
        input_tokens: int | None = None,
        output_tokens: int | None = None,
    ) -> GenerationResult:
        """Validate a structured payload into a successful result.

        An empty or malformed payload becomes a failed result rather than
        an exception.
        """
        if payload is None or payload == "":
            return self._make_error_result(
                f"{self.display_name} returned no structured output", duration_ms,
            )
        try:
            file_system = FileSystem.parse(payload)
        except (ValidationError, ValueError) as e:
            logger.debug("Unparsable %s payload: %s", self.name, e)
            return self._make_error_result(
                f"{self.display_name} returned an invalid file system: {e}", duration_ms,
            )

        return GenerationResult(
            provider=self.name,
            status=ProviderStatus.SUCCESS,
            file_system=file_system,
            duration_ms=duration_ms,
            model=self.model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )

    def _make_error_result(self, error: str, duration_ms: int = 0) -> GenerationResult:
        return GenerationResult(
            provider=self.name,
            status=ProviderStatus.FAILED,
            duration_ms=duration_ms,
            model=self.model,
            error=error,
        )

    def _make_timeout_result(self, timeout: int, duration_ms: int = 0) -> GenerationResult:
        return GenerationResult(
            provider=self.name,
            status=ProviderStatus.TIMEOUT,
            duration_ms=duration_ms,
            model=self.model,
            error=f"{self.display_name} timed out after {timeout}s",
        )

    def _make_unavailable_result(self) -> GenerationResult:
        return GenerationResult(
            provider=self.name,
            status=ProviderStatus.UNAVAILABLE,
            model=self.model,
            error=f"{self.display_name} is not available. Check the SDK installation and API token.",
        )

    @staticmethod
    def _now_ms() -> int:
        return int(time.time() * 1000)
