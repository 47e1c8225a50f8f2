"""OpenAI adapter, plus the OpenAI-compatible Hugging Face and Ollama endpoints.

Uses structured outputs: ``chat.completions.parse`` with the pydantic
``FileSystem`` model as ``response_format``, so the SDK both sends the JSON
schema and validates the reply.

Requires: pip install openai
Auth: OPENAI_API_KEY (or HF_TOKEN for Hugging Face; Ollama needs none).
"""

from __future__ import annotations

import asyncio
import logging

from stencil.providers.base import BaseProvider, GenerationRequest, GenerationResult
from stencil.schema import FileSystem

logger = logging.getLogger(__name__)


class OpenAIProvider(BaseProvider):
    """Adapter for the OpenAI Chat Completions API."""

    name = "openai"
    display_name = "OpenAI"

    # Newer OpenAI models reject ``max_tokens``; compatible servers only know it.
    max_tokens_param = "max_completion_tokens"

    def _sdk_installed(self) -> bool:
        try:
            import openai  # noqa: F401
        except ImportError:
            return False
        return True

    def _get_client(self):
        """Lazy-initialize the OpenAI client."""
        if self._client is None:
            from openai import OpenAI

            self._client = OpenAI(
                # The SDK insists on a key even for servers that ignore it
                api_key=self.api_key or self.name,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    def _build_kwargs(self, request: GenerationRequest) -> dict:
        kwargs: dict = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": request.system_prompt},
                {"role": "user", "content": request.prompt},
            ],
            "response_format": FileSystem,
            self.max_tokens_param: self.max_tokens,
        }
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature
        return kwargs

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Request a file system via structured outputs."""
        if not self.is_available():
            return self._make_unavailable_result()

        start = self._now_ms()
        logger.debug("Requesting %s completion (model=%s, base_url=%s)",
                     self.name, self.model, self.base_url or "default")

        try:
            client = self._get_client()
            completion = await asyncio.wait_for(
                asyncio.to_thread(client.chat.completions.parse, **self._build_kwargs(request)),
                timeout=request.timeout,
            )
        except asyncio.TimeoutError:
            return self._make_timeout_result(request.timeout, self._now_ms() - start)
        except Exception as e:
            return self._make_error_result(str(e), self._now_ms() - start)

        elapsed = self._now_ms() - start

        if not completion.choices:
            return self._make_error_result(f"{self.display_name} returned no choices", elapsed)

        message = completion.choices[0].message
        if getattr(message, "refusal", None):
            return self._make_error_result(f"Model refused: {message.refusal}", elapsed)

        # Compatible servers sometimes leave ``parsed`` empty but send the JSON
        payload = message.parsed if message.parsed is not None else message.content

        usage = completion.usage
        return self._make_parsed_result(
            payload,
            elapsed,
            input_tokens=getattr(usage, "prompt_tokens", None),
            output_tokens=getattr(usage, "completion_tokens", None),
        )


class HuggingFaceProvider(OpenAIProvider):
    """Hugging Face Inference Providers through the OpenAI-compatible router."""

    name = "huggingface"
    display_name = "Hugging Face"
    max_tokens_param = "max_tokens"


class OllamaProvider(OpenAIProvider):
    """Local Ollama server through its OpenAI-compatible ``/v1`` endpoint."""

    name = "ollama"
    display_name = "Ollama"
    max_tokens_param = "max_tokens"
    requires_key = False
