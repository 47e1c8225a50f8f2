"""Google Gemini adapter via the google-genai SDK.

Uses JSON mode with the file-system schema attached, then validates the
returned text with the pydantic model.

Requires: pip install google-genai
Auth: Set GOOGLE_API_KEY or GEMINI_API_KEY environment variable.
"""

from __future__ import annotations

import asyncio
import logging

from stencil.providers.base import BaseProvider, GenerationRequest, GenerationResult
from stencil.schema import FileSystem

logger = logging.getLogger(__name__)


class GoogleProvider(BaseProvider):
    """Adapter for the Gemini API."""

    name = "google"
    display_name = "Gemini"

    def _sdk_installed(self) -> bool:
        try:
            from google import genai  # noqa: F401
        except ImportError:
            return False
        return True

    def _get_client(self):
        """Lazy-initialize the GenAI client."""
        if self._client is None:
            from google import genai
            from google.genai import types

            http_options = types.HttpOptions(timeout=self.timeout * 1000)
            if self.base_url:
                http_options.base_url = self.base_url
            self._client = genai.Client(api_key=self.api_key, http_options=http_options)
        return self._client

    def _build_config(self, request: GenerationRequest):
        from google.genai import types

        config = types.GenerateContentConfig(
            system_instruction=request.system_prompt,
            max_output_tokens=self.max_tokens,
            response_mime_type="application/json",
            response_json_schema=FileSystem.json_schema(),
        )
        if self.temperature is not None:
            config.temperature = self.temperature
        return config

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Request a file system in JSON mode."""
        if not self.is_available():
            return self._make_unavailable_result()

        start = self._now_ms()
        logger.debug("Requesting %s content (model=%s)", self.name, self.model)

        try:
            client = self._get_client()
            # Run in a thread to avoid blocking the event loop
            response = await asyncio.wait_for(
                asyncio.to_thread(
                    client.models.generate_content,
                    model=self.model,
                    contents=request.prompt,
                    config=self._build_config(request),
                ),
                timeout=request.timeout,
            )
        except asyncio.TimeoutError:
            return self._make_timeout_result(request.timeout, self._now_ms() - start)
        except Exception as e:
            return self._make_error_result(str(e), self._now_ms() - start)

        elapsed = self._now_ms() - start

        input_tokens = None
        output_tokens = None
        usage = getattr(response, "usage_metadata", None)
        if usage:
            input_tokens = getattr(usage, "prompt_token_count", None)
            output_tokens = getattr(usage, "candidates_token_count", None)

        return self._make_parsed_result(
            response.text,
            elapsed,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )
