"""Anthropic adapter via the anthropic SDK.

Claude has no JSON ``response_format``; the file-system schema is offered as
the only tool and ``tool_choice`` forces the model to call it, so the tool
input is the structured result.

Requires: pip install anthropic
Auth: Set ANTHROPIC_API_KEY.
"""

from __future__ import annotations

import asyncio
import logging

from stencil.providers.base import BaseProvider, GenerationRequest, GenerationResult
from stencil.schema import SCHEMA_NAME, FileSystem

logger = logging.getLogger(__name__)


class AnthropicProvider(BaseProvider):
    """Adapter for the Anthropic Messages API."""

    name = "anthropic"
    display_name = "Anthropic"

    def _sdk_installed(self) -> bool:
        try:
            import anthropic  # noqa: F401
        except ImportError:
            return False
        return True

    def _get_client(self):
        """Lazy-initialize the Anthropic client."""
        if self._client is None:
            import anthropic

            self._client = anthropic.Anthropic(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0,
            )
        return self._client

    @staticmethod
    def _tool() -> dict:
        return {
            "name": SCHEMA_NAME,
            "description": "Write the generated files and directories.",
            "input_schema": FileSystem.json_schema(),
        }

    def _build_kwargs(self, request: GenerationRequest) -> dict:
        kwargs: dict = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "system": request.system_prompt,
            "messages": [{"role": "user", "content": request.prompt}],
            "tools": [self._tool()],
            "tool_choice": {"type": "tool", "name": SCHEMA_NAME},
        }
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature
        return kwargs

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Request a file system through a forced tool call."""
        if not self.is_available():
            return self._make_unavailable_result()

        start = self._now_ms()
        logger.debug("Requesting %s message (model=%s)", self.name, self.model)

        try:
            client = self._get_client()
            message = await asyncio.wait_for(
                asyncio.to_thread(client.messages.create, **self._build_kwargs(request)),
                timeout=request.timeout,
            )
        except asyncio.TimeoutError:
            return self._make_timeout_result(request.timeout, self._now_ms() - start)
        except Exception as e:
            return self._make_error_result(str(e), self._now_ms() - start)

        elapsed = self._now_ms() - start

        if message.stop_reason == "max_tokens":
            return self._make_error_result(
                f"Response truncated at max_tokens={self.max_tokens}", elapsed,
            )

        tool_use = next(
            (block for block in message.content or [] if getattr(block, "type", None) == "tool_use"),
            None,
        )
        payload = tool_use.input if tool_use is not None else None

        usage = message.usage
        return self._make_parsed_result(
            payload,
            elapsed,
            input_tokens=getattr(usage, "input_tokens", None),
            output_tokens=getattr(usage, "output_tokens", None),
        )
