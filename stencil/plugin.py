"""Template plugin surface for the scaffolding tool.

The scaffolding tool asks the prompts declared here, then calls
``on_render`` with the answers and the build paths it wants filled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from stencil.config import PROVIDERS, StencilConfig, load_config
from stencil.engine import StencilEngine
from stencil.errors import GenerationError
from stencil.materialize import MaterializeReport, materialize_all
from stencil.providers.base import GenerationResult

logger = logging.getLogger(__name__)


@dataclass
class Prompt:
    """A question asked before rendering."""
    name: str
    description: str
    message: str
    kind: str = "input"  # input, list
    choices: list[str] = field(default_factory=list)
    default: str | None = None
    secret: bool = False
    required: bool = True


PROMPTS: list[Prompt] = [
    Prompt(
        name="build",
        description="Description of what you want to instruct the llm to build",
        message="What would you like to build?",
    ),
    Prompt(
        name="llm",
        description="Type of llm you want to use",
        message="What type of llm do you want to use?",
        kind="list",
        choices=list(PROVIDERS),
        default="openai",
    ),
    Prompt(
        name="model",
        description="Model identifier; blank uses the provider's default",
        message="Which model should be used?",
        required=False,
    ),
    Prompt(
        name="token",
        description="Api token for llm Api",
        message="Enter your api token for the llm",
        secret=True,
        required=False,
    ),
    Prompt(
        name="base_url",
        description="Override for the provider's API endpoint",
        message="Custom API base URL",
        required=False,
    ),
]


def get_prompt(name: str) -> Prompt:
    for prompt in PROMPTS:
        if prompt.name == name:
            return prompt
    raise KeyError(name)


class TemplatePlugin:
    """Generates a template from the collected answers and writes it out."""

    def __init__(self, config: StencilConfig | None = None):
        self.config = config or load_config()
        self.engine = StencilEngine(self.config)
        self.prompts = PROMPTS

    @property
    def placeholder(self) -> str | None:
        render = self.config.render
        return render.placeholder if render.substitute_name else None

    async def on_render(
        self,
        answers: dict[str, Any],
        build_paths: list[str | Path],
        force: bool = False,
        wipe: bool = False,
        name: str | None = None,
        extra_instructions: list[str] | None = None,
        on_progress: Callable[[str, str], None] | None = None,
        on_generated: Callable[[GenerationResult], None] | None = None,
    ) -> list[MaterializeReport]:
        """Generate the file system and materialize it into every build path.

        Existing files are only overwritten when ``force`` or ``wipe`` is set.
        """
        result = await self.engine.generate(
            description=answers.get("build") or "",
            provider=answers.get("llm"),
            model=answers.get("model") or None,
            token=answers.get("token") or None,
            base_url=answers.get("base_url") or None,
            extra_instructions=extra_instructions or [],
            placeholder=self.placeholder,
            on_progress=on_progress,
        )

        if result.file_system is None:
            raise GenerationError(result=result)
        if on_generated:
            on_generated(result)
        logger.info("Writing %d entries to %d build path(s)",
                    len(result.file_system), len(build_paths))

        return await materialize_all(
            build_paths,
            result.file_system,
            strict=not (force or wipe),
            name=name if self.placeholder else None,
            placeholder=self.config.render.placeholder,
            max_parallel=self.config.global_.max_parallel,
        )
