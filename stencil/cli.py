"""Stencil CLI — main entry point."""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler

from stencil import __version__
from stencil.config import PROVIDERS, StencilConfig, load_config, resolve_api_key
from stencil.engine import StencilEngine
from stencil.errors import StencilError
from stencil.plugin import Prompt, TemplatePlugin
from stencil.tui.panels import (
    print_generation,
    print_header,
    print_provider_status,
    print_reports,
)

console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _needs_token(cfg: StencilConfig, answers: dict[str, Any]) -> bool:
    """True when the chosen provider wants a key and none resolves from env or config."""
    provider_cfg = cfg.providers.get(answers.get("llm") or "")
    if provider_cfg is None or not provider_cfg.requires_key:
        return False
    return resolve_api_key(provider_cfg, answers.get("token")) is None


def _ask(prompt: Prompt, choices: list[str] | None = None,
         default: str | None = None) -> str | None:
    """Ask one plugin prompt; optional prompts accept a blank answer."""
    console.print(f"[dim]{prompt.description}[/]")
    kwargs: dict[str, Any] = {"hide_input": prompt.secret}
    if prompt.kind == "list":
        kwargs["type"] = click.Choice(choices or prompt.choices)
    if default is None:
        default = prompt.default
    if default is not None:
        kwargs["default"] = default
    elif not prompt.required:
        kwargs["default"] = ""
        kwargs["show_default"] = False
    return click.prompt(prompt.message, **kwargs) or None


# ─── CLI Group ────────────────────────────────────────────────


@click.group(invoke_without_command=True)
@click.option("--version", is_flag=True, help="Show version")
@click.pass_context
def main(ctx: click.Context, version: bool) -> None:
    """◆ Stencil — LLM-generated templates

    Describes what you want to build to an LLM provider, receives a
    file tree back and writes it into one or more destinations.

    \b
    Providers:
      openai       OpenAI structured outputs
      anthropic    Claude via a forced tool call
      google       Gemini JSON mode
      huggingface  Hugging Face router (OpenAI-compatible)
      ollama       Local Ollama server (OpenAI-compatible)
    """
    if version:
        click.echo(f"stencil v{__version__}")
        return

    if ctx.invoked_subcommand is None:
        print_header()
        click.echo(ctx.get_help())


# ─── GENERATE ─────────────────────────────────────────────────


@main.command()
@click.argument("description", required=False)
@click.option("--llm", "-l", "provider", type=click.Choice(list(PROVIDERS)),
              help="LLM provider to use")
@click.option("--model", "-m", help="Model identifier (default: provider's configured model)")
@click.option("--token", "-k", help="API token (default: provider env var)")
@click.option("--base-url", help="Override the provider's API endpoint")
@click.option("--instruction", "-i", "instructions", multiple=True,
              help="Extra instruction appended to the system prompt")
@click.option("--dest", "-d", "dests", multiple=True,
              help="Destination directory (repeatable, default: .)")
@click.option("--name", "-n", help="Instance name substituted for the placeholder")
@click.option("--force", "-f", is_flag=True, help="Overwrite existing files")
@click.option("--no-input", is_flag=True, help="Never prompt; fail on missing answers")
@click.option("--config", "-c", "config_path", help="Path to stencil.yaml")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging")
def generate(
    description: str | None,
    provider: str | None,
    model: str | None,
    token: str | None,
    base_url: str | None,
    instructions: tuple[str, ...],
    dests: tuple[str, ...],
    name: str | None,
    force: bool,
    no_input: bool,
    config_path: str | None,
    verbose: bool,
) -> None:
    """Generate files from a description of what to build.

    \b
    Examples:
      stencil generate "A Flask app with a /health route and tests"
      stencil generate -l anthropic -d ./api "FastAPI CRUD service"
      stencil generate -l ollama -m qwen2.5-coder:7b "Click CLI skeleton"
      stencil generate -n billing -i "Use __name__ as the package name" "Python package"
    """
    _setup_logging(verbose)
    print_header()

    cfg = load_config(config_path)
    plugin = TemplatePlugin(cfg)

    answers: dict[str, Any] = {
        "build": description,
        "llm": provider,
        "model": model,
        "token": token,
        "base_url": base_url,
    }
    if not no_input:
        for prompt in plugin.prompts:
            if answers.get(prompt.name):
                continue
            if prompt.name == "token" and not _needs_token(cfg, answers):
                continue
            if prompt.name == "llm":
                answers["llm"] = _ask(
                    prompt, plugin.engine.provider_names, cfg.global_.default_provider,
                )
            else:
                answers[prompt.name] = _ask(prompt)
    elif not answers["llm"]:
        answers["llm"] = cfg.global_.default_provider

    description = answers["build"]
    targets = [os.path.abspath(d) for d in dests] or [os.path.abspath(".")]

    console.print(f"[dim]💬 Build: {(description or '')[:100]}{'...' if len(description or '') > 100 else ''}[/]")
    model_note = f" ({answers['model']})" if answers["model"] else ""
    console.print(f"[dim]🤖 Provider: {answers['llm']}{model_note}[/]")
    console.print(f"[dim]📂 Destinations: {', '.join(targets)}[/]\n")

    def on_progress(agent: str, status: str) -> None:
        if status == "running":
            console.print(f"  🔄 [bold]{agent}[/] — generating llm response...")

    try:
        reports = asyncio.run(
            plugin.on_render(
                answers,
                targets,
                force=force,
                name=name,
                extra_instructions=list(instructions),
                on_progress=on_progress,
                on_generated=print_generation,
            )
        )
    except StencilError as e:
        console.print(f"[bold red]❌ {e}[/]")
        sys.exit(1)

    console.print()
    print_reports(reports)
    console.print(f"\n[bold green]Generated {sum(r.total for r in reports)} entries.[/]")


# ─── PROVIDERS ────────────────────────────────────────────────


@main.command()
@click.option("--config", "-c", "config_path", help="Path to stencil.yaml")
def providers(config_path: str | None) -> None:
    """List configured providers and whether they are ready."""
    print_header()

    cfg = load_config(config_path)
    engine = StencilEngine(cfg)
    print_provider_status(engine.get_available_providers(), cfg)

    console.print(
        "[dim]Usage: stencil generate --llm anthropic \"your description\"[/]"
    )


# ─── CONFIG ───────────────────────────────────────────────────


@main.command()
@click.option("--config", "-c", "config_path", help="Path to stencil.yaml")
def config(config_path: str | None) -> None:
    """Show the resolved configuration."""
    print_header()

    cfg = load_config(config_path)
    render = cfg.render

    console.print(f"[dim]🤖 Default provider: {cfg.global_.default_provider}[/]")
    console.print(
        f"[dim]⚙️  Timeout: {cfg.global_.timeout}s | "
        f"Max parallel writes: {cfg.global_.max_parallel}[/]"
    )
    if render.substitute_name:
        console.print(f"[dim]🔤 Name placeholder: {render.placeholder}[/]")
    else:
        console.print("[dim]🔤 Name substitution disabled[/]")
    for text in render.extra_instructions:
        console.print(f"[dim]  + {text}[/]")
    console.print()

    engine = StencilEngine(cfg)
    print_provider_status(engine.get_available_providers(), cfg)


if __name__ == "__main__":
    main()
