"""Rich panels for provider status and generation results."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

if TYPE_CHECKING:
    from stencil.config import StencilConfig
    from stencil.materialize import MaterializeReport
    from stencil.providers.base import GenerationResult
    from stencil.schema import FileSystem

console = Console()

# Status icons
STATUS_ICONS = {
    "running":     "🔄",
    "success":     "✅",
    "failed":      "❌",
    "timeout":     "⏰",
    "unavailable": "🚫",
}

PROVIDER_COLORS: dict[str, str] = {
    "openai": "bright_green",
    "anthropic": "orange1",
    "google": "bright_cyan",
    "huggingface": "yellow",
    "ollama": "white",
}


def _get_color(name: str) -> str:
    return PROVIDER_COLORS.get(name, "white")


def format_duration(ms: int) -> str:
    if ms < 1000:
        return f"{ms}ms"
    seconds = ms / 1000
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = seconds / 60
    return f"{minutes:.1f}m"


def format_tokens(input_t: int | None, output_t: int | None) -> str:
    if input_t is None and output_t is None:
        return "—"
    parts = []
    if input_t is not None:
        parts.append(f"↓{input_t:,}")
    if output_t is not None:
        parts.append(f"↑{output_t:,}")
    return " ".join(parts)


def make_file_tree(file_system: FileSystem, label: str = ".") -> Tree:
    """Render the flat record list as a nested tree."""
    tree = Tree(f"[bold]{label}[/]")
    nodes: dict[tuple[str, ...], Tree] = {(): tree}

    for obj in file_system.file_contents:
        parts = obj.relative_path.parts
        for depth in range(1, len(parts) + 1):
            key = parts[:depth]
            if key in nodes:
                continue
            is_leaf_file = depth == len(parts) and obj.is_file
            style = "" if is_leaf_file else "bold blue"
            nodes[key] = nodes[key[:-1]].add(Text(parts[depth - 1], style=style))

    return tree


# ─── Display Functions ────────────────────────────────────────


def print_header() -> None:
    """Print the Stencil banner."""
    from stencil import __version__

    console.print(f"\n[bold bright_magenta]  ◆ stencil[/] [dim]v{__version__}[/]")
    console.print("[dim]  LLM-generated templates[/]\n")


def print_provider_status(available: dict[str, bool], cfg: StencilConfig | None = None) -> None:
    """Print provider readiness with model info."""
    table = Table(
        title="🔧 Providers",
        show_header=True,
        header_style="bold",
        border_style="bright_black",
    )
    table.add_column("Provider", style="bold", min_width=12)
    table.add_column("Model", style="dim", min_width=16)
    table.add_column("Endpoint", style="dim", min_width=10)
    table.add_column("Token", style="dim", min_width=10)
    table.add_column("Status", justify="center", min_width=12)

    for name, is_avail in available.items():
        model = endpoint = token = ""
        if cfg and name in cfg.providers:
            pc = cfg.providers[name]
            model = pc.model
            endpoint = pc.base_url or "default"
            token = " / ".join(pc.api_key_env) if pc.requires_key else "not needed"

        icon = "✅" if is_avail else "❌"
        table.add_row(
            Text(name.upper(), style=f"bold {_get_color(name)}"),
            model,
            endpoint,
            token,
            f"{icon} {'Ready' if is_avail else 'No token/SDK'}",
        )

    n_available = sum(1 for v in available.values() if v)
    console.print(table)
    console.print(f"\n[dim]{n_available}/{len(available)} providers ready[/]")
    console.print()


def print_generation(result: GenerationResult) -> None:
    """Print the generated tree with call statistics."""
    icon = STATUS_ICONS.get(result.status.value, "❓")
    color = _get_color(result.provider)

    header = Text()
    header.append(f"{icon} ", style="bold")
    header.append(result.provider.upper(), style=f"bold {color}")
    if result.model:
        header.append(f"  [{result.model}]", style="dim")
    header.append(f"  {format_duration(result.duration_ms)}", style="dim")
    header.append(f"  {format_tokens(result.input_tokens, result.output_tokens)}", style="dim")

    if result.file_system is not None:
        body = make_file_tree(result.file_system)
    else:
        body = Text(f"[Error] {result.error or 'no output'}", style="red")

    console.print(Panel(body, title=header, border_style=color, padding=(1, 2)))


def print_reports(reports: list[MaterializeReport]) -> None:
    """Print what was written under each destination."""
    for report in reports:
        console.print(
            f"[green]📁 {report.dest}[/] "
            f"[dim]{len(report.files)} file(s), {len(report.directories)} dir(s)[/]"
        )
        for path in report.files:
            marker = "~" if path in report.overwritten else "+"
            console.print(f"[dim]  {marker} {path}[/]")
