"""Shared console and process helpers for the nstack CLI.

Provides async command execution for the optional install step and the
Rich-based reporting used by every CLI command.  The engine modules never
print; they return results which are rendered here.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from nstack.features.models import Category, Provider
from nstack.injector import InjectionOutcome
from nstack.merger.models import SkipReason
from nstack.project.models import ProjectContext

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: int = 600,
    capture: bool = True,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously.

    Args:
        cmd: Program and arguments; no shell is involved.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams).
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  If *capture* is ``False``
        the stdout/stderr strings will be empty.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    stdout_pipe = asyncio.subprocess.PIPE if capture else None
    stderr_pipe = asyncio.subprocess.PIPE if capture else None

    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=stdout_pipe,
        stderr=stderr_pipe,
        cwd=str(cwd) if cwd else None,
        env=merged_env,
    )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (
            -1,
            "",
            f"Command timed out after {timeout}s: {' '.join(cmd)}",
        )

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


CATEGORY_COLORS: dict[Category, str] = {
    Category.DATABASE: "bright_cyan",
    Category.UI: "bright_magenta",
    Category.AUTH: "bright_yellow",
}


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def print_providers(groups: dict[Category, list[Provider]]) -> None:
    """Print one table per category listing the available features."""
    for category, providers in groups.items():
        color = CATEGORY_COLORS.get(category, "white")
        table = Table(
            title=f"[bold {color}]{category.value}[/bold {color}]",
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("Feature", style=color, no_wrap=True)
        table.add_column("Name")
        table.add_column("Description", style="dim")
        for provider in providers:
            table.add_row(provider.id, provider.name, provider.description)
        console.print(table)
        console.print()


def print_context(context: ProjectContext) -> None:
    """Print what the probe detected, marking values that fell back to defaults."""

    def _show(detected: str, effective: str) -> str:
        if detected == "unknown":
            return f"unknown [dim](using {effective})[/dim]"
        return detected

    print_summary_table(
        {
            "Root": str(context.root),
            "Package manager": _show(
                context.package_manager.value, context.effective_package_manager.value
            ),
            "Layout": _show(context.layout.value, context.effective_layout.value),
            "Router": _show(context.router.value, context.effective_router.value),
        },
        title="Project",
    )


def print_outcome(outcome: InjectionOutcome) -> None:
    """Render an injection outcome (complete or partial)."""
    console.print(
        Panel(
            f"[bold]{outcome.provider_id}[/bold]\n"
            f"Stages : {', '.join(outcome.completed_stages) or '(none)'}",
            title="[bold]Injection[/bold]",
            border_style="bright_cyan",
        )
    )

    if outcome.files:
        table = Table(title="Files", show_header=True, header_style="bold cyan")
        table.add_column("Path", no_wrap=True)
        table.add_column("Result")
        for result in outcome.files:
            if result.written:
                table.add_row(result.path, "[green]written[/green]")
            else:
                reason = result.reason.value if result.reason else ""
                style = "yellow" if result.reason is SkipReason.USER_MODIFIED else "dim"
                table.add_row(result.path, f"[{style}]skipped ({reason})[/{style}]")
        console.print(table)
        console.print()

    for name in outcome.dependencies_added:
        console.print(f"  [green]+[/green] {name}")
    for name in outcome.dependencies_present:
        console.print(f"  [dim]= {name} (already declared)[/dim]")
    for script in outcome.scripts_added:
        console.print(f"  [green]+[/green] script [bold]{script}[/bold]")
    for key in outcome.env_vars_added:
        console.print(f"  [green]+[/green] env {key}")
    for key in outcome.env_vars_present:
        console.print(f"  [dim]= env {key} (kept)[/dim]")
    for warning in outcome.warnings:
        print_warning(f"  ! {warning}")

    if outcome.install_plan:
        console.print()
        console.print("[bold]Install with:[/bold]")
        for command in outcome.install_plan:
            console.print(f"  {command}")

    if outcome.next_steps:
        console.print()
        console.print("[bold]Next steps:[/bold]")
        for step in outcome.next_steps:
            console.print(f"  - {step}")
    console.print()
