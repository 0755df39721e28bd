"""nstack command-line interface.

Usage::

    nstack list
    nstack list --category database
    nstack probe ./my-app
    nstack add drizzle-postgres --path ./my-app --install
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from nstack import __version__
from nstack.config import EngineConfig
from nstack.errors import NstackError
from nstack.features.models import Category
from nstack.features.registry import grouped_providers, list_providers
from nstack.injector import InjectionOutcome, inject
from nstack.merger.models import SkipReason
from nstack.project.installer import InstallCommand
from nstack.project.probe import probe
from nstack.utils import (
    console,
    print_context,
    print_error,
    print_outcome,
    print_providers,
    print_success,
    print_warning,
    run_command,
)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_list(args: argparse.Namespace, config: EngineConfig) -> int:
    if args.category:
        category = Category(args.category)
        print_providers({category: list_providers(category)})
    else:
        print_providers(grouped_providers())
    return 0


def cmd_probe(args: argparse.Namespace, config: EngineConfig) -> int:
    context = probe(Path(args.path), config=config)
    print_context(context)
    return 0


def cmd_add(args: argparse.Namespace, config: EngineConfig) -> int:
    root = Path(args.path)
    outcome = inject(root, args.feature, config=config)
    print_outcome(outcome)

    if outcome.warnings:
        print_warning(
            f"{len(outcome.warnings)} requested version(s) were not applied; "
            "existing pins were kept."
        )
    if any(r.reason is SkipReason.USER_MODIFIED for r in outcome.files_skipped):
        print_warning("Some files were modified locally and were left untouched.")

    if args.install and outcome.install_plan:
        if not asyncio.run(_install(outcome, root)):
            return 1

    if outcome.changed_anything:
        print_success(f"Added {outcome.provider_id}.")
    else:
        print_success(f"{outcome.provider_id} is already up to date.")
    return 0


async def _install(outcome: InjectionOutcome, root: Path) -> bool:
    """Run the install plan sequentially; stop at the first failing command."""
    for command in outcome.install_plan:
        if not await _run_install(command, root):
            return False
    return True


async def _run_install(command: InstallCommand, root: Path) -> bool:
    console.print(f"  Running [bold]{command}[/bold]")
    try:
        returncode, _stdout, stderr = await run_command(
            list(command.argv), cwd=root, capture=True
        )
    except FileNotFoundError:
        print_error(f"  {command.argv[0]} is not installed or not on PATH.")
        return False
    if returncode != 0:
        print_error(f"  {command} failed (exit {returncode})")
        if stderr:
            console.print(f"[dim]{stderr}[/dim]")
        return False
    return True


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nstack",
        description="nstack -- inject optional features into a Next.js project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  nstack list --category database\n"
            "  nstack probe ./my-app\n"
            "  nstack add drizzle-postgres --path ./my-app --install\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to an engine configuration JSON file (default: environment)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List available features")
    list_parser.add_argument(
        "--category", "-c",
        choices=[c.value for c in Category],
        default=None,
        help="Only list features in this category",
    )
    list_parser.set_defaults(func=cmd_list)

    probe_parser = subparsers.add_parser("probe", help="Show the detected project layout")
    probe_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Project directory (default: current directory)",
    )
    probe_parser.set_defaults(func=cmd_probe)

    add_parser = subparsers.add_parser("add", help="Inject a feature into a project")
    add_parser.add_argument("feature", help="Feature id, see 'nstack list'")
    add_parser.add_argument(
        "--path", "-p",
        default=".",
        help="Project directory (default: current directory)",
    )
    add_parser.add_argument(
        "--install",
        action="store_true",
        help="Run the package manager for the feature's dependencies",
    )
    add_parser.set_defaults(func=cmd_add)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for ``nstack`` and ``python -m nstack``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = EngineConfig.load(Path(args.config)) if args.config else EngineConfig.from_env()
    except (OSError, ValueError) as exc:
        print_error(f"Error: invalid configuration: {exc}")
        return 1

    try:
        return args.func(args, config)
    except NstackError as exc:
        if exc.outcome is not None:
            print_outcome(exc.outcome)
        stage = f" during {exc.stage}" if exc.stage else ""
        print_error(f"Error{stage}: {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
