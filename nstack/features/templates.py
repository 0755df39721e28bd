"""Jinja2 template rendering for feature artifacts.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``nstack/features/templates/`` directory and renders them with the variables
of a probed project and a provider.  Supports file templates for artifact
contents and string rendering for inline path templates and hints.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for feature artifacts.

    Undefined variables raise instead of rendering as empty strings: a typo
    in a provider declaration must not silently produce a broken import path
    inside a user's project.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["import_path"] = _import_path_filter

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template file with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"drizzle/schema.ts.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        """Render an inline template string (artifact paths, next-step hints)."""
        template = self.env.from_string(template_string)
        return template.render(**context)

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return a sorted list of all ``.j2`` template paths under *prefix*.

        Paths are relative to the template root directory.
        """
        search_dir = self.template_dir / prefix if prefix else self.template_dir
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in search_dir.rglob("*.j2")
        )


# ---------------------------------------------------------------------------
# Jinja2 custom filter
# ---------------------------------------------------------------------------

def _import_path_filter(value: str) -> str:
    """Turn a project-relative directory into an ``@/`` import alias.

    Next.js maps ``@/*`` onto the source root, so ``src/db`` and ``db`` both
    become ``@/db``.
    """
    path = value.strip("/")
    if path == "src":
        return "@"
    if path.startswith("src/"):
        path = path[len("src/"):]
    return f"@/{path}" if path else "@"
