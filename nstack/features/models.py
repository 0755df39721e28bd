"""Pydantic v2 models for feature providers.

A :class:`Provider` is a frozen, declarative description of one optional
feature: the packages it needs, the files it generates, the environment
variables and manifest scripts it requires.  Providers carry no behaviour
beyond rendering their own artifacts, so adding a feature is a pure data
addition in one of the catalog modules.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from nstack.project.models import ProjectContext, RouterStyle

if TYPE_CHECKING:
    from nstack.features.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Category(str, Enum):
    """Feature grouping used for listing and interactive selection."""
    DATABASE = "database"
    UI = "ui"
    AUTH = "auth"


# ---------------------------------------------------------------------------
# Dependency & env models
# ---------------------------------------------------------------------------

class DependencySpec(BaseModel):
    """A package name plus version constraint, e.g. ``pg@^8.13.0``."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="npm package name")
    version: str = Field(default="latest", min_length=1, description="Version constraint")

    @classmethod
    def parse(cls, spec: str) -> "DependencySpec":
        """Parse ``name`` or ``name@constraint``; scoped names keep their ``@``.

        Examples::

            DependencySpec.parse("drizzle-orm")        -> drizzle-orm@latest
            DependencySpec.parse("@types/pg@^8.11.0")  -> @types/pg@^8.11.0
        """
        text = spec.strip()
        at = text.rfind("@")
        if at > 0:
            return cls(name=text[:at], version=text[at + 1:])
        return cls(name=text)

    @property
    def is_unconstrained(self) -> bool:
        return self.version in ("latest", "*", "")

    @property
    def install_arg(self) -> str:
        """Argument passed to the package manager's ``add`` command."""
        if self.is_unconstrained:
            return self.name
        return f"{self.name}@{self.version}"

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


class EnvEntry(BaseModel):
    """A required environment variable with its placeholder value."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    value: str = Field(default="", description="Placeholder or example value")
    comment: str = Field(default="", description="Comment line written above the key")

    def render(self) -> str:
        """Render as a ``KEY="value"`` line (quoted when not empty)."""
        if self.value == "":
            return f"{self.key}="
        escaped = self.value.replace('"', '\\"')
        return f'{self.key}="{escaped}"'


# ---------------------------------------------------------------------------
# Artifacts
# ---------------------------------------------------------------------------

class ResolvedArtifact(BaseModel):
    """A materialized artifact: a project-relative path and its content."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Path relative to the project root, '/'-separated")
    content: str = Field(..., description="Rendered file content")


class ArtifactTemplate(BaseModel):
    """A declared, not yet materialized, generated file.

    ``path`` is an inline Jinja2 expression (``"{{ db_dir }}/schema.ts"``) and
    ``template`` names a ``.j2`` file under ``nstack/features/templates``.
    Both are rendered against :meth:`ProjectContext.template_context` plus the
    provider's own variables at write time, because the result depends on the
    detected layout and routing style.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Output path template")
    template: str = Field(..., description="Template file relative to the template root")
    when: Optional[RouterStyle] = Field(
        default=None, description="Only generate for this routing style"
    )

    def applies_to(self, context: ProjectContext) -> bool:
        return self.when is None or self.when is context.effective_router

    def resolve(
        self,
        renderer: "TemplateRenderer",
        variables: dict[str, Any],
    ) -> ResolvedArtifact:
        path = renderer.render_string(self.path, variables).strip().lstrip("/")
        content = renderer.render(self.template, variables)
        return ResolvedArtifact(path=path, content=content)


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------

class Provider(BaseModel):
    """A self-contained description of one optional feature."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., pattern=r"^[a-z0-9][a-z0-9-]*$", description="Stable identifier")
    name: str = Field(..., description="Human-readable name")
    category: Category
    description: str = Field(default="")
    dependencies: tuple[DependencySpec, ...] = Field(default=())
    dev_dependencies: tuple[DependencySpec, ...] = Field(default=())
    artifacts: tuple[ArtifactTemplate, ...] = Field(default=())
    env: tuple[EnvEntry, ...] = Field(default=())
    scripts: dict[str, str] = Field(
        default_factory=dict, description="Entries merged into the manifest 'scripts'"
    )
    variables: dict[str, Any] = Field(
        default_factory=dict, description="Provider-specific template variables"
    )
    next_steps: tuple[str, ...] = Field(
        default=(), description="Post-injection hints (Jinja2 strings)"
    )

    @field_validator("dependencies", "dev_dependencies", mode="before")
    @classmethod
    def _parse_dependency_strings(cls, value: Any) -> Any:
        """Accept ``"name@constraint"`` strings in catalog declarations."""
        if isinstance(value, (list, tuple)):
            return tuple(
                DependencySpec.parse(v) if isinstance(v, str) else v for v in value
            )
        return value

    # -- Rendering -----------------------------------------------------------

    def template_variables(self, context: ProjectContext) -> dict[str, Any]:
        """Context variables plus provider variables (provider wins)."""
        return {
            **context.template_context(),
            "provider_id": self.id,
            "provider_name": self.name,
            **self.variables,
        }

    def render_artifacts(
        self,
        context: ProjectContext,
        renderer: "TemplateRenderer",
    ) -> list[ResolvedArtifact]:
        """Materialize every artifact that applies to *context*, in declaration order."""
        variables = self.template_variables(context)
        return [
            artifact.resolve(renderer, variables)
            for artifact in self.artifacts
            if artifact.applies_to(context)
        ]

    def render_next_steps(
        self,
        context: ProjectContext,
        renderer: "TemplateRenderer",
    ) -> list[str]:
        variables = self.template_variables(context)
        return [renderer.render_string(step, variables) for step in self.next_steps]
