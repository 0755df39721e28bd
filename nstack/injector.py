"""Feature injection orchestrator.

Drives one injection through its stages, in order:

1. REGISTRY  -- resolve the provider id (no filesystem access yet).
2. PROBE     -- detect package manager, layout and routing style.
3. RENDER    -- materialize the provider's artifacts for that layout.
4. MANIFEST  -- merge dependencies and scripts into ``package.json``.
5. ARTIFACTS -- write generated files, skipping user-owned ones.
6. ENV       -- append missing keys to the env template.

The pipeline is not transactional.  The first stage error halts it; the
stage name and the partial :class:`InjectionOutcome` are attached to the
exception before it propagates.  Every stage is idempotent, so recovery is
simply running the same injection again.

Usage::

    from nstack.injector import inject

    outcome = inject("./my-app", "drizzle-postgres")
    print(outcome.files_written, outcome.dependencies_added)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from nstack.config import EngineConfig
from nstack.errors import NstackError
from nstack.features.models import Provider, ResolvedArtifact
from nstack.features.registry import REGISTRY, ProviderRegistry
from nstack.features.templates import TemplateRenderer
from nstack.fs import FileSystem, LocalFileSystem
from nstack.merger.artifacts import write_artifacts
from nstack.merger.env_template import merge_env_template
from nstack.merger.manifest import merge_dependencies
from nstack.merger.models import (
    DependencyWarning,
    EnvMergeResult,
    MergeResult,
    WriteResult,
)
from nstack.project.installer import InstallCommand, install_plan
from nstack.project.models import ProjectContext
from nstack.project.probe import probe

STAGE_REGISTRY = "registry"
STAGE_PROBE = "probe"
STAGE_RENDER = "render"
STAGE_MANIFEST = "manifest"
STAGE_ARTIFACTS = "artifacts"
STAGE_ENV = "env"

STAGES: tuple[str, ...] = (
    STAGE_REGISTRY,
    STAGE_PROBE,
    STAGE_RENDER,
    STAGE_MANIFEST,
    STAGE_ARTIFACTS,
    STAGE_ENV,
)


# ---------------------------------------------------------------------------
# Outcome
# ---------------------------------------------------------------------------


class InjectionOutcome(BaseModel):
    """Everything one injection did, and everything it deliberately did not do."""

    model_config = ConfigDict(frozen=True)

    provider_id: str
    context: Optional[ProjectContext] = None
    completed_stages: tuple[str, ...] = Field(default=())
    files: tuple[WriteResult, ...] = Field(default=(), description="One result per artifact")
    manifest: Optional[MergeResult] = None
    env: Optional[EnvMergeResult] = None
    install_plan: tuple[InstallCommand, ...] = Field(default=())
    next_steps: tuple[str, ...] = Field(default=())

    @property
    def complete(self) -> bool:
        return self.completed_stages == STAGES

    @property
    def files_written(self) -> list[str]:
        return [r.path for r in self.files if r.written]

    @property
    def files_skipped(self) -> list[WriteResult]:
        return [r for r in self.files if not r.written]

    @property
    def dependencies_added(self) -> list[str]:
        return list(self.manifest.added) if self.manifest else []

    @property
    def dependencies_present(self) -> list[str]:
        return list(self.manifest.present) if self.manifest else []

    @property
    def warnings(self) -> list[DependencyWarning]:
        return list(self.manifest.warnings) if self.manifest else []

    @property
    def scripts_added(self) -> list[str]:
        return list(self.manifest.scripts_added) if self.manifest else []

    @property
    def env_vars_added(self) -> list[str]:
        return list(self.env.added) if self.env else []

    @property
    def env_vars_present(self) -> list[str]:
        return list(self.env.present) if self.env else []

    @property
    def changed_anything(self) -> bool:
        """Whether any file in the project was created or modified."""
        return bool(
            self.files_written
            or (self.manifest and self.manifest.changed)
            or (self.env and (self.env.added or self.env.created))
        )


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class Injector:
    """Runs injections against one project root.

    Attributes:
        root: Target project directory.
        config: Engine configuration.
        state: Accumulates the results of each completed stage for the run
            in progress; turned into an :class:`InjectionOutcome` at the end
            or when a stage fails.
    """

    def __init__(
        self,
        root: str | Path,
        *,
        config: EngineConfig | None = None,
        fs: FileSystem | None = None,
        renderer: TemplateRenderer | None = None,
        registry: ProviderRegistry | None = None,
    ) -> None:
        self.root = Path(root)
        self.config = config or EngineConfig()
        self.fs = fs or LocalFileSystem()
        self.renderer = renderer or TemplateRenderer()
        self.registry = registry or REGISTRY
        self.state: dict[str, Any] = {}

    def run(self, provider_id: str) -> InjectionOutcome:
        """Inject *provider_id* into the project.

        Raises:
            NstackError: The first stage failure, with ``stage`` and the
                partial ``outcome`` attached.
        """
        self.state = {"provider_id": provider_id, "completed_stages": []}

        provider: Provider = self._stage(STAGE_REGISTRY, self.registry.get, provider_id)
        context: ProjectContext = self._stage(
            STAGE_PROBE, probe, self.root, config=self.config, fs=self.fs
        )
        self.state["context"] = context

        artifacts: list[ResolvedArtifact] = self._stage(
            STAGE_RENDER, provider.render_artifacts, context, self.renderer
        )

        manifest: MergeResult = self._stage(
            STAGE_MANIFEST,
            merge_dependencies,
            self.config.manifest_path(self.root),
            provider.dependencies,
            provider.dev_dependencies,
            provider.scripts,
            fs=self.fs,
        )
        self.state["manifest"] = manifest

        files: list[WriteResult] = self._stage(
            STAGE_ARTIFACTS,
            write_artifacts,
            self.root,
            artifacts,
            config=self.config,
            fs=self.fs,
        )
        self.state["files"] = tuple(files)

        env: EnvMergeResult = self._stage(
            STAGE_ENV,
            merge_env_template,
            self.config.env_path(self.root),
            provider.env,
            fs=self.fs,
        )
        self.state["env"] = env

        self.state["install_plan"] = tuple(_plan_installs(provider, context, manifest))
        self.state["next_steps"] = tuple(provider.render_next_steps(context, self.renderer))
        return self._outcome()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _stage(self, name: str, func: Any, *args: Any, **kwargs: Any) -> Any:
        try:
            result = func(*args, **kwargs)
        except NstackError as exc:
            exc.stage = name
            exc.outcome = self._outcome()
            raise
        self.state["completed_stages"].append(name)
        return result

    def _outcome(self) -> InjectionOutcome:
        state = dict(self.state)
        state["completed_stages"] = tuple(state.get("completed_stages", ()))
        return InjectionOutcome(**state)


def _plan_installs(
    provider: Provider,
    context: ProjectContext,
    manifest: MergeResult,
) -> list[InstallCommand]:
    """Install commands for the provider's packages declared as requested.

    That covers packages added by this run and packages an earlier run (or
    the user) already declared with the same constraint, so a run repeated
    after a partial failure plans the same installs as a clean one.  Packages
    pinned differently are left out: installing them with the provider's
    constraint would replace the pin the user kept.
    """
    wanted = set(manifest.added) | set(manifest.satisfied)
    runtime = [d.install_arg for d in provider.dependencies if str(d) in wanted]
    dev = [d.install_arg for d in provider.dev_dependencies if str(d) in wanted]
    return install_plan(context.effective_package_manager, runtime, dev)


def inject(
    root: str | Path,
    provider_id: str,
    *,
    config: EngineConfig | None = None,
    fs: FileSystem | None = None,
    renderer: TemplateRenderer | None = None,
) -> InjectionOutcome:
    """Inject the feature *provider_id* into the project at *root*.

    Args:
        root: Project root directory.
        provider_id: Registered feature id, e.g. ``"drizzle-postgres"``.
        config: Engine configuration; defaults to ``EngineConfig()``.
        fs: Filesystem collaborator; defaults to the local disk.
        renderer: Template renderer; defaults to the bundled templates.

    Returns:
        The complete ``InjectionOutcome``.

    Raises:
        UnknownProviderError: *provider_id* is not registered.  Nothing on
            disk has been touched.
        NotAProjectError: *root* is not a recognizable project.
        ManifestError: The manifest could not be parsed, read or written.
        WriteError: An artifact could not be written.
        EnvMergeError: The env template could not be read or written.
    """
    return Injector(root, config=config, fs=fs, renderer=renderer).run(provider_id)
