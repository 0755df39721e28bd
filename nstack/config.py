"""nstack engine configuration.

Centralised, typed configuration for the injection engine. All settings use
Pydantic v2 models so they can be validated at construction time and serialised
to/from JSON or environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from nstack.project.models import LayoutStyle, PackageManager, RouterStyle


class EngineConfig(BaseModel):
    """Global engine configuration.

    Holds the file names the engine reads and writes inside a target project
    and the defaults used when detection comes back ``unknown``.  Instances
    are typically created once by the CLI entry point and passed to
    :func:`nstack.injector.inject`.
    """

    manifest_name: str = Field(default="package.json", min_length=1)
    env_file: str = Field(default=".env", min_length=1)
    state_dir: str = Field(default=".nstack", min_length=1)
    ledger_name: str = Field(default="generated.json", min_length=1)

    # Fallbacks for projects whose layout could not be detected.
    default_layout: LayoutStyle = Field(default=LayoutStyle.SRC_DIR)
    default_router: RouterStyle = Field(default=RouterStyle.APP)
    default_package_manager: PackageManager = Field(default=PackageManager.NPM)

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    def manifest_path(self, root: Path) -> Path:
        """Path to the dependency manifest inside *root*."""
        return Path(root) / self.manifest_name

    def env_path(self, root: Path) -> Path:
        """Path to the env template inside *root*."""
        return Path(root) / self.env_file

    def state_path(self, root: Path) -> Path:
        """Root of the ``.nstack/`` metadata directory inside *root*."""
        return Path(root) / self.state_dir

    def ledger_path(self, root: Path) -> Path:
        """Sidecar ledger of generated files that cannot carry a signature."""
        return self.state_path(root) / self.ledger_name

    def project_config_path(self, root: Path) -> Path:
        """The ``package_manager=...`` file written when a project is created."""
        return self.state_path(root) / "config"

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "EngineConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Build an ``EngineConfig`` from environment variables.

        Recognised variables (all optional):
            NSTACK_MANIFEST, NSTACK_ENV_FILE, NSTACK_STATE_DIR,
            NSTACK_DEFAULT_LAYOUT, NSTACK_DEFAULT_PM.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("NSTACK_MANIFEST"):
            kwargs["manifest_name"] = os.environ["NSTACK_MANIFEST"]
        if os.environ.get("NSTACK_ENV_FILE"):
            kwargs["env_file"] = os.environ["NSTACK_ENV_FILE"]
        if os.environ.get("NSTACK_STATE_DIR"):
            kwargs["state_dir"] = os.environ["NSTACK_STATE_DIR"]
        if os.environ.get("NSTACK_DEFAULT_LAYOUT"):
            kwargs["default_layout"] = LayoutStyle(os.environ["NSTACK_DEFAULT_LAYOUT"])
        if os.environ.get("NSTACK_DEFAULT_PM"):
            kwargs["default_package_manager"] = PackageManager(os.environ["NSTACK_DEFAULT_PM"])
        return cls(**kwargs)
