"""Pydantic v2 models describing a probed target project.

A :class:`ProjectContext` is produced once per invocation by the probe and is
read by every downstream stage.  It is frozen: nothing after the probe may
change what was detected.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class PackageManager(str, Enum):
    """JavaScript package manager driving the target project."""
    NPM = "npm"
    YARN = "yarn"
    PNPM = "pnpm"
    BUN = "bun"
    UNKNOWN = "unknown"


class LayoutStyle(str, Enum):
    """Where the project keeps its source: the root (``app/``, ``pages/``) or ``src/``."""
    APP_DIR = "app_dir"
    SRC_DIR = "src_dir"
    UNKNOWN = "unknown"


class RouterStyle(str, Enum):
    """Next.js routing flavour (``app/`` router or legacy ``pages/``)."""
    APP = "app"
    PAGES = "pages"
    UNKNOWN = "unknown"


# Command prefixes used in rendered "next steps" hints.
_RUN_PREFIX: dict[PackageManager, str] = {
    PackageManager.NPM: "npm run",
    PackageManager.YARN: "yarn",
    PackageManager.PNPM: "pnpm",
    PackageManager.BUN: "bun run",
}

_EXEC_PREFIX: dict[PackageManager, str] = {
    PackageManager.NPM: "npx",
    PackageManager.YARN: "yarn dlx",
    PackageManager.PNPM: "pnpm dlx",
    PackageManager.BUN: "bunx",
}


# ---------------------------------------------------------------------------
# ProjectContext
# ---------------------------------------------------------------------------

class ProjectContext(BaseModel):
    """Immutable description of a detected project."""

    model_config = ConfigDict(frozen=True)

    root: Path = Field(..., description="Project root directory")
    package_manager: PackageManager = Field(default=PackageManager.UNKNOWN)
    layout: LayoutStyle = Field(default=LayoutStyle.UNKNOWN)
    router: RouterStyle = Field(default=RouterStyle.UNKNOWN)

    # Fallbacks applied when detection returned ``unknown``.
    fallback_layout: LayoutStyle = Field(default=LayoutStyle.SRC_DIR)
    fallback_router: RouterStyle = Field(default=RouterStyle.APP)
    fallback_package_manager: PackageManager = Field(default=PackageManager.NPM)

    # -- Resolved values -----------------------------------------------------

    @property
    def effective_layout(self) -> LayoutStyle:
        if self.layout is not LayoutStyle.UNKNOWN:
            return self.layout
        if self.fallback_layout is not LayoutStyle.UNKNOWN:
            return self.fallback_layout
        return LayoutStyle.SRC_DIR

    @property
    def effective_router(self) -> RouterStyle:
        if self.router is not RouterStyle.UNKNOWN:
            return self.router
        if self.fallback_router is not RouterStyle.UNKNOWN:
            return self.fallback_router
        return RouterStyle.APP

    @property
    def effective_package_manager(self) -> PackageManager:
        if self.package_manager is not PackageManager.UNKNOWN:
            return self.package_manager
        if self.fallback_package_manager is not PackageManager.UNKNOWN:
            return self.fallback_package_manager
        return PackageManager.NPM

    @property
    def is_app_router(self) -> bool:
        return self.effective_router is RouterStyle.APP

    # -- Layout-dependent directories ---------------------------------------

    @property
    def source_root(self) -> str:
        """Directory holding source files, relative to the root (``""`` or ``"src"``)."""
        return "src" if self.effective_layout is LayoutStyle.SRC_DIR else ""

    def source_path(self, relative: str) -> str:
        """Join *relative* onto :attr:`source_root` using forward slashes."""
        return f"{self.source_root}/{relative}" if self.source_root else relative

    @property
    def db_dir(self) -> str:
        return self.source_path("db")

    @property
    def lib_dir(self) -> str:
        return self.source_path("lib")

    @property
    def components_dir(self) -> str:
        return self.source_path("components")

    @property
    def app_dir(self) -> str:
        return self.source_path("app")

    @property
    def pages_dir(self) -> str:
        return self.source_path("pages")

    @property
    def globals_css_path(self) -> str:
        if self.is_app_router:
            return f"{self.app_dir}/globals.css"
        return self.source_path("styles/globals.css")

    # -- Template context ----------------------------------------------------

    def template_context(self) -> dict[str, Any]:
        """Variables available to every artifact template."""
        pm = self.effective_package_manager
        return {
            "package_manager": pm.value,
            "detected_package_manager": self.package_manager.value,
            "layout": self.effective_layout.value,
            "router": self.effective_router.value,
            "is_app_router": self.is_app_router,
            "source_root": self.source_root,
            "src_prefix": f"{self.source_root}/" if self.source_root else "",
            "db_dir": self.db_dir,
            "lib_dir": self.lib_dir,
            "components_dir": self.components_dir,
            "app_dir": self.app_dir,
            "pages_dir": self.pages_dir,
            "globals_css": self.globals_css_path,
            "run": _RUN_PREFIX[pm],
            "exec": _EXEC_PREFIX[pm],
        }
