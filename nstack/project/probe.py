"""Environment probe: package manager and layout detection.

Inspects a project directory for marker files and returns a frozen
:class:`~nstack.project.models.ProjectContext`.  Detection is read-only and
deterministic: every check runs in a fixed priority order and the first match
wins, so a stale lock file left behind by another tool cannot make the result
depend on directory listing order.
"""

from __future__ import annotations

import json
import re
from pathlib import Path

from nstack.config import EngineConfig
from nstack.errors import NotAProjectError, ProbeError
from nstack.fs import FileSystem, LocalFileSystem, split_bom
from nstack.project.models import (
    LayoutStyle,
    PackageManager,
    ProjectContext,
    RouterStyle,
)

# Most specific lock formats first.  ``bun.lockb``/``bun.lock`` and
# ``pnpm-lock.yaml`` are only ever written by their own tool, whereas a
# ``package-lock.json`` is frequently left behind by a stray ``npm install``.
LOCK_FILES: tuple[tuple[str, PackageManager], ...] = (
    ("bun.lockb", PackageManager.BUN),
    ("bun.lock", PackageManager.BUN),
    ("pnpm-lock.yaml", PackageManager.PNPM),
    ("yarn.lock", PackageManager.YARN),
    ("package-lock.json", PackageManager.NPM),
    ("npm-shrinkwrap.json", PackageManager.NPM),
)

_CONFIG_LINE_RE = re.compile(r"^\s*package_manager\s*=\s*([A-Za-z]+)\s*$")


def probe(
    root: str | Path,
    *,
    config: EngineConfig | None = None,
    fs: FileSystem | None = None,
) -> ProjectContext:
    """Detect the package manager and layout of the project at *root*.

    Args:
        root: Project root directory.
        config: Engine configuration (file names and fallbacks).
        fs: Filesystem collaborator; defaults to the local disk.

    Returns:
        A frozen ``ProjectContext``.

    Raises:
        NotAProjectError: If *root* holds no ``package.json``, no known lock
            file and no ``.nstack/config``.
        ProbeError: If ``.nstack/config`` exists but cannot be read.
    """
    config = config or EngineConfig()
    fs = fs or LocalFileSystem()
    root_path = Path(root)

    if not _has_project_marker(root_path, config, fs):
        raise NotAProjectError(root_path)

    return ProjectContext(
        root=root_path,
        package_manager=detect_package_manager(root_path, config=config, fs=fs),
        layout=detect_layout(root_path, fs=fs),
        router=detect_router(root_path, fs=fs),
        fallback_layout=config.default_layout,
        fallback_router=config.default_router,
        fallback_package_manager=config.default_package_manager,
    )


def _has_project_marker(root: Path, config: EngineConfig, fs: FileSystem) -> bool:
    if not fs.is_dir(root):
        return False
    if fs.exists(config.manifest_path(root)):
        return True
    if fs.exists(config.project_config_path(root)):
        return True
    return any(fs.exists(root / name) for name, _ in LOCK_FILES)


# ---------------------------------------------------------------------------
# Package manager
# ---------------------------------------------------------------------------


def detect_package_manager(
    root: Path,
    *,
    config: EngineConfig | None = None,
    fs: FileSystem | None = None,
) -> PackageManager:
    """Return the project's package manager, or ``UNKNOWN``.

    Order: an explicit ``.nstack/config`` choice, then lock files (most
    specific first), then the corepack ``packageManager`` manifest field.
    """
    config = config or EngineConfig()
    fs = fs or LocalFileSystem()

    configured = _read_configured_package_manager(config.project_config_path(root), fs)
    if configured is not None:
        return configured

    for name, manager in LOCK_FILES:
        if fs.exists(root / name):
            return manager

    declared = _read_declared_package_manager(config.manifest_path(root), fs)
    if declared is not None:
        return declared

    return PackageManager.UNKNOWN


def _read_configured_package_manager(path: Path, fs: FileSystem) -> PackageManager | None:
    """Parse the ``package_manager=<name>`` line of ``.nstack/config``."""
    if not fs.exists(path):
        return None
    try:
        text = fs.read_text(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise ProbeError(f"Failed to read {path}: {exc}") from exc
    for line in text.splitlines():
        match = _CONFIG_LINE_RE.match(line)
        if match:
            return _parse_manager_name(match.group(1))
    return None


def _read_declared_package_manager(path: Path, fs: FileSystem) -> PackageManager | None:
    """Read the corepack ``"packageManager": "pnpm@9.1.0"`` field, if any.

    A malformed manifest is not the probe's concern; the manifest merger
    reports it with a proper error later in the pipeline.
    """
    if not fs.exists(path):
        return None
    try:
        data = json.loads(split_bom(fs.read_text(path))[1])
    except (OSError, json.JSONDecodeError, UnicodeDecodeError):
        return None
    if not isinstance(data, dict):
        return None
    field = data.get("packageManager")
    if not isinstance(field, str):
        return None
    return _parse_manager_name(field.split("@", 1)[0])


def _parse_manager_name(name: str) -> PackageManager | None:
    try:
        manager = PackageManager(name.strip().lower())
    except ValueError:
        return None
    if manager is PackageManager.UNKNOWN:
        return None
    return manager


# ---------------------------------------------------------------------------
# Layout / routing
# ---------------------------------------------------------------------------


def detect_layout(root: Path, *, fs: FileSystem | None = None) -> LayoutStyle:
    """A top-level ``app/`` or ``pages/`` wins over ``src/``; none gives ``UNKNOWN``.

    Next.js ignores ``src/pages`` once a root ``pages/`` exists, so a root
    routing directory always means the root layout.
    """
    fs = fs or LocalFileSystem()
    if fs.is_dir(root / "app") or fs.is_dir(root / "pages"):
        return LayoutStyle.APP_DIR
    if fs.is_dir(root / "src"):
        return LayoutStyle.SRC_DIR
    return LayoutStyle.UNKNOWN


def detect_router(root: Path, *, fs: FileSystem | None = None) -> RouterStyle:
    """Detect the App Router before the Pages Router."""
    fs = fs or LocalFileSystem()
    if fs.is_dir(root / "app") or fs.is_dir(root / "src" / "app"):
        return RouterStyle.APP
    if fs.is_dir(root / "pages") or fs.is_dir(root / "src" / "pages"):
        return RouterStyle.PAGES
    return RouterStyle.UNKNOWN
