"""Shared pytest fixtures for the nstack test suite.

Provides reusable fixtures for:
- Throwaway Next.js project trees (app router, pages router, src layout)
- Engine configuration and template renderer
- An in-memory filesystem for failure injection
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from nstack.config import EngineConfig
from nstack.features.templates import TemplateRenderer
from nstack.fs import FileSystem


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def write_manifest(root: Path, data: dict[str, Any] | None = None, indent: int = 2) -> Path:
    """Write ``package.json`` under *root* and return its path."""
    path = root / "package.json"
    path.write_text(json.dumps(data if data is not None else {}, indent=indent) + "\n", encoding="utf-8")
    return path


def read_manifest(root: Path) -> dict[str, Any]:
    return json.loads((root / "package.json").read_text(encoding="utf-8"))


class MemoryFileSystem(FileSystem):
    """In-memory :class:`FileSystem`; ``fail_writes`` makes matching writes raise."""

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self.files: dict[Path, bytes] = {
            Path(p): c.encode("utf-8") for p, c in (files or {}).items()
        }
        self.dirs: set[Path] = set()
        for path in self.files:
            self.dirs.update(path.parents)
        self.fail_writes: set[str] = set()
        self.writes: list[Path] = []

    def read_bytes(self, path: Path) -> bytes:
        try:
            return self.files[Path(path)]
        except KeyError:
            raise FileNotFoundError(str(path)) from None

    def write_bytes(self, path: Path, data: bytes) -> None:
        if Path(path).name in self.fail_writes:
            raise PermissionError(f"read-only: {path}")
        self.files[Path(path)] = data
        self.writes.append(Path(path))

    def exists(self, path: Path) -> bool:
        return Path(path) in self.files or Path(path) in self.dirs

    def is_dir(self, path: Path) -> bool:
        return Path(path) in self.dirs

    def list_dir(self, path: Path) -> list[str]:
        base = Path(path)
        names = {p.name for p in list(self.files) + list(self.dirs) if p.parent == base}
        return sorted(names)

    def mkdir(self, path: Path) -> None:
        path = Path(path)
        self.dirs.add(path)
        self.dirs.update(path.parents)


# ---------------------------------------------------------------------------
# Project trees
# ---------------------------------------------------------------------------


@pytest.fixture
def empty_project(tmp_path: Path) -> Path:
    """A project with an empty ``{}`` manifest and nothing else."""
    root = tmp_path / "empty-app"
    root.mkdir()
    write_manifest(root, {})
    return root


@pytest.fixture
def app_router_project(tmp_path: Path) -> Path:
    """``app/`` at the root, npm lock file, a couple of existing dependencies."""
    root = tmp_path / "app-router"
    (root / "app").mkdir(parents=True)
    (root / "app" / "page.tsx").write_text("export default function Page() {}\n", encoding="utf-8")
    write_manifest(
        root,
        {
            "name": "app-router",
            "version": "0.1.0",
            "private": True,
            "scripts": {"dev": "next dev", "build": "next build"},
            "dependencies": {"next": "15.0.0", "react": "^19.0.0"},
            "devDependencies": {"typescript": "^5"},
        },
    )
    (root / "package-lock.json").write_text("{}\n", encoding="utf-8")
    return root


@pytest.fixture
def src_pages_project(tmp_path: Path) -> Path:
    """``src/pages`` layout driven by pnpm."""
    root = tmp_path / "src-pages"
    (root / "src" / "pages").mkdir(parents=True)
    write_manifest(root, {"name": "src-pages", "dependencies": {"next": "14.2.0"}})
    (root / "pnpm-lock.yaml").write_text("lockfileVersion: '9.0'\n", encoding="utf-8")
    return root


@pytest.fixture
def src_app_project(tmp_path: Path) -> Path:
    """``src/app`` layout driven by bun."""
    root = tmp_path / "src-app"
    (root / "src" / "app").mkdir(parents=True)
    write_manifest(root, {"name": "src-app"})
    (root / "bun.lockb").write_bytes(b"\x00")
    return root


# ---------------------------------------------------------------------------
# Engine collaborators
# ---------------------------------------------------------------------------


@pytest.fixture
def config() -> EngineConfig:
    return EngineConfig()


@pytest.fixture(scope="session")
def renderer() -> TemplateRenderer:
    return TemplateRenderer()


@pytest.fixture
def memory_fs() -> MemoryFileSystem:
    return MemoryFileSystem()
