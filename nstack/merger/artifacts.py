"""Artifact writer with user-modification detection.

Writes rendered artifacts into a project in declaration order.  The central
rule: a file is only ever (over)written if it is absent or provably still the
engine's own unmodified output.  Anything else is skipped and reported as
``user-modified``.  Directories are created implicitly along the way.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from nstack.config import EngineConfig
from nstack.errors import WriteError
from nstack.features.models import ResolvedArtifact
from nstack.fs import FileSystem, LocalFileSystem
from nstack.merger.models import SkipReason, WriteResult, WriteStatus
from nstack.merger.signature import (
    SignatureLedger,
    comment_style,
    sign,
    verify_embedded,
)


class ArtifactWriter:
    """Writes artifacts under a project root, tracking ownership signatures."""

    def __init__(
        self,
        root: str | Path,
        *,
        config: EngineConfig | None = None,
        fs: FileSystem | None = None,
    ) -> None:
        self.root = Path(root)
        self.config = config or EngineConfig()
        self.fs = fs or LocalFileSystem()
        self.ledger = SignatureLedger(self.config.ledger_path(self.root), self.fs)

    def write_all(self, artifacts: Iterable[ResolvedArtifact]) -> list[WriteResult]:
        """Write every artifact in order and return one result per artifact.

        Raises:
            WriteError: On an I/O failure or a path escaping the project root.
                Artifacts written before the failure stay on disk.
        """
        self._load_ledger()
        results: list[WriteResult] = []
        try:
            for artifact in artifacts:
                results.append(self.write_one(artifact))
        finally:
            self._save_ledger()
        return results

    def write_one(self, artifact: ResolvedArtifact) -> WriteResult:
        rel_path = _normalize(artifact.path)
        target = self._target(rel_path)
        signed = comment_style(rel_path) is not None
        on_disk = sign(rel_path, artifact.content)

        if not self.fs.exists(target):
            self._write(target, rel_path, on_disk, signed)
            return WriteResult(path=rel_path, status=WriteStatus.WRITTEN)

        try:
            existing = self.fs.read_text(target)
        except (OSError, UnicodeDecodeError) as exc:
            raise WriteError(f"Failed to read {rel_path}: {exc}", target) from exc

        if existing == on_disk or existing == artifact.content:
            return _skipped(rel_path, SkipReason.ALREADY_PRESENT)

        if not self._owned(rel_path, existing, signed):
            return _skipped(rel_path, SkipReason.USER_MODIFIED)

        # Engine-owned and unmodified, but the rendered content moved on.
        self._write(target, rel_path, on_disk, signed)
        return WriteResult(path=rel_path, status=WriteStatus.WRITTEN)

    # -- Internals -----------------------------------------------------------

    def _owned(self, rel_path: str, existing: str, signed: bool) -> bool:
        if signed:
            return verify_embedded(existing) is not None
        return self.ledger.owns(rel_path, existing)

    def _target(self, rel_path: str) -> Path:
        target = self.root / rel_path
        root = self.root.resolve()
        try:
            target.resolve().relative_to(root)
        except ValueError:
            raise WriteError(f"Artifact path escapes the project root: {rel_path}", target) from None
        return target

    def _write(self, target: Path, rel_path: str, content: str, signed: bool) -> None:
        try:
            self.fs.write_text(target, content)
        except OSError as exc:
            raise WriteError(f"Failed to write {rel_path}: {exc}", target) from exc
        if not signed:
            self.ledger.record(rel_path, content)

    def _load_ledger(self) -> None:
        try:
            self.ledger.load()
        except OSError as exc:
            raise WriteError(
                f"Failed to read signature ledger: {exc}", self.ledger.path
            ) from exc

    def _save_ledger(self) -> None:
        try:
            self.ledger.save()
        except OSError as exc:
            raise WriteError(
                f"Failed to write signature ledger: {exc}", self.ledger.path
            ) from exc


def write_artifacts(
    root: str | Path,
    artifacts: Iterable[ResolvedArtifact],
    *,
    config: EngineConfig | None = None,
    fs: FileSystem | None = None,
) -> list[WriteResult]:
    """Write *artifacts* under *root*; see :class:`ArtifactWriter`."""
    return ArtifactWriter(root, config=config, fs=fs).write_all(artifacts)


def _normalize(path: str) -> str:
    return PurePosixPath(path.replace("\\", "/")).as_posix().lstrip("/")


def _skipped(rel_path: str, reason: SkipReason) -> WriteResult:
    return WriteResult(path=rel_path, status=WriteStatus.SKIPPED, reason=reason)
