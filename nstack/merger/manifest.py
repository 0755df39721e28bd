"""Dependency manifest (``package.json``) merging.

The manifest is a user-owned file, so the merge is conservative:

* keys the engine does not touch keep their original order and values;
* a package already declared in any dependency section is left exactly as
  pinned, and a differing request is reported as a warning;
* new packages and scripts are appended at the end of their section;
* the document is re-serialised with the file's own indentation, line
  endings, trailing-newline convention and byte-order mark, and only when
  something changed.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from nstack.errors import ManifestIOError, ManifestParseError
from nstack.features.models import DependencySpec
from nstack.fs import FileSystem, LocalFileSystem, split_bom
from nstack.merger.models import DependencyWarning, MergeResult

RUNTIME_SECTION = "dependencies"
DEV_SECTION = "devDependencies"
SCRIPTS_SECTION = "scripts"

# Sections consulted when deciding whether a package is already declared.
DECLARING_SECTIONS: tuple[str, ...] = (
    RUNTIME_SECTION,
    DEV_SECTION,
    "optionalDependencies",
)

_INDENT_RE = re.compile(r"^[{\[][ \t]*\r?\n([ \t]+)\S", re.MULTILINE)


# ---------------------------------------------------------------------------
# Format collaborator
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ManifestFormat:
    """Formatting conventions detected from an existing manifest."""

    indent: str | int = 2
    newline: str = "\n"
    trailing_newline: bool = True

    @classmethod
    def detect(cls, text: str) -> "ManifestFormat":
        newline = "\r\n" if "\r\n" in text else "\n"
        indent: str | int = 2
        match = _INDENT_RE.search(text)
        if match:
            whitespace = match.group(1)
            indent = whitespace if "\t" in whitespace else len(whitespace)
        return cls(
            indent=indent,
            newline=newline,
            trailing_newline=text.endswith("\n"),
        )


def parse_manifest(text: str, path: str | Path | None = None) -> dict[str, Any]:
    """Parse manifest text into an ordered mapping.

    Raises:
        ManifestParseError: If *text* is not a JSON object.
    """
    _, text = split_bom(text)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestParseError(
            f"Manifest is not valid JSON ({exc.msg} at line {exc.lineno})", path
        ) from exc
    if not isinstance(data, dict):
        raise ManifestParseError("Manifest root must be a JSON object", path)
    return data


def serialize_manifest(data: dict[str, Any], fmt: ManifestFormat | None = None) -> str:
    """Serialise *data* following the conventions in *fmt*."""
    fmt = fmt or ManifestFormat()
    text = json.dumps(data, indent=fmt.indent, ensure_ascii=False)
    if fmt.newline != "\n":
        text = text.replace("\n", fmt.newline)
    if fmt.trailing_newline:
        text += fmt.newline
    return text


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------


def merge_dependencies(
    manifest_path: str | Path,
    dependencies: Iterable[DependencySpec],
    dev_dependencies: Iterable[DependencySpec],
    scripts: dict[str, str] | None = None,
    *,
    fs: FileSystem | None = None,
) -> MergeResult:
    """Merge runtime/dev dependencies and scripts into the manifest at *manifest_path*.

    Args:
        manifest_path: Path to ``package.json``.
        dependencies: Runtime dependencies requested by a provider.
        dev_dependencies: Development-only dependencies.
        scripts: ``scripts`` entries to add when their name is free.
        fs: Filesystem collaborator; defaults to the local disk.

    Returns:
        A ``MergeResult`` listing added and already-present entries plus a
        warning for every requested constraint that was not applied.

    Raises:
        ManifestParseError: The existing manifest is not a JSON object, or one
            of its dependency sections is not an object.
        ManifestIOError: The manifest could not be read or written.
    """
    fs = fs or LocalFileSystem()
    path = Path(manifest_path)

    try:
        text = fs.read_text(path)
    except FileNotFoundError as exc:
        raise ManifestIOError(f"Manifest not found: {path}", path) from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestIOError(f"Failed to read manifest {path}: {exc}", path) from exc

    bom, text = split_bom(text)
    data = parse_manifest(text, path)
    fmt = ManifestFormat.detect(text)
    result = MergeResult()

    for spec in dependencies:
        _merge_one(data, RUNTIME_SECTION, spec, result, path)
    for spec in dev_dependencies:
        _merge_one(data, DEV_SECTION, spec, result, path)
    for name, command in (scripts or {}).items():
        _merge_script(data, name, command, result, path)

    if result.added or result.scripts_added:
        try:
            fs.write_text(path, bom + serialize_manifest(data, fmt))
        except OSError as exc:
            raise ManifestIOError(f"Failed to write manifest {path}: {exc}", path) from exc
        result.changed = True

    return result


def _section(data: dict[str, Any], name: str, path: Path, *, create: bool) -> dict[str, Any] | None:
    section = data.get(name)
    if section is None:
        if not create:
            return None
        section = {}
        data[name] = section
    if not isinstance(section, dict):
        raise ManifestParseError(f"Manifest section {name!r} must be an object", path)
    return section


def _merge_one(
    data: dict[str, Any],
    target: str,
    spec: DependencySpec,
    result: MergeResult,
    path: Path,
) -> None:
    for name in DECLARING_SECTIONS:
        section = _section(data, name, path, create=False)
        if section is None or spec.name not in section:
            continue
        existing = str(section[spec.name])
        if spec.name not in result.present:
            result.present.append(spec.name)
        if name == target and existing == spec.version:
            result.satisfied.append(str(spec))
        if not spec.is_unconstrained and existing != spec.version:
            result.warnings.append(
                DependencyWarning(
                    name=spec.name,
                    existing=existing,
                    requested=spec.version,
                    section=name,
                )
            )
        return

    section = _section(data, target, path, create=True)
    section[spec.name] = spec.version
    result.added.append(str(spec))


def _merge_script(
    data: dict[str, Any],
    name: str,
    command: str,
    result: MergeResult,
    path: Path,
) -> None:
    section = _section(data, SCRIPTS_SECTION, path, create=True)
    if name in section:
        result.scripts_present.append(name)
        return
    section[name] = command
    result.scripts_added.append(name)
