"""Environment template (``.env``) merging.

Existing lines are never rewritten: order, blank lines, comments and values
all survive.  Entries whose key is missing are appended as a block at the end
of the file; keys that already exist are left untouched whatever their value.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path

from nstack.errors import EnvMergeError
from nstack.features.models import EnvEntry
from nstack.fs import FileSystem, LocalFileSystem, split_bom
from nstack.merger.models import EnvMergeResult

_KEY_RE = re.compile(r"^\s*(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=")


def existing_keys(text: str) -> list[str]:
    """Return the keys defined in *text*, in file order, ignoring comments."""
    _, text = split_bom(text)
    keys: list[str] = []
    for line in text.splitlines():
        if line.lstrip().startswith("#"):
            continue
        match = _KEY_RE.match(line)
        if match and match.group(1) not in keys:
            keys.append(match.group(1))
    return keys


def merge_env_template(
    env_path: str | Path,
    entries: Iterable[EnvEntry],
    *,
    fs: FileSystem | None = None,
) -> EnvMergeResult:
    """Append the *entries* whose key is not yet defined in *env_path*.

    The file is created (possibly empty) when absent.

    Raises:
        EnvMergeError: If the file cannot be read or written.
    """
    fs = fs or LocalFileSystem()
    path = Path(env_path)
    result = EnvMergeResult()

    text = ""
    if fs.exists(path):
        try:
            text = fs.read_text(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise EnvMergeError(f"Failed to read {path}: {exc}", path) from exc
    else:
        result.created = True
    bom, text = split_bom(text)

    newline = "\r\n" if "\r\n" in text else "\n"
    known = set(existing_keys(text))

    block: list[str] = []
    for entry in entries:
        if entry.key in known:
            if entry.key not in result.present:
                result.present.append(entry.key)
            continue
        if entry.comment:
            comment = entry.comment if entry.comment.startswith("#") else f"# {entry.comment}"
            block.append(comment)
        block.append(entry.render())
        known.add(entry.key)
        result.added.append(entry.key)

    if not block and not result.created:
        return result

    updated = text
    if block:
        if updated and not updated.endswith("\n"):
            updated += newline
        if updated.strip():
            updated += newline
        updated += newline.join(block) + newline

    try:
        fs.write_text(path, bom + updated)
    except OSError as exc:
        raise EnvMergeError(f"Failed to write {path}: {exc}", path) from exc
    return result
