"""Ownership signatures for generated artifacts.

The engine keeps no database of what it wrote.  Instead every generated file
carries proof of origin, re-derived from file contents on each run:

* files whose format has a comment syntax get a first line such as
  ``// nstack:generated sha256=<hex>`` where ``<hex>`` is the SHA-256 of the
  rest of the file (the body);
* formats without comments (JSON) are recorded in a sidecar ledger,
  ``.nstack/generated.json``, mapping the project-relative path to the hash
  of the whole file.

A file is *engine-owned* only if its recorded hash still matches its content.
Any edit breaks the match and the file becomes user-owned for good.
"""

from __future__ import annotations

import hashlib
import json
import re
from pathlib import Path, PurePosixPath

from nstack.fs import FileSystem

SIGNATURE_TAG = "nstack:generated"

# Extension -> (comment opener, comment closer)
COMMENT_STYLES: dict[str, tuple[str, str]] = {
    ".ts": ("//", ""),
    ".tsx": ("//", ""),
    ".js": ("//", ""),
    ".jsx": ("//", ""),
    ".mjs": ("//", ""),
    ".cjs": ("//", ""),
    ".css": ("/*", " */"),
    ".scss": ("/*", " */"),
    ".sh": ("#", ""),
    ".yml": ("#", ""),
    ".yaml": ("#", ""),
    ".toml": ("#", ""),
    ".py": ("#", ""),
    ".md": ("<!--", " -->"),
    ".html": ("<!--", " -->"),
    ".sql": ("--", ""),
}

_SIGNATURE_RE = re.compile(rf"{re.escape(SIGNATURE_TAG)} sha256=([0-9a-f]{{64}})")


def content_hash(text: str) -> str:
    """SHA-256 hex digest of *text* encoded as UTF-8."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def comment_style(path: str) -> tuple[str, str] | None:
    """Return the comment delimiters for *path*, or ``None`` for sidecar formats."""
    return COMMENT_STYLES.get(PurePosixPath(path).suffix.lower())


def signature_line(path: str, body: str) -> str:
    opener, closer = comment_style(path) or ("//", "")
    return f"{opener} {SIGNATURE_TAG} sha256={content_hash(body)}{closer}"


def sign(path: str, body: str) -> str:
    """Return the on-disk content for *body*: signed if the format allows it."""
    if comment_style(path) is None:
        return body
    return f"{signature_line(path, body)}\n{body}"


def split_signed(text: str) -> tuple[str | None, str]:
    """Split *text* into ``(recorded_hash, body)``.

    ``recorded_hash`` is ``None`` when the first line carries no signature, in
    which case *body* is the whole text.
    """
    first, sep, rest = text.partition("\n")
    match = _SIGNATURE_RE.search(first)
    if match is None:
        return None, text
    return match.group(1), rest if sep else ""


def verify_embedded(text: str) -> str | None:
    """Return the body of an intact signed file, or ``None`` if unsigned or edited."""
    recorded, body = split_signed(text)
    if recorded is None or recorded != content_hash(body):
        return None
    return body


# ---------------------------------------------------------------------------
# Sidecar ledger
# ---------------------------------------------------------------------------


class SignatureLedger:
    """Sidecar record of hashes for generated files that cannot embed one.

    Loaded once per write pass and saved back only when it changed.  A
    corrupt ledger (invalid JSON or not UTF-8) is treated as empty: every
    file it described then counts as user-owned.  A ledger that cannot be
    read at all raises ``OSError``.
    """

    VERSION = 1

    def __init__(self, path: Path, fs: FileSystem) -> None:
        self.path = Path(path)
        self.fs = fs
        self.entries: dict[str, str] = {}
        self.dirty = False

    def load(self) -> "SignatureLedger":
        if not self.fs.exists(self.path):
            return self
        try:
            data = json.loads(self.fs.read_text(self.path))
        except (json.JSONDecodeError, UnicodeDecodeError):
            return self
        files = data.get("files") if isinstance(data, dict) else None
        if isinstance(files, dict):
            self.entries = {str(k): str(v) for k, v in files.items()}
        return self

    def owns(self, rel_path: str, text: str) -> bool:
        recorded = self.entries.get(rel_path)
        return recorded is not None and recorded == content_hash(text)

    def record(self, rel_path: str, text: str) -> None:
        digest = content_hash(text)
        if self.entries.get(rel_path) != digest:
            self.entries[rel_path] = digest
            self.dirty = True

    def save(self) -> None:
        if not self.dirty:
            return
        payload = {"version": self.VERSION, "files": dict(sorted(self.entries.items()))}
        self.fs.write_text(self.path, json.dumps(payload, indent=2) + "\n")
        self.dirty = False
