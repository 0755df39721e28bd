"""Filesystem collaborator used by every engine stage.

The engine never touches ``pathlib`` directly for project files; it goes
through a :class:`FileSystem` so that tests (or a dry-run front end) can swap
the implementation.  :class:`LocalFileSystem` is the default and simply maps
onto the local disk.
"""

from __future__ import annotations

from pathlib import Path

UTF8_BOM = "\ufeff"


def split_bom(text: str) -> tuple[str, str]:
    """Split a leading byte-order mark off *text*: ``(bom, rest)``."""
    if text.startswith(UTF8_BOM):
        return UTF8_BOM, text[len(UTF8_BOM):]
    return "", text


class FileSystem:
    """Minimal read/write/exists/list interface over paths."""

    def read_bytes(self, path: Path) -> bytes:
        raise NotImplementedError

    def write_bytes(self, path: Path, data: bytes) -> None:
        raise NotImplementedError

    def exists(self, path: Path) -> bool:
        raise NotImplementedError

    def is_dir(self, path: Path) -> bool:
        raise NotImplementedError

    def list_dir(self, path: Path) -> list[str]:
        raise NotImplementedError

    def mkdir(self, path: Path) -> None:
        raise NotImplementedError

    # -- Text helpers ------------------------------------------------------

    def read_text(self, path: Path) -> str:
        """Read a UTF-8 file.  Raises ``FileNotFoundError`` when absent."""
        return self.read_bytes(path).decode("utf-8")

    def write_text(self, path: Path, content: str) -> None:
        """Write a UTF-8 file, creating parent directories as needed."""
        self.mkdir(Path(path).parent)
        self.write_bytes(path, content.encode("utf-8"))


class LocalFileSystem(FileSystem):
    """:class:`FileSystem` backed by the local disk."""

    def read_bytes(self, path: Path) -> bytes:
        return Path(path).read_bytes()

    def write_bytes(self, path: Path, data: bytes) -> None:
        Path(path).write_bytes(data)

    def exists(self, path: Path) -> bool:
        return Path(path).exists()

    def is_dir(self, path: Path) -> bool:
        return Path(path).is_dir()

    def list_dir(self, path: Path) -> list[str]:
        """Return the sorted entry names of a directory (empty if missing)."""
        dir_path = Path(path)
        if not dir_path.is_dir():
            return []
        return sorted(entry.name for entry in dir_path.iterdir())

    def mkdir(self, path: Path) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)
