"""Exception hierarchy for the feature injection engine.

Every stage of an injection raises a subclass of :class:`NstackError`.  When
the orchestrator halts on such an error it attaches the stage name and the
partial :class:`~nstack.injector.InjectionOutcome` accumulated so far, so the
caller can report what was already committed before re-running.

Conflicts (an existing dependency pin, a user-modified file, an existing env
key) are *not* errors; they are reported in the outcome instead.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class NstackError(Exception):
    """Base class for all engine errors."""

    def __init__(self, message: str) -> None:
        self.stage: str | None = None
        self.outcome: Any = None
        super().__init__(message)


# ---------------------------------------------------------------------------
# Probe
# ---------------------------------------------------------------------------


class ProbeError(NstackError):
    """Raised when a project directory cannot be inspected."""


class NotAProjectError(ProbeError):
    """Raised when no recognizable project marker file exists."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        super().__init__(
            f"Not a project: {self.root}. "
            "Expected a package.json, a lock file or a .nstack/config."
        )


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class RegistryError(NstackError):
    """Raised on provider registry lookups."""


class UnknownProviderError(RegistryError):
    """Raised when a provider id is not registered."""

    def __init__(self, provider_id: str, known: list[str] | None = None) -> None:
        self.provider_id = provider_id
        self.known = known or []
        message = f"Unknown feature: {provider_id!r}"
        if self.known:
            message += f" (available: {', '.join(self.known)})"
        super().__init__(message)


# ---------------------------------------------------------------------------
# Manifest
# ---------------------------------------------------------------------------


class ManifestError(NstackError):
    """Raised when the dependency manifest cannot be merged."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else None
        super().__init__(message)


class ManifestParseError(ManifestError):
    """The existing manifest is not a well-formed JSON object."""


class ManifestIOError(ManifestError):
    """The manifest could not be read or written."""


# ---------------------------------------------------------------------------
# Artifacts / env
# ---------------------------------------------------------------------------


class WriteError(NstackError):
    """Raised when an artifact cannot be written (distinct from a skip)."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else None
        super().__init__(message)


class EnvMergeError(NstackError):
    """Raised when the env template cannot be read or written."""

    def __init__(self, message: str, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else None
        super().__init__(message)
