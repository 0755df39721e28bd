"""Result models for the manifest, artifact and env merge stages."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class WriteStatus(str, Enum):
    WRITTEN = "written"
    SKIPPED = "skipped"


class SkipReason(str, Enum):
    """Why an artifact was not written."""
    USER_MODIFIED = "user-modified"
    ALREADY_PRESENT = "already-present"


class WriteResult(BaseModel):
    """Outcome of writing a single artifact."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Project-relative path")
    status: WriteStatus
    reason: Optional[SkipReason] = Field(default=None, description="Set when skipped")

    @property
    def written(self) -> bool:
        return self.status is WriteStatus.WRITTEN


class DependencyWarning(BaseModel):
    """A requested constraint that was not applied because the name is already pinned."""

    model_config = ConfigDict(frozen=True)

    name: str
    existing: str = Field(..., description="Constraint kept in the manifest")
    requested: str = Field(..., description="Constraint the provider asked for")
    section: str = Field(..., description="Manifest section holding the existing entry")

    def __str__(self) -> str:
        return (
            f"{self.name}: kept {self.existing!r} in {self.section}, "
            f"requested {self.requested!r} was not applied"
        )


class MergeResult(BaseModel):
    """Outcome of merging dependencies and scripts into the manifest."""

    added: list[str] = Field(default_factory=list, description="'name@constraint' entries added")
    present: list[str] = Field(default_factory=list, description="Names already declared")
    satisfied: list[str] = Field(
        default_factory=list,
        description="'name@constraint' entries already declared as requested",
    )
    warnings: list[DependencyWarning] = Field(default_factory=list)
    scripts_added: list[str] = Field(default_factory=list)
    scripts_present: list[str] = Field(default_factory=list)
    changed: bool = Field(default=False, description="Whether the manifest was rewritten")


class EnvMergeResult(BaseModel):
    """Outcome of merging env entries into the env template."""

    added: list[str] = Field(default_factory=list)
    present: list[str] = Field(default_factory=list)
    created: bool = Field(default=False, description="Whether the file did not exist before")
