"""Non-destructive merge stages: manifest, artifacts and env template."""

from nstack.merger.artifacts import ArtifactWriter, write_artifacts
from nstack.merger.env_template import merge_env_template
from nstack.merger.manifest import merge_dependencies
from nstack.merger.models import (
    DependencyWarning,
    EnvMergeResult,
    MergeResult,
    SkipReason,
    WriteResult,
    WriteStatus,
)

__all__ = [
    "ArtifactWriter",
    "DependencyWarning",
    "EnvMergeResult",
    "MergeResult",
    "SkipReason",
    "WriteResult",
    "WriteStatus",
    "merge_dependencies",
    "merge_env_template",
    "write_artifacts",
]
