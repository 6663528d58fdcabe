"""
Unified data model exports for lockkeeper.

Example:
    >>> from lockkeeper.models import PackageDependency, RecordFragment
"""

from __future__ import annotations

from lockkeeper.models.project import Project, UvToolSection
from lockkeeper.models.dependency import PackageDependency, Upgrade
from lockkeeper.models.fragment import (
    ArrayFragment,
    Fragment,
    FragmentData,
    RecordFragment,
    StringFragment,
    fragment_from_json,
)
from lockkeeper.models.artifacts import (
    ArtifactError,
    FileChange,
    UpdateArtifact,
    UpdateArtifactsConfig,
    UpdateArtifactsResult,
)

__all__ = [
    "PackageDependency",
    "Upgrade",
    "Project",
    "UvToolSection",
    "Fragment",
    "FragmentData",
    "StringFragment",
    "ArrayFragment",
    "RecordFragment",
    "fragment_from_json",
    "ArtifactError",
    "FileChange",
    "UpdateArtifact",
    "UpdateArtifactsConfig",
    "UpdateArtifactsResult",
]
