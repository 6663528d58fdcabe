"""
Request and result types for lock file reconciliation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from lockkeeper.constants import LOCK_FILE_MAINTENANCE
from lockkeeper.models.dependency import Upgrade


@dataclass
class UpdateArtifactsConfig:
    """Settings that influence one artifact update.

    Attributes:
        update_type: Update type of the whole run; ``"lockFileMaintenance"``
            forces a full re-lock.
        constraints: Tool version constraints keyed by tool name
            (``"python"``, ``"uv"``).
        env: Extra environment variables for the package manager.
        exec_timeout: Timeout for the package-manager command, in seconds.
    """

    update_type: Optional[str] = None
    constraints: Dict[str, str] = field(default_factory=dict)
    env: Dict[str, str] = field(default_factory=dict)
    exec_timeout: Optional[int] = None


@dataclass
class UpdateArtifact:
    """One request to regenerate the lock file next to a manifest.

    Attributes:
        config: Settings for this run.
        updated_deps: Upgrades being applied.
        package_file_name: Path of the manifest (``pyproject.toml``).
    """

    config: UpdateArtifactsConfig
    updated_deps: List[Upgrade]
    package_file_name: str

    @property
    def is_lock_file_maintenance(self) -> bool:
        """Whether the whole lock file should be re-resolved."""
        return self.config.update_type == LOCK_FILE_MAINTENANCE or any(
            dep.update_type == LOCK_FILE_MAINTENANCE for dep in self.updated_deps
        )


@dataclass(frozen=True)
class FileChange:
    """A file to write back, with its new contents."""

    path: str
    contents: str
    type: str = "addition"


@dataclass(frozen=True)
class ArtifactError:
    """A lock file that could not be regenerated."""

    lock_file: str
    stderr: str


@dataclass(frozen=True)
class UpdateArtifactsResult:
    """Outcome for one artifact: either ``file`` or ``artifact_error``."""

    file: Optional[FileChange] = None
    artifact_error: Optional[ArtifactError] = None

    def __post_init__(self) -> None:
        if (self.file is None) == (self.artifact_error is None):
            raise ValueError("Exactly one of 'file' or 'artifact_error' is required")

    def to_json(self) -> Dict[str, Any]:
        if self.file is not None:
            return {
                "file": {
                    "type": self.file.type,
                    "path": self.file.path,
                    "contents": self.file.contents,
                }
            }
        assert self.artifact_error is not None
        return {
            "artifactError": {
                "lockFile": self.artifact_error.lock_file,
                "stderr": self.artifact_error.stderr,
            }
        }
