"""
Centralized constants for lockkeeper.

This module defines immutable values used across lockkeeper: lock file
names, package-manager commands, update types, extraction limits and
logging formats. All values are intended to be treated as read-only.
"""

from typing import Final

# ---------------------------------------------------------------------------
# uv lock reconciliation
# ---------------------------------------------------------------------------

#: Name of the uv lock file, always a sibling of ``pyproject.toml``.
UV_LOCK_FILE_NAME: Final[str] = "uv.lock"

#: Base invocation used to regenerate ``uv.lock``.
UV_UPDATE_CMD: Final[str] = "uv lock --python-preference only-system"

#: Flag appended in lock file maintenance mode.
UV_UPGRADE_ALL_FLAG: Final[str] = "--upgrade"

#: Flag appended once per package in targeted mode.
UV_UPGRADE_PACKAGE_FLAG: Final[str] = "--upgrade-package"

#: Update type requesting a full re-resolution of the lock file.
LOCK_FILE_MAINTENANCE: Final[str] = "lockFileMaintenance"

#: Update types accepted in configuration.
UPDATE_TYPES: Final[frozenset] = frozenset(
    {
        LOCK_FILE_MAINTENANCE,
        "major",
        "minor",
        "patch",
        "pin",
        "digest",
        "bump",
        "replacement",
    }
)

#: Message carried by transient failures that callers should retry.
TEMPORARY_ERROR: Final[str] = "temporary-error"

# ---------------------------------------------------------------------------
# Dependency types and datasources
# ---------------------------------------------------------------------------

DEP_TYPE_PROJECT: Final[str] = "project.dependencies"
DEP_TYPE_OPTIONAL: Final[str] = "project.optional-dependencies"
DEP_TYPE_GROUP: Final[str] = "dependency-groups"
DEP_TYPE_UV_DEV: Final[str] = "tool.uv.dev-dependencies"

DATASOURCE_PYPI: Final[str] = "pypi"
DATASOURCE_DOCKER: Final[str] = "docker"
DATASOURCE_GO: Final[str] = "go"
DATASOURCE_GITHUB_TAGS: Final[str] = "github-tags"
DATASOURCE_GITHUB_RELEASES: Final[str] = "github-releases"

# ---------------------------------------------------------------------------
# Extraction limits
# ---------------------------------------------------------------------------

#: Maximum nesting depth accepted when flattening a Bazel fragment.
MAX_FRAGMENT_DEPTH: Final[int] = 256

#: Maximum allowed file size (in bytes) when reading manifests and lock files.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

#: Default timeout for external commands, in seconds.
DEFAULT_EXEC_TIMEOUT: Final[int] = 15 * 60

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
