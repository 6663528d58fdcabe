"""
lockkeeper — dependency extraction and lock file reconciliation.

lockkeeper turns heterogeneous dependency declarations into uniform
:class:`~lockkeeper.models.PackageDependency` records and keeps ``uv.lock``
in step with ``pyproject.toml``:

    • Bazel WORKSPACE rules (container_pull, git_repository, go_repository,
      http_archive, http_file) → dependency records
    • pyproject.toml ([project], [dependency-groups], [tool.uv]) parsing
    • Locked versions from uv.lock
    • uv lock regeneration, full or per package, with change reports
"""

from __future__ import annotations

from lockkeeper.__version__ import __version__

__author__ = "lockkeeper Contributors"
__license__ = "Apache-2.0"
__description__ = "Dependency extraction and uv.lock reconciliation."

__all__ = [
    "__version__",
]
