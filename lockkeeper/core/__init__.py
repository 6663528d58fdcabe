"""
Core functionality exports for lockkeeper.

    from lockkeeper.core import UvProcessor, load_project
"""

from __future__ import annotations

from lockkeeper.core.uv import UvProcessor, generate_update_command
from lockkeeper.core.lockfile import LockedVersionMap, parse_uv_lockfile
from lockkeeper.core.pyproject import (
    extract_pyproject_deps,
    load_project,
    parse_dependency_list,
    parse_pep508,
    parse_project,
)

__all__ = [
    "UvProcessor",
    "generate_update_command",
    "LockedVersionMap",
    "parse_uv_lockfile",
    "extract_pyproject_deps",
    "load_project",
    "parse_dependency_list",
    "parse_pep508",
    "parse_project",
]
