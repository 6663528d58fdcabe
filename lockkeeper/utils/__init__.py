"""
Shared plumbing for the lockkeeper commands and processors.

Terminal output and logging, manifest and lock file access, the async
``uv`` runner, and the locked-version comparison used by ``lock``.
"""

from __future__ import annotations

from lockkeeper.utils.filesystem import (
    get_parent_dir,
    get_sibling_file_name,
    read_local_file,
    safe_read_file,
    validate_path,
)
from lockkeeper.utils.logger import (
    disable_logging,
    get_logger,
    is_logging_configured,
    level_for_verbosity,
    setup_logging,
)
from lockkeeper.utils.console import (
    colorize_update_type,
    print_error,
    print_json,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)
from lockkeeper.utils.exec import ExecOptions, ExecResult, ToolConstraint, exec_commands
from lockkeeper.utils.version_utils import (
    LockedChange,
    diff_locked_versions,
    get_update_type,
)

__all__ = [
    # Console
    "print_error",
    "print_json",
    "print_table",
    "print_success",
    "print_warning",
    "reconfigure_console",
    "colorize_update_type",
    # Logging
    "get_logger",
    "setup_logging",
    "disable_logging",
    "is_logging_configured",
    "level_for_verbosity",
    # Filesystem
    "get_parent_dir",
    "get_sibling_file_name",
    "read_local_file",
    "safe_read_file",
    "validate_path",
    # Exec
    "ExecOptions",
    "ExecResult",
    "ToolConstraint",
    "exec_commands",
    # Versions
    "LockedChange",
    "diff_locked_versions",
    "get_update_type",
]
