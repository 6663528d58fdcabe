"""Lock command implementation for lockkeeper.

Regenerates the ``uv.lock`` next to a ``pyproject.toml`` with ``uv lock``
and reports which locked versions moved.

Without ``--packages`` (or with ``--maintenance``) the whole lock file is
re-resolved (``uv lock --upgrade``). With ``--packages`` only the named
packages are upgraded (``--upgrade-package`` per package).

Typical usage::

    $ lockkeeper lock
    $ lockkeeper lock -p httpx -p rich
    $ lockkeeper lock path/to/pyproject.toml --maintenance

Exit codes: 0 on success (changed or unchanged), 1 when ``uv lock`` failed,
75 on a transient failure worth retrying.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional, Tuple

import click
from packaging.utils import canonicalize_name

from lockkeeper.core import UvProcessor, load_project
from lockkeeper.core.lockfile import parse_uv_lockfile_or_empty
from lockkeeper.constants import LOCK_FILE_MAINTENANCE, UV_LOCK_FILE_NAME
from lockkeeper.exceptions import LockkeeperError, TemporaryError
from lockkeeper.context import pass_context, LockkeeperContext
from lockkeeper.models import (
    UpdateArtifact,
    UpdateArtifactsConfig,
    UpdateArtifactsResult,
    Upgrade,
)
from lockkeeper.utils import (
    LockedChange,
    colorize_update_type,
    diff_locked_versions,
    get_logger,
    get_sibling_file_name,
    print_error,
    print_json,
    print_success,
    print_table,
    print_warning,
    read_local_file,
)

logger = get_logger("commands.lock")

#: Exit status for transient failures (sysexits.h EX_TEMPFAIL).
EXIT_TEMPFAIL = 75


@click.command()
@click.argument(
    "file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default="pyproject.toml",
)
@click.option(
    "--packages",
    "-p",
    multiple=True,
    help="Upgrade only these packages (can be repeated).",
)
@click.option(
    "--maintenance",
    is_flag=True,
    help="Re-resolve every package in the lock file.",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print the raw artifact result as JSON.",
)
@pass_context
def lock(
    ctx: LockkeeperContext,
    file: Path,
    packages: Tuple[str, ...],
    maintenance: bool,
    as_json: bool,
) -> None:
    """Regenerate uv.lock and report locked version changes."""
    config = ctx.get_config().to_artifacts_config()
    if maintenance or not packages:
        config.update_type = LOCK_FILE_MAINTENANCE

    try:
        before, results = asyncio.run(_lock_async(file, config, list(packages)))
    except TemporaryError as exc:
        print_error("Temporary failure while running uv, please retry")
        logger.debug("Transient failure details: %s", exc.details)
        raise SystemExit(EXIT_TEMPFAIL) from exc
    except LockkeeperError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    if as_json:
        print_json([result.to_json() for result in results or []])
    else:
        _report(file, before, results)

    if results and any(r.artifact_error for r in results):
        raise SystemExit(1)


def build_upgrades(packages: List[str], config: UpdateArtifactsConfig) -> List[Upgrade]:
    """Turn ``--packages`` names into upgrade requests."""
    return [
        Upgrade(
            dep_name=name,
            package_name=canonicalize_name(name),
            update_type=config.update_type,
        )
        for name in packages
    ]


async def _lock_async(
    file: Path,
    config: UpdateArtifactsConfig,
    packages: List[str],
) -> Tuple[Optional[str], Optional[List[UpdateArtifactsResult]]]:
    """Run the artifact update; return the previous lock content and result."""
    project = load_project(file)
    lock_file_name = get_sibling_file_name(file, UV_LOCK_FILE_NAME)
    before = await read_local_file(lock_file_name)

    request = UpdateArtifact(
        config=config,
        updated_deps=build_upgrades(packages, config),
        package_file_name=str(file),
    )
    logger.info(
        "Updating %s (%s)",
        lock_file_name,
        "maintenance" if request.is_lock_file_maintenance else "targeted",
    )
    results = await UvProcessor().update_artifacts(request, project)
    return before, results


def _report(
    file: Path,
    before: Optional[str],
    results: Optional[List[UpdateArtifactsResult]],
) -> None:
    if before is None:
        print_warning(f"No {UV_LOCK_FILE_NAME} next to {file}, nothing to do")
        return

    if not results:
        print_success(f"{UV_LOCK_FILE_NAME} is up to date")
        return

    for result in results:
        if result.artifact_error is not None:
            print_error(
                f"Failed to update {result.artifact_error.lock_file}:\n"
                f"{result.artifact_error.stderr}"
            )
            continue

        assert result.file is not None
        changes = diff_locked_versions(
            parse_uv_lockfile_or_empty(before),
            parse_uv_lockfile_or_empty(result.file.contents),
        )
        _display_changes(changes)
        print_success(f"Updated {result.file.path}")


def _display_changes(changes: List[LockedChange]) -> None:
    if not changes:
        print_warning("Lock file changed, but no locked versions moved")
        return

    rows = [
        {
            "Package": change.name,
            "Before": change.before or "-",
            "After": change.after or "-",
            "Change": colorize_update_type(change.update_type),
        }
        for change in changes
    ]
    print_table(
        rows,
        title="Locked Version Changes",
        column_styles={
            "Package": {"style": "bold cyan", "no_wrap": True},
            "Before": {"justify": "center", "style": "dim"},
            "After": {"justify": "center"},
            "Change": {"justify": "center"},
        },
    )
