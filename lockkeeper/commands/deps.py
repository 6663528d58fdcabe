"""Deps command implementation for lockkeeper.

Lists the dependencies declared in a ``pyproject.toml`` (``[project]``,
``[dependency-groups]`` and ``[tool.uv]``) together with the versions
pinned in the sibling ``uv.lock``.

Typical usage::

    $ lockkeeper deps
    $ lockkeeper deps path/to/pyproject.toml --json
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List

import click

from lockkeeper.core import UvProcessor, extract_pyproject_deps, load_project
from lockkeeper.models import PackageDependency
from lockkeeper.exceptions import LockkeeperError
from lockkeeper.context import pass_context, LockkeeperContext
from lockkeeper.utils import (
    get_logger,
    print_error,
    print_json,
    print_table,
    print_warning,
)

logger = get_logger("commands.deps")


@click.command()
@click.argument(
    "file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default="pyproject.toml",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print dependencies as JSON.",
)
@pass_context
def deps(ctx: LockkeeperContext, file: Path, as_json: bool) -> None:
    """List declared dependencies and their locked versions."""
    try:
        dependencies = asyncio.run(collect_dependencies(file))
    except LockkeeperError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    if as_json:
        print_json([dep.to_json() for dep in dependencies])
        return

    if not dependencies:
        print_warning(f"No dependencies declared in {file}")
        return

    _display_dependencies(dependencies, file)


async def collect_dependencies(file: Path) -> List[PackageDependency]:
    """Extract all dependencies of *file* and attach locked versions."""
    logger.info("Reading dependencies from %s", file)

    project = load_project(file)
    processor = UvProcessor()

    dependencies = extract_pyproject_deps(project)
    processor.process(project, dependencies)
    await processor.extract_locked_versions(project, dependencies, str(file))

    logger.info("Found %d dependencies", len(dependencies))
    return dependencies


def _display_dependencies(dependencies: List[PackageDependency], file: Path) -> None:
    rows = [
        {
            "Package": dep.package_name or dep.dep_name or "-",
            "Type": dep.dep_type or "-",
            "Constraint": dep.current_value or "-",
            "Locked": dep.locked_version or "[dim]-[/dim]",
            "Note": dep.skip_reason or "",
        }
        for dep in dependencies
    ]

    print_table(
        rows,
        title=f"Dependencies in {file}",
        column_styles={
            "Package": {"style": "bold cyan", "no_wrap": True},
            "Type": {"style": "dim"},
            "Locked": {"justify": "center"},
        },
    )
