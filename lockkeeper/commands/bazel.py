"""Bazel command implementation for lockkeeper.

Reads Bazel rule fragments exported by a WORKSPACE parser as JSON and
prints the dependencies they declare. The file holds a list of fragment
objects, one per rule call::

    [
      {"type": "record", "children": {
        "rule": {"type": "string", "value": "git_repository"},
        "name": {"type": "string", "value": "rules_foo"},
        "remote": {"type": "string", "value": "https://github.com/org/rules_foo"},
        "tag": {"type": "string", "value": "1.2.0"}
      }}
    ]

Rules no supported target recognizes are skipped.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List

import click

from lockkeeper.bazel import extract_deps_from_fragments
from lockkeeper.context import pass_context, LockkeeperContext
from lockkeeper.exceptions import LockkeeperError, ParseError
from lockkeeper.models import Fragment, PackageDependency, fragment_from_json
from lockkeeper.utils import (
    get_logger,
    print_error,
    print_json,
    print_table,
    print_warning,
    safe_read_file,
)

logger = get_logger("commands.bazel")


@click.command()
@click.argument(
    "file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print dependencies as JSON.",
)
@pass_context
def bazel(ctx: LockkeeperContext, file: Path, as_json: bool) -> None:
    """Extract dependencies from Bazel rule fragments stored as JSON."""
    try:
        fragments = load_fragments(file)
    except LockkeeperError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    dependencies = extract_deps_from_fragments(fragments)
    logger.info(
        "Extracted %d dependencies from %d rules", len(dependencies), len(fragments)
    )

    if as_json:
        print_json([dep.to_json() for dep in dependencies])
        return

    if not dependencies:
        print_warning(f"No supported rules found in {file}")
        return

    _display_dependencies(dependencies)


def load_fragments(file: Path) -> List[Fragment]:
    """Load a JSON list of encoded fragments.

    Raises:
        ParseError: The file is not JSON or not a list of fragments.
    """
    try:
        raw = json.loads(safe_read_file(file))
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON: {exc}", file_path=str(file)) from exc

    if not isinstance(raw, list):
        raise ParseError("Expected a JSON list of fragments", file_path=str(file))

    return [fragment_from_json(item) for item in raw]


def _display_dependencies(dependencies: List[PackageDependency]) -> None:
    rows = [
        {
            "Name": dep.dep_name or "-",
            "Rule": dep.dep_type or "-",
            "Package": dep.package_name or "-",
            "Version": dep.current_value or "-",
            "Digest": (dep.current_digest or "-")[:12],
            "Datasource": dep.datasource or dep.skip_reason or "-",
        }
        for dep in dependencies
    ]
    print_table(
        rows,
        title="Bazel Dependencies",
        column_styles={
            "Name": {"style": "bold cyan", "no_wrap": True},
            "Rule": {"style": "dim"},
        },
    )
