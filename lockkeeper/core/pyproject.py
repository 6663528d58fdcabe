"""``pyproject.toml`` loading and PEP 508 dependency parsing.

Typical usage::

    from lockkeeper.core.pyproject import load_project, extract_pyproject_deps

    project = load_project("pyproject.toml")
    deps = extract_pyproject_deps(project)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import tomli as tomllib
from packaging.requirements import InvalidRequirement, Requirement
from packaging.utils import canonicalize_name

from lockkeeper.exceptions import ParseError
from lockkeeper.utils.logger import get_logger
from lockkeeper.utils.filesystem import safe_read_file
from lockkeeper.models.dependency import PackageDependency
from lockkeeper.models.project import Project, UvToolSection
from lockkeeper.constants import (
    DATASOURCE_PYPI,
    DEP_TYPE_GROUP,
    DEP_TYPE_OPTIONAL,
    DEP_TYPE_PROJECT,
)

logger = get_logger("core.pyproject")


# ---------------------------------------------------------------------------
# PEP 508
# ---------------------------------------------------------------------------


def parse_pep508(dep_type: str, value: str) -> Optional[PackageDependency]:
    """Parse one PEP 508 requirement string.

    Args:
        dep_type: Manifest section the string came from.
        value: Requirement string such as ``"requests[socks]>=2.0"``.

    Returns:
        The dependency, or ``None`` if *value* is not a valid requirement.
        Direct URL requirements and requirements without a version
        specifier are returned with a ``skip_reason``.
    """
    try:
        req = Requirement(value)
    except InvalidRequirement as exc:
        logger.debug("Ignoring invalid requirement %r: %s", value, exc)
        return None

    dep = PackageDependency(
        dep_name=req.name,
        package_name=canonicalize_name(req.name),
        dep_type=dep_type,
        datasource=DATASOURCE_PYPI,
    )
    if req.extras:
        dep.managers_data["extras"] = sorted(req.extras)
    if req.marker is not None:
        dep.managers_data["marker"] = str(req.marker)

    if req.url:
        dep.datasource = None
        dep.current_value = req.url
        dep.skip_reason = "unsupported-url"
    elif req.specifier:
        dep.current_value = str(req.specifier)
    else:
        dep.skip_reason = "unspecified-version"

    return dep


def parse_dependency_list(
    dep_type: str,
    values: Optional[Iterable[str]],
) -> List[PackageDependency]:
    """Parse a list of PEP 508 strings, keeping source order.

    Invalid entries are dropped. ``None`` yields an empty list.
    """
    if not values:
        return []

    deps: List[PackageDependency] = []
    for value in values:
        dep = parse_pep508(dep_type, value)
        if dep is not None:
            deps.append(dep)
    return deps


def extract_pyproject_deps(project: Project) -> List[PackageDependency]:
    """Collect ``[project]`` and ``[dependency-groups]`` dependencies.

    Extras and groups are recorded in ``managers_data["depGroup"]``.
    """
    deps = parse_dependency_list(DEP_TYPE_PROJECT, project.dependencies)

    for extra, values in project.optional_dependencies.items():
        for dep in parse_dependency_list(DEP_TYPE_OPTIONAL, values):
            dep.managers_data["depGroup"] = extra
            deps.append(dep)

    for group, values in project.dependency_groups.items():
        for dep in parse_dependency_list(DEP_TYPE_GROUP, values):
            dep.managers_data["depGroup"] = group
            deps.append(dep)

    return deps


# ---------------------------------------------------------------------------
# Manifest loading
# ---------------------------------------------------------------------------


def _str_list(value: Any, where: str, file_path: Optional[str]) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ParseError(f"{where} must be a list of strings", file_path=file_path)
    return list(value)


def _table(parent: Dict[str, Any], key: str, file_path: Optional[str]) -> Dict[str, Any]:
    value = parent.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ParseError(f"{key} must be a table", file_path=file_path)
    return value


def parse_project(
    raw: Dict[str, Any],
    *,
    file_path: Optional[str] = None,
) -> Project:
    """Build a :class:`Project` from a parsed TOML document.

    Raises:
        ParseError: A modeled section has the wrong shape.
    """
    table = _table(raw, "project", file_path)

    optional: Dict[str, List[str]] = {}
    for extra, values in _table(table, "optional-dependencies", file_path).items():
        optional[extra] = _str_list(
            values, f"project.optional-dependencies.{extra}", file_path
        )

    groups: Dict[str, List[str]] = {}
    for group, values in _table(raw, "dependency-groups", file_path).items():
        if not isinstance(values, list):
            raise ParseError(
                f"dependency-groups.{group} must be a list", file_path=file_path
            )
        # {include-group = "..."} entries reference other groups
        groups[group] = [v for v in values if isinstance(v, str)]

    tool_uv: Optional[UvToolSection] = None
    uv_table = _table(raw, "tool", file_path).get("uv")
    if uv_table is not None:
        if not isinstance(uv_table, dict):
            raise ParseError("[tool.uv] must be a table", file_path=file_path)
        tool_uv = UvToolSection(
            dev_dependencies=_str_list(
                uv_table.get("dev-dependencies"), "tool.uv.dev-dependencies", file_path
            ),
            sources=dict(_table(uv_table, "sources", file_path)),
        )

    requires_python = table.get("requires-python")
    return Project(
        name=table.get("name"),
        requires_python=requires_python if isinstance(requires_python, str) else None,
        dependencies=_str_list(
            table.get("dependencies"), "project.dependencies", file_path
        ),
        optional_dependencies=optional,
        dependency_groups=groups,
        tool_uv=tool_uv,
    )


def load_project(file_path: Union[str, Path]) -> Project:
    """Read and parse a ``pyproject.toml`` file.

    Raises:
        FileOperationError: The file cannot be read.
        ParseError: The file is not valid TOML or has malformed sections.
    """
    content = safe_read_file(file_path)
    try:
        raw = tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        raise ParseError(f"Invalid TOML: {exc}", file_path=str(file_path)) from exc

    project = parse_project(raw, file_path=str(file_path))
    logger.debug(
        "Loaded %s (name=%s, uv section=%s)",
        file_path,
        project.name,
        project.tool_uv is not None,
    )
    return project
