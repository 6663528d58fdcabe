"""
Typed view of a ``pyproject.toml`` manifest.

Only the sections lockkeeper reads are modeled. Build one with
:func:`lockkeeper.core.pyproject.parse_project`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class UvToolSection:
    """The ``[tool.uv]`` table.

    Attributes:
        dev_dependencies: PEP 508 strings from ``dev-dependencies``.
        sources: Raw ``sources`` table, keyed by package name.
    """

    dev_dependencies: List[str] = field(default_factory=list)
    sources: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Project:
    """A parsed ``pyproject.toml``.

    Attributes:
        name: ``project.name``.
        requires_python: ``project.requires-python`` constraint.
        dependencies: ``project.dependencies``.
        optional_dependencies: ``project.optional-dependencies`` by extra.
        dependency_groups: PEP 735 ``dependency-groups``; include-group
            entries are dropped.
        tool_uv: ``[tool.uv]``, or ``None`` when the table is absent.
    """

    name: Optional[str] = None
    requires_python: Optional[str] = None
    dependencies: List[str] = field(default_factory=list)
    optional_dependencies: Dict[str, List[str]] = field(default_factory=dict)
    dependency_groups: Dict[str, List[str]] = field(default_factory=dict)
    tool_uv: Optional[UvToolSection] = None
