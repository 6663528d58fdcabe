"""
Dependency records shared by Bazel extraction and uv lock reconciliation.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional


@dataclass
class PackageDependency:
    """A single normalized dependency declaration.

    Attributes:
        dep_name: Name as written in the manifest (Bazel rule ``name``,
            PEP 508 project name).
        package_name: Identifier used to look the package up (image
            repository, Go import path, PEP 503 normalized name, ...).
        current_value: Declared version, tag or specifier.
        current_digest: Pinned digest or commit, when declared.
        datasource: Hint about where versions of the package come from.
        dep_type: Where the declaration was found (rule name or manifest
            section).
        registry_urls: Registries declared alongside the dependency.
        locked_version: Exact version recorded in the lock file.
        skip_reason: Why the dependency cannot be updated, if it cannot.
        managers_data: Manager-specific extras (e.g. requested extras).
    """

    dep_name: Optional[str] = None
    package_name: Optional[str] = None
    current_value: Optional[str] = None
    current_digest: Optional[str] = None
    datasource: Optional[str] = None
    dep_type: Optional[str] = None
    registry_urls: List[str] = field(default_factory=list)
    locked_version: Optional[str] = None
    skip_reason: Optional[str] = None
    managers_data: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_skipped(self) -> bool:
        return self.skip_reason is not None

    def to_json(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dict, omitting unset fields."""
        entry: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or value == [] or value == {}:
                continue
            entry[f.name] = list(value) if isinstance(value, list) else value
        return entry


@dataclass
class Upgrade(PackageDependency):
    """A dependency annotated with the update being applied to it.

    Attributes:
        update_type: ``"lockFileMaintenance"`` for a full re-lock, otherwise
            the kind of targeted change (``"major"``, ``"minor"``, ...).
        new_value: Target value for a targeted update.
    """

    update_type: Optional[str] = None
    new_value: Optional[str] = None
