"""
Version comparison helpers used to report lock file changes.
"""

from __future__ import annotations

from typing import List, Mapping, NamedTuple, Optional, Tuple

from packaging.version import InvalidVersion, Version


class LockedChange(NamedTuple):
    """One package whose locked version differs between two lock files."""

    name: str
    before: Optional[str]
    after: Optional[str]
    update_type: str


def get_update_type(
    current_version: Optional[str],
    target_version: Optional[str],
) -> str:
    """Classify the change from *current_version* to *target_version*.

    Returns:
        ``"new"`` (no current), ``"removed"`` (no target), ``"same"``,
        ``"downgrade"``, ``"major"``, ``"minor"``, ``"patch"``, ``"update"``
        (pre-release or local-only change) or ``"unknown"`` (unparseable).

    Examples:
        >>> get_update_type("1.0.0", "2.0.0")
        'major'
        >>> get_update_type(None, "1.0.0")
        'new'
    """
    if current_version is None and target_version is None:
        return "unknown"
    if current_version is None:
        return "new"
    if target_version is None:
        return "removed"

    try:
        current = Version(current_version)
        target = Version(target_version)
    except InvalidVersion:
        return "unknown"

    if target == current:
        return "same"
    if target < current:
        return "downgrade"

    current_release = _release_triplet(current)
    target_release = _release_triplet(target)
    for label, before, after in zip(
        ("major", "minor", "patch"), current_release, target_release
    ):
        if before != after:
            return label

    return "update"


def _release_triplet(version: Version) -> Tuple[int, int, int]:
    padded = tuple(version.release) + (0, 0, 0)
    return padded[0], padded[1], padded[2]


def diff_locked_versions(
    before: Mapping[str, str],
    after: Mapping[str, str],
) -> List[LockedChange]:
    """List packages whose locked version changed, sorted by name."""
    changes: List[LockedChange] = []
    for name in sorted(set(before) | set(after)):
        old, new = before.get(name), after.get(name)
        if old == new:
            continue
        changes.append(LockedChange(name, old, new, get_update_type(old, new)))
    return changes
