"""Dependency extraction from Bazel rule fragments.

Three steps turn a parsed rule call into a :class:`PackageDependency`:

1. **Prefilter** — :func:`is_supported_rule` checks the rule name against
   :data:`SUPPORTED_RULES_REGEX`, built once from every target's ``RULES``.
   Callers use it to skip rules no target could ever accept.
2. **Flatten** — :func:`flatten_fragment` strips fragment node wrappers,
   leaving plain ``str`` / ``list`` / ``dict`` data.
3. **Validate** — :class:`TargetValidator` tries each target shape in
   declared order; the first structural match wins.

Typical usage::

    from lockkeeper.bazel import extract_dep_from_fragment, is_supported_rule

    if is_supported_rule(rule_name):
        dep = extract_dep_from_fragment(fragment)
"""

from __future__ import annotations

import re
from typing import Any, Iterable, List, Optional, Pattern, Sequence, Tuple, Type

from lockkeeper.utils.logger import get_logger
from lockkeeper.constants import MAX_FRAGMENT_DEPTH
from lockkeeper.exceptions import FragmentDepthError
from lockkeeper.models.dependency import PackageDependency
from lockkeeper.bazel.targets import DEFAULT_TARGETS, BazelTarget
from lockkeeper.models.fragment import (
    ArrayFragment,
    Fragment,
    FragmentData,
    RecordFragment,
    StringFragment,
)

logger = get_logger("bazel.extract")

__all__ = [
    "SUPPORTED_RULES",
    "SUPPORTED_RULES_REGEX",
    "TargetValidator",
    "build_rules_regex",
    "extract_dep_from_fragment",
    "extract_dep_from_fragment_data",
    "extract_deps_from_fragments",
    "flatten_fragment",
    "is_supported_rule",
]


# ---------------------------------------------------------------------------
# Flattening
# ---------------------------------------------------------------------------


def flatten_fragment(
    fragment: Any,
    *,
    max_depth: int = MAX_FRAGMENT_DEPTH,
) -> FragmentData:
    """Collapse a fragment tree into plain nested data.

    Strings map to themselves, arrays to lists (order preserved) and
    records to dicts (key order preserved). Input that is already plain
    data passes through unchanged, so flattening is idempotent.

    Args:
        fragment: Fragment tree or already-flattened data.
        max_depth: Maximum container nesting accepted.

    Returns:
        The flattened data.

    Raises:
        FragmentDepthError: Nesting exceeds *max_depth*.
    """
    return _flatten(fragment, 0, max_depth)


def _flatten(node: Any, depth: int, max_depth: int) -> FragmentData:
    if depth > max_depth:
        raise FragmentDepthError(max_depth)

    if isinstance(node, StringFragment):
        return node.value
    if isinstance(node, str):
        return node

    if isinstance(node, RecordFragment):
        items: Iterable[Tuple[str, Any]] = node.children.items()
    elif isinstance(node, dict):
        items = node.items()
    else:
        children = node.children if isinstance(node, ArrayFragment) else node
        return [_flatten(child, depth + 1, max_depth) for child in children]

    return {key: _flatten(value, depth + 1, max_depth) for key, value in items}


# ---------------------------------------------------------------------------
# Rule prefilter
# ---------------------------------------------------------------------------


def build_rules_regex(patterns: Iterable[str]) -> Pattern[str]:
    """Join rule-name patterns into one anchored alternation."""
    return re.compile("^(?:" + "|".join(patterns) + ")$")


#: Every rule-name pattern declared by a supported target.
SUPPORTED_RULES: Tuple[str, ...] = tuple(
    pattern for target in DEFAULT_TARGETS for pattern in target.RULES
)

#: Speeds up extraction by discarding rules no target supports.
SUPPORTED_RULES_REGEX: Pattern[str] = build_rules_regex(SUPPORTED_RULES)


def is_supported_rule(rule_name: str) -> bool:
    """Return ``True`` if some target might accept a rule named *rule_name*."""
    return SUPPORTED_RULES_REGEX.fullmatch(rule_name) is not None


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TargetValidator:
    """Matches flattened data against an ordered list of target shapes.

    Order matters: a permissive target placed first shadows more specific
    ones, so targets are always tried in the order given.

    Example::

        >>> validator = TargetValidator([GitTarget, HttpTarget])
        >>> validator.validate({"rule": "git_repository", "name": "x",
        ...                     "remote": "https://github.com/o/r.git"})
        PackageDependency(dep_name='x', package_name='o/r', ...)
    """

    def __init__(self, targets: Sequence[Type[BazelTarget]]) -> None:
        self.targets: Tuple[Type[BazelTarget], ...] = tuple(targets)

    def match(self, data: FragmentData) -> Optional[BazelTarget]:
        """Return the first target instance *data* validates against."""
        for target_cls in self.targets:
            target = target_cls.from_data(data)
            if target is not None:
                return target
        return None

    def validate(self, data: FragmentData) -> Optional[PackageDependency]:
        """Return the dependency described by *data*, or ``None``."""
        target = self.match(data)
        if target is None:
            return None
        return target.to_dependency()


DEFAULT_VALIDATOR = TargetValidator(DEFAULT_TARGETS)


def extract_dep_from_fragment_data(
    fragment_data: FragmentData,
) -> Optional[PackageDependency]:
    """Validate already-flattened data with the default target order."""
    return DEFAULT_VALIDATOR.validate(fragment_data)


def extract_dep_from_fragment(fragment: Fragment) -> Optional[PackageDependency]:
    """Flatten *fragment* and validate it; ``None`` if it is unsupported."""
    try:
        fragment_data = flatten_fragment(fragment)
    except FragmentDepthError as exc:
        logger.debug("Skipping fragment: %s", exc)
        return None
    return extract_dep_from_fragment_data(fragment_data)


def extract_deps_from_fragments(
    fragments: Iterable[Fragment],
) -> List[PackageDependency]:
    """Extract every supported dependency from a sequence of rule fragments.

    Record fragments whose ``rule`` is rejected by the prefilter are skipped
    without being flattened.
    """
    deps: List[PackageDependency] = []
    for fragment in fragments:
        if isinstance(fragment, RecordFragment):
            rule = fragment.children.get("rule")
            if isinstance(rule, StringFragment) and not is_supported_rule(rule.value):
                logger.debug("Skipping unsupported rule %s", rule.value)
                continue
        dep = extract_dep_from_fragment(fragment)
        if dep is not None:
            deps.append(dep)
    return deps
