"""
Syntax fragments produced by the upstream Bazel parser.

A fragment is one of three node kinds, mirroring Starlark literals:

- :class:`StringFragment` — a string leaf
- :class:`ArrayFragment` — an ordered list of fragments
- :class:`RecordFragment` — a mapping from keyword names to fragments

A rule call such as ``git_repository(name = "x", remote = "...")`` arrives
as a ``RecordFragment`` whose children include a ``rule`` key holding the
rule name. Fragment trees are acyclic.

:data:`FragmentData` is the plain-data form obtained by flattening.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from lockkeeper.constants import MAX_FRAGMENT_DEPTH
from lockkeeper.exceptions import FragmentDepthError, ParseError


@dataclass(frozen=True)
class StringFragment:
    value: str
    type: str = field(default="string", init=False)


@dataclass(frozen=True)
class ArrayFragment:
    children: List["Fragment"] = field(default_factory=list)
    type: str = field(default="array", init=False)


@dataclass(frozen=True)
class RecordFragment:
    children: Dict[str, "Fragment"] = field(default_factory=dict)
    type: str = field(default="record", init=False)


Fragment = Union[StringFragment, ArrayFragment, RecordFragment]

FragmentData = Union[str, List["FragmentData"], Dict[str, "FragmentData"]]


def fragment_from_json(raw: Any, *, _depth: int = 0) -> Fragment:
    """Build a fragment tree from its JSON encoding.

    The encoding uses ``{"type": "string", "value": ...}``,
    ``{"type": "array", "children": [...]}`` and
    ``{"type": "record", "children": {...}}`` objects.

    Raises:
        ParseError: The object is not a valid fragment encoding.
        FragmentDepthError: Nesting exceeds :data:`MAX_FRAGMENT_DEPTH`.
    """
    if _depth > MAX_FRAGMENT_DEPTH:
        raise FragmentDepthError(MAX_FRAGMENT_DEPTH)

    if not isinstance(raw, dict):
        raise ParseError(f"Fragment node must be an object, got {type(raw).__name__}")

    kind = raw.get("type")

    if kind == "string":
        value = raw.get("value")
        if not isinstance(value, str):
            raise ParseError("String fragment requires a string 'value'")
        return StringFragment(value)

    if kind == "array":
        children = raw.get("children")
        if not isinstance(children, list):
            raise ParseError("Array fragment requires a list of 'children'")
        return ArrayFragment(
            [fragment_from_json(child, _depth=_depth + 1) for child in children]
        )

    if kind == "record":
        children = raw.get("children")
        if not isinstance(children, dict):
            raise ParseError("Record fragment requires an object of 'children'")
        return RecordFragment(
            {
                str(key): fragment_from_json(child, _depth=_depth + 1)
                for key, child in children.items()
            }
        )

    raise ParseError(f"Unknown fragment type: {kind!r}")
