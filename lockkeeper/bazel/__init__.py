"""
Bazel ``WORKSPACE`` dependency extraction.

    from lockkeeper.bazel import extract_dep_from_fragment
"""

from __future__ import annotations

from lockkeeper.bazel.extract import (
    SUPPORTED_RULES_REGEX,
    TargetValidator,
    extract_dep_from_fragment,
    extract_dep_from_fragment_data,
    extract_deps_from_fragments,
    flatten_fragment,
    is_supported_rule,
)
from lockkeeper.bazel.targets import (
    DEFAULT_TARGETS,
    BazelTarget,
    DockerTarget,
    GitTarget,
    GoTarget,
    HttpTarget,
)

__all__ = [
    "SUPPORTED_RULES_REGEX",
    "TargetValidator",
    "extract_dep_from_fragment",
    "extract_dep_from_fragment_data",
    "extract_deps_from_fragments",
    "flatten_fragment",
    "is_supported_rule",
    "DEFAULT_TARGETS",
    "BazelTarget",
    "DockerTarget",
    "GitTarget",
    "GoTarget",
    "HttpTarget",
]
