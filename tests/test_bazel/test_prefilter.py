from __future__ import annotations

import re

import pytest

from lockkeeper.bazel.targets import DEFAULT_TARGETS
from lockkeeper.bazel.extract import (
    SUPPORTED_RULES,
    SUPPORTED_RULES_REGEX,
    build_rules_regex,
    is_supported_rule,
)

ALL_DECLARED_RULES = [rule for target in DEFAULT_TARGETS for rule in target.RULES]


@pytest.mark.unit
class TestRulePrefilter:
    """Tests for the supported-rules prefilter."""

    @pytest.mark.parametrize("rule", ALL_DECLARED_RULES)
    def test_accepts_every_declared_rule(self, rule: str) -> None:
        assert is_supported_rule(rule)

    @pytest.mark.parametrize(
        "rule",
        [
            "maven_install",
            "go_register_toolchains",
            "http_archive_extra",
            "xhttp_archive",
            "container_pull\n",
            "",
        ],
    )
    def test_rejects_unsupported_rules(self, rule: str) -> None:
        assert not is_supported_rule(rule)

    def test_is_anchored_on_both_ends(self) -> None:
        # Alternation must be grouped, or only the first/last branch is anchored
        assert not is_supported_rule("prefix_git_repository")
        assert not is_supported_rule("container_pull_suffix")

    def test_covers_all_targets(self) -> None:
        assert set(SUPPORTED_RULES) == set(ALL_DECLARED_RULES)

    def test_is_compiled_once(self) -> None:
        from lockkeeper.bazel import extract

        assert extract.SUPPORTED_RULES_REGEX is SUPPORTED_RULES_REGEX
        assert isinstance(SUPPORTED_RULES_REGEX, re.Pattern)


@pytest.mark.unit
class TestBuildRulesRegex:
    """Tests for build_rules_regex."""

    def test_patterns_are_regular_expressions(self) -> None:
        regex = build_rules_regex(["_?foo_rule", "bar"])

        assert regex.fullmatch("foo_rule")
        assert regex.fullmatch("_foo_rule")
        assert regex.fullmatch("bar")
        assert not regex.fullmatch("foo_rulebar")
