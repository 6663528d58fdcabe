"""Unit tests for flatten_fragment.

Test Coverage:
- Unwrapping string, array and record nodes
- Idempotence on already-plain data
- Depth ceiling
"""

from __future__ import annotations

import pytest

from lockkeeper.bazel.extract import flatten_fragment
from lockkeeper.exceptions import FragmentDepthError
from lockkeeper.models.fragment import (
    ArrayFragment,
    RecordFragment,
    StringFragment,
)


def _nested_arrays(depth: int) -> ArrayFragment:
    node = ArrayFragment([StringFragment("leaf")])
    for _ in range(depth):
        node = ArrayFragment([node])
    return node


@pytest.fixture
def git_rule_fragment() -> RecordFragment:
    """A ``git_repository(...)`` call as produced by the WORKSPACE parser."""
    return RecordFragment(
        {
            "rule": StringFragment("git_repository"),
            "name": StringFragment("rules_foo"),
            "remote": StringFragment("https://github.com/org/rules_foo.git"),
            "patches": ArrayFragment(
                [StringFragment("//:a.patch"), StringFragment("//:b.patch")]
            ),
        }
    )


@pytest.mark.unit
class TestFlattenFragment:
    """Tests for flatten_fragment."""

    def test_string_leaf_maps_to_itself(self) -> None:
        assert flatten_fragment(StringFragment("abc")) == "abc"

    def test_array_preserves_order(self) -> None:
        fragment = ArrayFragment(
            [StringFragment("c"), StringFragment("a"), StringFragment("b")]
        )

        assert flatten_fragment(fragment) == ["c", "a", "b"]

    def test_record_preserves_key_order(self, git_rule_fragment: RecordFragment) -> None:
        result = flatten_fragment(git_rule_fragment)

        assert list(result) == ["rule", "name", "remote", "patches"]
        assert result["patches"] == ["//:a.patch", "//:b.patch"]

    def test_unknown_keys_pass_through(self) -> None:
        fragment = RecordFragment(
            {"rule": StringFragment("x"), "whatever": StringFragment("kept")}
        )

        assert flatten_fragment(fragment) == {"rule": "x", "whatever": "kept"}

    def test_no_fragment_types_remain(self, git_rule_fragment: RecordFragment) -> None:
        def walk(node: object) -> None:
            assert isinstance(node, (str, list, dict))
            if isinstance(node, list):
                for child in node:
                    walk(child)
            elif isinstance(node, dict):
                for child in node.values():
                    walk(child)

        walk(flatten_fragment(git_rule_fragment))

    def test_empty_containers(self) -> None:
        assert flatten_fragment(ArrayFragment([])) == []
        assert flatten_fragment(RecordFragment({})) == {}

    def test_structure_is_preserved(self) -> None:
        fragment = RecordFragment(
            {
                "a": ArrayFragment([StringFragment("1"), RecordFragment({})]),
                "b": RecordFragment({"c": StringFragment("2")}),
            }
        )

        result = flatten_fragment(fragment)

        assert set(result) == set(fragment.children)
        assert len(result["a"]) == len(fragment.children["a"].children)
        assert set(result["b"]) == {"c"}

    def test_reflattening_is_identity(self, git_rule_fragment: RecordFragment) -> None:
        flat = flatten_fragment(git_rule_fragment)

        assert flatten_fragment(flat) == flat

    @pytest.mark.parametrize(
        "data",
        ["x", [], {}, ["a", ["b"]], {"k": {"n": ["v"]}}],
        ids=["string", "empty-list", "empty-dict", "nested-list", "nested-dict"],
    )
    def test_plain_data_passes_through(self, data: object) -> None:
        assert flatten_fragment(data) == data

    def test_depth_ceiling(self) -> None:
        with pytest.raises(FragmentDepthError) as exc_info:
            flatten_fragment(_nested_arrays(10), max_depth=5)

        assert exc_info.value.max_depth == 5

    def test_depth_at_ceiling_is_accepted(self) -> None:
        result = flatten_fragment(_nested_arrays(4), max_depth=5)

        for _ in range(5):
            result = result[0]
        assert result == "leaf"

    def test_default_ceiling_stops_pathological_input(self) -> None:
        with pytest.raises(FragmentDepthError):
            flatten_fragment(_nested_arrays(5000))
