from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Mapping, Tuple

import pytest

from lockkeeper.models.dependency import PackageDependency
from lockkeeper.bazel.extract import (
    TargetValidator,
    extract_dep_from_fragment,
    extract_dep_from_fragment_data,
    extract_deps_from_fragments,
)
from lockkeeper.bazel.targets import (
    BazelTarget,
    DockerTarget,
    GitTarget,
    GoTarget,
    HttpTarget,
)
from lockkeeper.models.fragment import (
    ArrayFragment,
    RecordFragment,
    StringFragment,
)


def _record(**fields: Any) -> RecordFragment:
    children: Dict[str, Any] = {}
    for key, value in fields.items():
        if isinstance(value, list):
            children[key] = ArrayFragment([StringFragment(v) for v in value])
        else:
            children[key] = StringFragment(value)
    return RecordFragment(children)


# ---------------------------------------------------------------------------
# Deliberately overlapping shapes for precedence checks
# ---------------------------------------------------------------------------


@dataclass
class LooseTarget(BazelTarget):
    RULES: ClassVar[Tuple[str, ...]] = ("custom_.*",)

    @classmethod
    def _from_fields(cls, data: Mapping[str, Any], **base: str) -> "LooseTarget":
        return cls(**base)

    def to_dependency(self) -> PackageDependency:
        return PackageDependency(dep_name=self.name, dep_type="loose")


@dataclass
class StrictTarget(BazelTarget):
    RULES: ClassVar[Tuple[str, ...]] = ("custom_rule",)

    url: str = ""

    @classmethod
    def _from_fields(cls, data: Mapping[str, Any], **base: str) -> "StrictTarget":
        url = data.get("url")
        if not isinstance(url, str):
            return None  # type: ignore[return-value]
        return cls(**base, url=url)

    def to_dependency(self) -> PackageDependency:
        return PackageDependency(dep_name=self.name, dep_type="strict")


@pytest.mark.unit
class TestDockerTarget:
    """Tests for container_pull rules."""

    def test_full_declaration(self) -> None:
        dep = extract_dep_from_fragment(
            _record(
                rule="container_pull",
                name="base_image",
                registry="gcr.io",
                repository="distroless/base",
                tag="debug",
                digest="sha256:abc",
            )
        )

        assert dep == PackageDependency(
            dep_name="base_image",
            package_name="distroless/base",
            current_value="debug",
            current_digest="sha256:abc",
            datasource="docker",
            dep_type="container_pull",
            registry_urls=["gcr.io"],
        )

    def test_missing_repository_is_no_match(self) -> None:
        data = {"rule": "container_pull", "name": "x", "registry": "gcr.io"}

        assert DockerTarget.from_data(data) is None
        assert extract_dep_from_fragment_data(data) is None

    def test_wrong_field_shape_is_no_match(self) -> None:
        data = {
            "rule": "container_pull",
            "name": "x",
            "registry": "gcr.io",
            "repository": "r",
            "tag": ["not", "a", "string"],
        }

        assert extract_dep_from_fragment_data(data) is None


@pytest.mark.unit
class TestGitTarget:
    """Tests for git_repository rules."""

    def test_github_remote(self) -> None:
        dep = extract_dep_from_fragment(
            _record(
                rule="git_repository",
                name="rules_foo",
                remote="https://github.com/org/rules_foo.git",
                tag="1.2.0",
            )
        )

        assert dep is not None
        assert dep.datasource == "github-releases"
        assert dep.package_name == "org/rules_foo"
        assert dep.current_value == "1.2.0"
        assert dep.skip_reason is None

    def test_commit_pin(self) -> None:
        dep = extract_dep_from_fragment_data(
            {
                "rule": "_git_repository",
                "name": "x",
                "remote": "git@github.com:org/x.git",
                "commit": "a" * 40,
            }
        )

        assert dep is not None
        assert dep.package_name == "org/x"
        assert dep.current_digest == "a" * 40
        assert dep.dep_type == "_git_repository"

    def test_non_github_remote_is_skipped(self) -> None:
        dep = extract_dep_from_fragment_data(
            {
                "rule": "git_repository",
                "name": "x",
                "remote": "https://gitlab.com/org/x.git",
                "tag": "v1",
            }
        )

        assert dep is not None
        assert dep.skip_reason == "unsupported-datasource"
        assert dep.datasource is None


@pytest.mark.unit
class TestGoTarget:
    """Tests for go_repository rules."""

    def test_tagged_module(self) -> None:
        dep = extract_dep_from_fragment(
            _record(
                rule="go_repository",
                name="com_github_pkg_errors",
                importpath="github.com/pkg/errors",
                tag="v0.9.1",
            )
        )

        assert dep is not None
        assert dep.datasource == "go"
        assert dep.package_name == "github.com/pkg/errors"
        assert dep.current_value == "v0.9.1"

    def test_commit_only_module(self) -> None:
        dep = extract_dep_from_fragment_data(
            {
                "rule": "go_repository",
                "name": "x",
                "importpath": "golang.org/x/text",
                "commit": "b" * 40,
            }
        )

        assert dep is not None
        assert dep.current_value == "v0.0.0"
        assert dep.current_digest == "b" * 40

    def test_github_remote_overrides_package(self) -> None:
        dep = extract_dep_from_fragment_data(
            {
                "rule": "go_repository",
                "name": "x",
                "importpath": "example.com/x",
                "remote": "https://github.com/fork/x",
                "tag": "v1.0.0",
            }
        )

        assert dep is not None
        assert dep.package_name == "github.com/fork/x"
        assert dep.skip_reason is None

    def test_other_remote_is_skipped(self) -> None:
        dep = extract_dep_from_fragment_data(
            {
                "rule": "go_repository",
                "name": "x",
                "importpath": "example.com/x",
                "remote": "https://git.example.com/x",
            }
        )

        assert dep is not None
        assert dep.skip_reason == "unsupported-remote"


@pytest.mark.unit
class TestHttpTarget:
    """Tests for http_archive / http_file rules."""

    def test_github_release_download(self) -> None:
        dep = extract_dep_from_fragment(
            _record(
                rule="http_archive",
                name="bazel_skylib",
                urls=[
                    "https://mirror.bazel.build/skylib-1.4.2.tar.gz",
                    "https://github.com/bazelbuild/bazel-skylib/releases/download/1.4.2/bazel-skylib-1.4.2.tar.gz",
                ],
                sha256="66ffd9315665bfaafc96b52278f57c7e2dd09f5ede279ea6d39b2be471e7e3aa",
            )
        )

        assert dep is not None
        assert dep.datasource == "github-releases"
        assert dep.package_name == "bazelbuild/bazel-skylib"
        assert dep.current_value == "1.4.2"
        assert dep.current_digest.startswith("66ffd931")

    def test_github_tag_archive(self) -> None:
        dep = extract_dep_from_fragment_data(
            {
                "rule": "http_archive",
                "name": "x",
                "url": "https://github.com/org/x/archive/refs/tags/v2.0.0.tar.gz",
            }
        )

        assert dep is not None
        assert dep.datasource == "github-tags"
        assert dep.current_value == "v2.0.0"

    def test_github_commit_archive(self) -> None:
        sha = "c" * 40
        dep = extract_dep_from_fragment_data(
            {
                "rule": "http_file",
                "name": "x",
                "url": f"https://github.com/org/x/archive/{sha}.zip",
            }
        )

        assert dep is not None
        assert dep.current_digest == sha
        assert dep.current_value is None

    def test_unknown_url_is_skipped(self) -> None:
        dep = extract_dep_from_fragment_data(
            {"rule": "http_file", "name": "x", "url": "https://example.com/f.bin"}
        )

        assert dep is not None
        assert dep.skip_reason == "unsupported-url"

    def test_url_or_urls_required(self) -> None:
        assert HttpTarget.from_data({"rule": "http_archive", "name": "x"}) is None

    def test_urls_must_be_strings(self) -> None:
        data = {"rule": "http_archive", "name": "x", "urls": ["ok", ["nested"]]}

        assert extract_dep_from_fragment_data(data) is None


@pytest.mark.unit
class TestTargetValidator:
    """Tests for ordered target validation."""

    @pytest.mark.parametrize(
        "data",
        [
            "git_repository",
            ["git_repository"],
            {},
            {"name": "x"},
            {"rule": "maven_install", "name": "x"},
            {"rule": ["git_repository"], "name": "x", "remote": "r"},
        ],
        ids=["string", "list", "empty", "no-rule", "unsupported-rule", "rule-list"],
    )
    def test_unsupported_shapes_return_none(self, data: Any) -> None:
        assert extract_dep_from_fragment_data(data) is None

    def test_rule_must_match_target(self) -> None:
        # Git-shaped fields under a docker rule name
        data = {"rule": "container_pull", "name": "x", "remote": "r", "tag": "1"}

        assert GitTarget.from_data(data) is None
        assert extract_dep_from_fragment_data(data) is None

    def test_first_match_wins(self) -> None:
        data = {"rule": "custom_rule", "name": "x", "url": "u"}

        loose_first = TargetValidator([LooseTarget, StrictTarget]).validate(data)
        strict_first = TargetValidator([StrictTarget, LooseTarget]).validate(data)

        assert loose_first is not None and loose_first.dep_type == "loose"
        assert strict_first is not None and strict_first.dep_type == "strict"

    def test_falls_through_to_later_target(self) -> None:
        data = {"rule": "custom_rule", "name": "x"}

        dep = TargetValidator([StrictTarget, LooseTarget]).validate(data)

        assert dep is not None and dep.dep_type == "loose"

    def test_match_returns_target_instance(self) -> None:
        validator = TargetValidator([DockerTarget, GitTarget, GoTarget, HttpTarget])

        target = validator.match(
            {"rule": "go_repository", "name": "x", "importpath": "a/b"}
        )

        assert isinstance(target, GoTarget)
        assert target.importpath == "a/b"

    def test_returns_at_most_one_dependency(self) -> None:
        data = {"rule": "custom_rule", "name": "x", "url": "u"}

        result = TargetValidator([LooseTarget, StrictTarget]).validate(data)

        assert isinstance(result, PackageDependency)


@pytest.mark.unit
class TestExtractDepsFromFragments:
    """Tests for batch extraction with prefiltering."""

    def test_skips_unsupported_rules_without_validation(self) -> None:
        fragments = [
            _record(rule="maven_install", name="m"),
            _record(
                rule="go_repository", name="g", importpath="a/b", tag="v1.0.0"
            ),
            _record(rule="http_archive", name="broken"),
        ]

        deps = extract_deps_from_fragments(fragments)

        assert [d.dep_name for d in deps] == ["g"]
