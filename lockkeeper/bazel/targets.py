"""Supported Bazel repository rules.

Each target class describes one shape of dependency declaration:

- ``RULES`` — regular expressions for the rule names it recognizes
- ``from_data`` — structural validation of flattened fragment data; returns
  ``None`` when a required field is missing, a field has the wrong shape, or
  the rule name is not one of ``RULES``
- ``to_dependency`` — conversion to a :class:`PackageDependency`

Typical usage::

    target = GitTarget.from_data(
        {"rule": "git_repository", "name": "rules_foo",
         "remote": "https://github.com/org/rules_foo.git", "tag": "1.0.0"}
    )
    dep = target.to_dependency() if target else None
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, ClassVar, List, Mapping, Optional, Tuple, Type, TypeVar

from lockkeeper.models.dependency import PackageDependency
from lockkeeper.constants import (
    DATASOURCE_DOCKER,
    DATASOURCE_GO,
    DATASOURCE_GITHUB_RELEASES,
    DATASOURCE_GITHUB_TAGS,
)

T = TypeVar("T", bound="BazelTarget")

# https://github.com/<owner>/<repo>[.git]
GITHUB_REMOTE_RE = re.compile(
    r"^(?:https?://|git@)github\.com[/:](?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?/?$"
)

# https://github.com/<owner>/<repo>/releases/download/<tag>/<asset>
GITHUB_RELEASE_URL_RE = re.compile(
    r"^https://github\.com/(?P<owner>[^/]+)/(?P<repo>[^/]+)"
    r"/releases/download/(?P<tag>[^/]+)/[^/]+$"
)

# https://github.com/<owner>/<repo>/archive/[refs/tags/]<ref>.tar.gz|.zip
GITHUB_ARCHIVE_URL_RE = re.compile(
    r"^https://github\.com/(?P<owner>[^/]+)/(?P<repo>[^/]+)"
    r"/archive/(?:refs/tags/)?(?P<ref>.+?)\.(?:tar\.gz|tgz|zip)$"
)

COMMIT_SHA_RE = re.compile(r"^[0-9a-f]{40}$")


# ---------------------------------------------------------------------------
# Field validation helpers
# ---------------------------------------------------------------------------


class _Mismatch(Exception):
    """Internal signal: the data does not have this target's shape."""


def _required_str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise _Mismatch(key)
    return value


def _optional_str(data: Mapping[str, Any], key: str) -> Optional[str]:
    if key not in data:
        return None
    value = data[key]
    if not isinstance(value, str):
        raise _Mismatch(key)
    return value


def _optional_str_list(data: Mapping[str, Any], key: str) -> Optional[List[str]]:
    if key not in data:
        return None
    value = data[key]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise _Mismatch(key)
    return list(value)


def _github_repo(remote: str) -> Optional[str]:
    """Return ``owner/repo`` for a GitHub remote URL, else ``None``."""
    match = GITHUB_REMOTE_RE.match(remote)
    if not match:
        return None
    return f"{match.group('owner')}/{match.group('repo')}"


# ---------------------------------------------------------------------------
# Targets
# ---------------------------------------------------------------------------


@dataclass
class BazelTarget:
    """Base for all targets: a rule name plus the repository ``name``."""

    RULES: ClassVar[Tuple[str, ...]] = ()

    rule: str
    name: str

    @classmethod
    def matches_rule(cls, rule: str) -> bool:
        return any(re.fullmatch(pattern, rule) for pattern in cls.RULES)

    @classmethod
    def from_data(cls: Type[T], data: Any) -> Optional[T]:
        """Validate flattened fragment data against this target's shape."""
        if not isinstance(data, dict):
            return None
        try:
            rule = _required_str(data, "rule")
            if not cls.matches_rule(rule):
                return None
            return cls._from_fields(data, rule=rule, name=_required_str(data, "name"))
        except _Mismatch:
            return None

    @classmethod
    def _from_fields(cls: Type[T], data: Mapping[str, Any], **base: str) -> T:
        raise NotImplementedError

    def to_dependency(self) -> PackageDependency:
        raise NotImplementedError


@dataclass
class DockerTarget(BazelTarget):
    """``container_pull`` from rules_docker."""

    RULES: ClassVar[Tuple[str, ...]] = ("container_pull", "_container_pull")

    repository: str = ""
    registry: str = ""
    tag: Optional[str] = None
    digest: Optional[str] = None

    @classmethod
    def _from_fields(cls, data: Mapping[str, Any], **base: str) -> "DockerTarget":
        return cls(
            **base,
            repository=_required_str(data, "repository"),
            registry=_required_str(data, "registry"),
            tag=_optional_str(data, "tag"),
            digest=_optional_str(data, "digest"),
        )

    def to_dependency(self) -> PackageDependency:
        return PackageDependency(
            dep_name=self.name,
            package_name=self.repository,
            current_value=self.tag,
            current_digest=self.digest,
            datasource=DATASOURCE_DOCKER,
            dep_type=self.rule,
            registry_urls=[self.registry],
        )


@dataclass
class GitTarget(BazelTarget):
    """``git_repository``; only GitHub remotes can be updated."""

    RULES: ClassVar[Tuple[str, ...]] = ("git_repository", "_git_repository")

    remote: str = ""
    tag: Optional[str] = None
    commit: Optional[str] = None

    @classmethod
    def _from_fields(cls, data: Mapping[str, Any], **base: str) -> "GitTarget":
        return cls(
            **base,
            remote=_required_str(data, "remote"),
            tag=_optional_str(data, "tag"),
            commit=_optional_str(data, "commit"),
        )

    def to_dependency(self) -> PackageDependency:
        dep = PackageDependency(
            dep_name=self.name,
            current_value=self.tag,
            current_digest=self.commit,
            dep_type=self.rule,
        )
        repo = _github_repo(self.remote)
        if repo:
            dep.datasource = DATASOURCE_GITHUB_RELEASES
            dep.package_name = repo
        else:
            dep.package_name = self.remote
            dep.skip_reason = "unsupported-datasource"
        return dep


@dataclass
class GoTarget(BazelTarget):
    """``go_repository`` from Gazelle."""

    RULES: ClassVar[Tuple[str, ...]] = ("go_repository", "_go_repository")

    importpath: str = ""
    tag: Optional[str] = None
    commit: Optional[str] = None
    remote: Optional[str] = None

    @classmethod
    def _from_fields(cls, data: Mapping[str, Any], **base: str) -> "GoTarget":
        return cls(
            **base,
            importpath=_required_str(data, "importpath"),
            tag=_optional_str(data, "tag"),
            commit=_optional_str(data, "commit"),
            remote=_optional_str(data, "remote"),
        )

    def to_dependency(self) -> PackageDependency:
        dep = PackageDependency(
            dep_name=self.name,
            package_name=self.importpath,
            current_value=self.tag,
            current_digest=self.commit,
            datasource=DATASOURCE_GO,
            dep_type=self.rule,
        )
        if self.commit and not self.tag:
            dep.current_value = "v0.0.0"
        if self.remote:
            repo = _github_repo(self.remote)
            if repo:
                dep.package_name = f"github.com/{repo}"
            else:
                dep.skip_reason = "unsupported-remote"
        return dep


@dataclass
class HttpTarget(BazelTarget):
    """``http_archive`` / ``http_file``; GitHub download URLs are understood."""

    RULES: ClassVar[Tuple[str, ...]] = (
        "http_archive",
        "_http_archive",
        "http_file",
        "_http_file",
    )

    url: Optional[str] = None
    urls: List[str] = field(default_factory=list)
    sha256: Optional[str] = None

    @classmethod
    def _from_fields(cls, data: Mapping[str, Any], **base: str) -> "HttpTarget":
        url = _optional_str(data, "url")
        urls = _optional_str_list(data, "urls") or []
        if url is None and not urls:
            raise _Mismatch("url")
        return cls(**base, url=url, urls=urls, sha256=_optional_str(data, "sha256"))

    def to_dependency(self) -> PackageDependency:
        dep = PackageDependency(
            dep_name=self.name,
            current_digest=self.sha256,
            dep_type=self.rule,
        )
        candidates = ([self.url] if self.url else []) + self.urls
        for candidate in candidates:
            release = GITHUB_RELEASE_URL_RE.match(candidate)
            if release:
                dep.datasource = DATASOURCE_GITHUB_RELEASES
                dep.package_name = f"{release.group('owner')}/{release.group('repo')}"
                dep.current_value = release.group("tag")
                return dep

            archive = GITHUB_ARCHIVE_URL_RE.match(candidate)
            if archive:
                dep.datasource = DATASOURCE_GITHUB_TAGS
                dep.package_name = f"{archive.group('owner')}/{archive.group('repo')}"
                ref = archive.group("ref")
                if COMMIT_SHA_RE.match(ref):
                    dep.current_digest = ref
                else:
                    dep.current_value = ref
                return dep

        dep.skip_reason = "unsupported-url"
        return dep


#: Declared target order; earlier targets take precedence.
DEFAULT_TARGETS: Tuple[Type[BazelTarget], ...] = (
    DockerTarget,
    GitTarget,
    GoTarget,
    HttpTarget,
)
