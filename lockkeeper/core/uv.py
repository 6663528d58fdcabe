"""uv support: ``[tool.uv]`` dependencies and ``uv.lock`` reconciliation.

:class:`UvProcessor` has three responsibilities:

1. :meth:`~UvProcessor.process` — append ``tool.uv.dev-dependencies`` to a
   dependency list.
2. :meth:`~UvProcessor.extract_locked_versions` — fill in
   ``locked_version`` from the sibling ``uv.lock``.
3. :meth:`~UvProcessor.update_artifacts` — run ``uv lock`` and report the
   regenerated lock file.

Typical usage::

    processor = UvProcessor()
    deps = processor.process(project, extract_pyproject_deps(project))
    deps = await processor.extract_locked_versions(project, deps, "pyproject.toml")

    results = await processor.update_artifacts(
        UpdateArtifact(config, upgrades, "pyproject.toml"), project
    )
"""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import List, Optional, Sequence, Set, Union

from packaging.utils import canonicalize_name

from lockkeeper.utils.logger import get_logger
from lockkeeper.models.project import Project
from lockkeeper.exceptions import FileOperationError, is_temporary_error
from lockkeeper.core.pyproject import parse_dependency_list
from lockkeeper.core.lockfile import parse_uv_lockfile_or_empty
from lockkeeper.utils.exec import ExecOptions, ToolConstraint, exec_commands
from lockkeeper.utils.filesystem import get_sibling_file_name, read_local_file
from lockkeeper.models.dependency import PackageDependency, Upgrade
from lockkeeper.models.artifacts import (
    ArtifactError,
    FileChange,
    UpdateArtifact,
    UpdateArtifactsResult,
)
from lockkeeper.constants import (
    DEFAULT_EXEC_TIMEOUT,
    DEP_TYPE_UV_DEV,
    UV_LOCK_FILE_NAME,
    UV_UPDATE_CMD,
    UV_UPGRADE_ALL_FLAG,
    UV_UPGRADE_PACKAGE_FLAG,
)

logger = get_logger("core.uv")

__all__ = ["UvProcessor", "generate_update_command"]


def generate_update_command(updated_deps: Sequence[Upgrade]) -> str:
    """Build a targeted ``uv lock`` command for *updated_deps*.

    Each distinct package name gets one ``--upgrade-package`` flag, in
    order of first appearance, shell-quoted. Upgrades without a package
    name are ignored.

    Example::

        >>> generate_update_command([Upgrade(package_name="a"),
        ...                          Upgrade(package_name="a"),
        ...                          Upgrade(package_name="b")])
        'uv lock --python-preference only-system --upgrade-package a --upgrade-package b'
    """
    cmd = UV_UPDATE_CMD
    listed: Set[str] = set()

    for dep in updated_deps:
        name = dep.package_name
        if not name:
            logger.debug("Upgrade %s has no package name, not listed", dep.dep_name)
            continue
        if name in listed:
            continue
        listed.add(name)
        cmd += f" {UV_UPGRADE_PACKAGE_FLAG} {shlex.quote(name)}"

    return cmd


class UvProcessor:
    """Handles the uv-specific parts of a ``pyproject.toml``.

    Args:
        local_dir: Repository root; manifest and lock file paths are
            resolved relative to it and may not escape it. ``None`` means
            paths are used as given.
    """

    def __init__(self, *, local_dir: Optional[Union[str, Path]] = None) -> None:
        self.local_dir = local_dir

    # ------------------------------------------------------------------
    # Dependency extraction
    # ------------------------------------------------------------------

    def process(
        self,
        project: Project,
        deps: List[PackageDependency],
    ) -> List[PackageDependency]:
        """Append ``tool.uv.dev-dependencies`` to *deps* in place.

        Returns:
            The same *deps* list, extended (or untouched when the project has
            no ``[tool.uv]`` table).
        """
        uv = project.tool_uv
        if uv is None:
            return deps

        deps.extend(parse_dependency_list(DEP_TYPE_UV_DEV, uv.dev_dependencies))
        return deps

    async def extract_locked_versions(
        self,
        project: Project,
        deps: List[PackageDependency],
        package_file: str,
    ) -> List[PackageDependency]:
        """Set ``locked_version`` on every dependency found in ``uv.lock``.

        A missing, empty, unreadable or unparseable lock file leaves *deps*
        untouched. Names are compared PEP 503-normalized.
        """
        lock_file_name = get_sibling_file_name(package_file, UV_LOCK_FILE_NAME)
        try:
            content = await read_local_file(lock_file_name, base_dir=self.local_dir)
        except FileOperationError as exc:
            logger.debug(
                "Cannot read %s, skipping locked versions: %s", lock_file_name, exc
            )
            return deps
        if not content:
            return deps

        mapping = parse_uv_lockfile_or_empty(content)
        for dep in deps:
            if not dep.package_name:
                continue
            name = canonicalize_name(dep.package_name)
            if name in mapping:
                dep.locked_version = mapping[name]

        return deps

    # ------------------------------------------------------------------
    # Lock file reconciliation
    # ------------------------------------------------------------------

    async def update_artifacts(
        self,
        update_artifact: UpdateArtifact,
        project: Project,
    ) -> Optional[List[UpdateArtifactsResult]]:
        """Regenerate ``uv.lock`` next to the manifest.

        Runs ``uv lock --upgrade`` in lock file maintenance mode, otherwise
        ``uv lock`` with one ``--upgrade-package`` per updated package.

        Returns:
            ``None`` when there is no ``uv.lock`` or it did not change; a
            single file addition when it changed; a single artifact error
            when anything failed.

        Raises:
            TemporaryError: The environment failed transiently; retry later.
        """
        config = update_artifact.config
        python_constraint = config.constraints.get("python")
        if python_constraint is None:
            python_constraint = project.requires_python
        package_file_name = update_artifact.package_file_name
        lock_file_name = get_sibling_file_name(package_file_name, UV_LOCK_FILE_NAME)

        try:
            existing = await read_local_file(lock_file_name, base_dir=self.local_dir)
            if existing is None:
                logger.debug("No uv.lock found")
                return None

            exec_options = ExecOptions(
                cwd_file=self._local_path(package_file_name),
                user_configured_env=dict(config.env),
                tool_constraints=[
                    ToolConstraint("python", python_constraint),
                    ToolConstraint("uv", config.constraints.get("uv")),
                ],
                timeout=config.exec_timeout or DEFAULT_EXEC_TIMEOUT,
            )

            if update_artifact.is_lock_file_maintenance:
                cmd = f"{UV_UPDATE_CMD} {UV_UPGRADE_ALL_FLAG}"
            else:
                cmd = generate_update_command(update_artifact.updated_deps)
            await exec_commands([cmd], exec_options)

            new_content = await read_local_file(lock_file_name, base_dir=self.local_dir)
            if new_content is None:
                raise FileOperationError(
                    "uv.lock disappeared after running uv lock",
                    file_path=lock_file_name,
                    operation="read",
                )
            if new_content == existing:
                logger.debug("uv.lock is unchanged")
                return None

            return [
                UpdateArtifactsResult(
                    file=FileChange(path=lock_file_name, contents=new_content)
                )
            ]

        except Exception as exc:
            if is_temporary_error(exc):
                raise
            logger.debug("Failed to update uv lock file: %s", exc, exc_info=True)
            return [
                UpdateArtifactsResult(
                    artifact_error=ArtifactError(
                        lock_file=lock_file_name,
                        stderr=str(exc),
                    )
                )
            ]

    def _local_path(self, file_name: str) -> str:
        if self.local_dir is None:
            return file_name
        return str(Path(self.local_dir) / file_name)
