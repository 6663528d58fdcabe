"""
Asynchronous execution of external package-manager commands.

Commands run through the shell in the directory of the manifest they act on
(``ExecOptions.cwd_file``). The caller's configured environment is layered
over the current process environment. Tool constraints are carried along so
that they show up in logs and error details; lockkeeper does not install
tools itself.

Failure modes:

- non-zero exit or timeout → :class:`~lockkeeper.exceptions.ExecError`
- the process could not be spawned because the host ran out of processes,
  memory or file descriptors → :class:`~lockkeeper.exceptions.TemporaryError`
"""

from __future__ import annotations

import os
import errno
import asyncio
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from lockkeeper.utils.logger import get_logger
from lockkeeper.constants import DEFAULT_EXEC_TIMEOUT
from lockkeeper.utils.filesystem import get_parent_dir
from lockkeeper.exceptions import ExecError, TemporaryError

logger = get_logger("exec")

#: ``errno`` values that mean "try again later" rather than "broken command".
TRANSIENT_ERRNOS = frozenset({errno.EAGAIN, errno.ENOMEM, errno.EMFILE, errno.ENFILE})


@dataclass(frozen=True)
class ToolConstraint:
    """Version constraint for a tool the command depends on.

    Attributes:
        tool_name: Tool identifier, e.g. ``"python"`` or ``"uv"``.
        constraint: Version constraint, or ``None`` when unconstrained.
    """

    tool_name: str
    constraint: Optional[str] = None


@dataclass
class ExecOptions:
    """Options for :func:`exec_commands`.

    Attributes:
        cwd_file: File whose directory becomes the working directory.
        cwd: Explicit working directory; overrides ``cwd_file``.
        user_configured_env: Extra environment variables from configuration.
        tool_constraints: Tool version constraints for the commands.
        timeout: Per-command timeout in seconds.
    """

    cwd_file: Optional[str] = None
    cwd: Optional[str] = None
    user_configured_env: Dict[str, str] = field(default_factory=dict)
    tool_constraints: List[ToolConstraint] = field(default_factory=list)
    timeout: int = DEFAULT_EXEC_TIMEOUT

    def resolve_cwd(self) -> Optional[Path]:
        if self.cwd:
            return Path(self.cwd)
        if self.cwd_file:
            return get_parent_dir(self.cwd_file)
        return None

    def build_env(self) -> Dict[str, str]:
        env = dict(os.environ)
        env.update(self.user_configured_env)
        return env


@dataclass
class ExecResult:
    """Captured output of the last command run."""

    stdout: str = ""
    stderr: str = ""


async def _run_one(cmd: str, options: ExecOptions) -> ExecResult:
    cwd = options.resolve_cwd()
    try:
        process = await asyncio.create_subprocess_shell(
            cmd,
            cwd=str(cwd) if cwd else None,
            env=options.build_env(),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        if exc.errno in TRANSIENT_ERRNOS:
            logger.warning("Cannot spawn %r right now: %s", cmd, exc)
            raise TemporaryError({"command": cmd, "errno": exc.errno}) from exc
        raise ExecError(
            f"Failed to start command: {exc}",
            command=cmd,
            stderr=str(exc),
        ) from exc

    try:
        stdout, stderr = await asyncio.wait_for(
            process.communicate(), timeout=options.timeout
        )
    except asyncio.TimeoutError as exc:
        process.kill()
        await process.wait()
        raise ExecError(
            f"Command timed out after {options.timeout}s",
            command=cmd,
        ) from exc

    result = ExecResult(
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
    )

    if process.returncode != 0:
        raise ExecError(
            f"Command failed with exit code {process.returncode}",
            command=cmd,
            exit_code=process.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )

    return result


async def exec_commands(cmds: Sequence[str], options: ExecOptions) -> ExecResult:
    """Run *cmds* one after another, stopping at the first failure.

    Args:
        cmds: Shell command lines.
        options: Working directory, environment and constraints.

    Returns:
        Output of the last command.

    Raises:
        ExecError: A command failed or timed out.
        TemporaryError: The host could not spawn the process.
    """
    constraints = {
        c.tool_name: c.constraint for c in options.tool_constraints if c.constraint
    }
    result = ExecResult()

    for cmd in cmds:
        logger.debug(
            "Executing %r in %s (constraints: %s)",
            cmd,
            options.resolve_cwd() or ".",
            constraints or "<none>",
        )
        result = await _run_one(cmd, options)

    return result
