"""
Errors raised by lockkeeper.

Every error derives from :class:`LockkeeperError` and carries a ``details``
mapping (file, option, command, exit code ...) that the CLI appends to the
message. Two errors have special meaning in the lock workflow:

- :class:`ExecError` renders as the command's stderr, which becomes the
  ``stderr`` of an artifact error
- :class:`TemporaryError` is never converted into an artifact error; callers
  retry the run
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional

from lockkeeper.constants import TEMPORARY_ERROR


class LockkeeperError(Exception):
    """Root of the lockkeeper error hierarchy.

    Args:
        message: What went wrong.
        details: Key/value context, rendered as ``message (k=v, ...)``.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Record *key* unless *value* is ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class ParseError(LockkeeperError):
    """Raised when a manifest or lock file cannot be parsed.

    Args:
        message: Error description.
        file_path: Path to the file being parsed.
    """

    __slots__ = ("file_path",)

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "file", file_path)

        super().__init__(message, details)

        self.file_path = file_path


class FragmentDepthError(LockkeeperError):
    """Raised when a syntax fragment nests deeper than the allowed ceiling."""

    __slots__ = ("max_depth",)

    def __init__(self, max_depth: int) -> None:
        super().__init__(
            "Fragment nesting exceeds maximum depth",
            {"max_depth": max_depth},
        )
        self.max_depth = max_depth


class ConfigError(LockkeeperError):
    """Raised when a configuration file is missing, malformed or invalid.

    Args:
        message: Error description.
        config_path: Path to the configuration file.
        option: Name of the offending option, if any.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "config", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option


class FileOperationError(LockkeeperError):
    """A manifest or lock file could not be located or read.

    Args:
        message: Error description.
        file_path: File that was being accessed.
        operation: ``"read"`` or ``"validate"`` (base directory check).
        original_error: Underlying ``OSError`` or decode error, if any.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class ExecError(LockkeeperError):
    """Raised when an external command exits unsuccessfully.

    The string form is the captured ``stderr`` (or the message when the
    command produced none), so it can be surfaced verbatim to users.

    Args:
        message: Error description.
        command: Command line that was executed.
        exit_code: Process exit code, if the process ran.
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    __slots__ = ("command", "exit_code", "stdout", "stderr")

    def __init__(
        self,
        message: str,
        *,
        command: Optional[str] = None,
        exit_code: Optional[int] = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "command", command)
        _add_if(details, "exit_code", exit_code)

        super().__init__(message, details)

        self.command = command
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr

    def __str__(self) -> str:
        return self.stderr.strip() or _truncate(super().__str__())


class TemporaryError(LockkeeperError):
    """Transient, environment-level failure.

    Callers are expected to retry the whole operation. Its message is always
    :data:`~lockkeeper.constants.TEMPORARY_ERROR`.
    """

    __slots__ = ()

    def __init__(self, details: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(TEMPORARY_ERROR, details)

    def __str__(self) -> str:
        return self.message


def is_temporary_error(exc: BaseException) -> bool:
    """Return ``True`` if *exc* signals a transient failure."""
    return isinstance(exc, TemporaryError) or str(exc) == TEMPORARY_ERROR
