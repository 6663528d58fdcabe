"""
Manifest and lock file access.

Helpers for locating sibling files of a manifest and reading manifests and
lock files with size limits. Failures are normalized to
``FileOperationError``; :func:`read_local_file` additionally treats a
missing file as ``None`` because an absent lock file is not an error.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional, Union

from lockkeeper.utils.logger import get_logger
from lockkeeper.constants import MAX_FILE_SIZE
from lockkeeper.exceptions import FileOperationError

logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _validated_file(path: Path) -> Path:
    """Ensure *path* exists and is a regular file, and resolve it."""
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(path),
            operation="read",
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}",
            file_path=str(path),
            operation="read",
        )
    return path.resolve()


def get_sibling_file_name(file_name: PathLike, sibling_name: str) -> str:
    """Return the path of *sibling_name* in the directory of *file_name*.

    The result keeps the style of the input: a bare ``pyproject.toml``
    yields a bare ``uv.lock``.

    Example::

        >>> get_sibling_file_name("sub/pyproject.toml", "uv.lock")
        'sub/uv.lock'
    """
    parent = Path(file_name).parent
    if str(parent) == ".":
        return sibling_name
    return str(parent / sibling_name)


def get_parent_dir(file_name: PathLike) -> Path:
    """Return the directory containing *file_name* (``.`` for bare names)."""
    return Path(file_name).parent


def validate_path(
    path: PathLike,
    *,
    base_dir: Optional[PathLike] = None,
) -> Path:
    """Resolve a path, optionally requiring it to stay within *base_dir*."""
    resolved = Path(path).expanduser().resolve(strict=False)

    if base_dir:
        base = Path(base_dir).resolve(strict=False)
        try:
            resolved.relative_to(base)
        except ValueError:
            raise FileOperationError(
                f"{resolved} is outside {base}",
                file_path=str(path),
                operation="validate",
            )

    return resolved


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Read a text file, refusing files larger than *max_size* bytes.

    Args:
        file_path: Manifest or lock file to read.
        max_size: Size ceiling in bytes; ``None`` reads any size.
        encoding: Text encoding.

    Returns:
        The decoded contents.

    Raises:
        FileOperationError: Missing file, oversized file or read failure.
    """
    path = _validated_file(Path(file_path))
    size = path.stat().st_size

    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        return path.read_text(encoding=encoding)
    except Exception as exc:
        raise FileOperationError(
            f"Cannot read {path.name}: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


async def read_local_file(
    file_name: PathLike,
    *,
    base_dir: Optional[PathLike] = None,
    encoding: str = "utf-8",
) -> Optional[str]:
    """Read a file relative to *base_dir* without blocking the event loop.

    Args:
        file_name: File to read, relative to *base_dir* when given.
        base_dir: Directory the file must stay within.
        encoding: Text encoding.

    Returns:
        The file contents, or ``None`` when the file does not exist.

    Raises:
        FileOperationError: The path escapes *base_dir*, is not a regular
            file, is too large or cannot be read.
    """
    candidate = Path(base_dir) / file_name if base_dir else Path(file_name)
    path = validate_path(candidate, base_dir=base_dir)

    if not path.exists():
        logger.debug("File not found: %s", path)
        return None

    return await asyncio.to_thread(safe_read_file, path, encoding=encoding)
