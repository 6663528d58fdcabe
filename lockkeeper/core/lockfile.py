"""``uv.lock`` parsing.

Only the ``[[package]]`` array is read: each entry contributes its
``name`` → ``version`` pair. Entries lacking either field (or holding the
wrong type) are skipped individually rather than failing the whole file.

Example::

    >>> parse_uv_lockfile('[[package]]\\nname = "idna"\\nversion = "3.7"\\n')
    {'idna': '3.7'}
"""

from __future__ import annotations

from typing import Dict

import tomli as tomllib
from packaging.utils import canonicalize_name

from lockkeeper.exceptions import ParseError
from lockkeeper.utils.logger import get_logger

logger = get_logger("core.lockfile")

#: Package name → locked version.
LockedVersionMap = Dict[str, str]


def parse_uv_lockfile(content: str) -> LockedVersionMap:
    """Parse ``uv.lock`` content into a :data:`LockedVersionMap`.

    Keys are PEP 503-normalized package names; look them up with
    ``canonicalize_name``.

    Raises:
        ParseError: The content is not TOML, or ``package`` is not an array.
    """
    try:
        raw = tomllib.loads(content)
    except tomllib.TOMLDecodeError as exc:
        raise ParseError(f"Invalid uv.lock: {exc}") from exc

    packages = raw.get("package", [])
    if not isinstance(packages, list):
        raise ParseError("Invalid uv.lock: 'package' must be an array of tables")

    mapping: LockedVersionMap = {}
    for entry in packages:
        if not isinstance(entry, dict):
            continue
        name = entry.get("name")
        version = entry.get("version")
        if not isinstance(name, str) or not isinstance(version, str):
            logger.debug("Skipping uv.lock entry without name/version: %r", entry)
            continue
        mapping[canonicalize_name(name)] = version

    return mapping


def parse_uv_lockfile_or_empty(content: str) -> LockedVersionMap:
    """Like :func:`parse_uv_lockfile`, but an unparseable file maps to ``{}``."""
    try:
        return parse_uv_lockfile(content)
    except ParseError as exc:
        logger.debug("Ignoring unparseable uv.lock: %s", exc)
        return {}
