"""Settings for lockkeeper runs.

Settings live in a ``[lockkeeper]`` table of ``lockkeeper.toml`` or in the
``[tool.lockkeeper]`` table of the project's own ``pyproject.toml``. An
explicit ``--config`` path (or ``LOCKKEEPER_CONFIG``) is used as-is;
otherwise the working directory is searched, ``lockkeeper.toml`` first.

A typical ``lockkeeper.toml``::

    [lockkeeper]
    update_type = "lockFileMaintenance"
    exec_timeout = 600

    [lockkeeper.constraints]
    python = ">=3.11"
    uv = "0.4.20"

    [lockkeeper.env]
    UV_INDEX_URL = "https://pypi.internal/simple"
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from dataclasses import dataclass, field

from lockkeeper.exceptions import ConfigError
from lockkeeper.utils.logger import get_logger
from lockkeeper.constants import UPDATE_TYPES
from lockkeeper.models.artifacts import UpdateArtifactsConfig

logger = get_logger("config")

#: Tools that accept a version constraint.
KNOWN_CONSTRAINTS = frozenset({"python", "uv"})

#: Keys accepted in the settings table.
KNOWN_KEYS = frozenset({"update_type", "constraints", "env", "exec_timeout"})

#: Where each candidate file keeps its settings table.
_SECTION_PATHS: Dict[str, Tuple[str, ...]] = {
    "lockkeeper.toml": ("lockkeeper",),
    "pyproject.toml": ("tool", "lockkeeper"),
}


@dataclass
class LockkeeperConfig:
    """Options that shape how ``uv lock`` is invoked.

    An empty or missing settings table yields the defaults below.

    Attributes:
        update_type: Default update type; ``"lockFileMaintenance"`` makes
            ``lockkeeper lock`` re-resolve everything even with ``-p``.
        constraints: Tool version constraints (``python``, ``uv``).
        env: Extra environment variables passed to ``uv``.
        exec_timeout: Seconds before ``uv lock`` is abandoned.
        source_path: File the settings came from; ``None`` for defaults.
    """

    update_type: Optional[str] = None
    constraints: Dict[str, str] = field(default_factory=dict)
    env: Dict[str, str] = field(default_factory=dict)
    exec_timeout: Optional[int] = None

    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return options for debug logging; ``env`` values are masked."""
        return {
            "update_type": self.update_type,
            "constraints": dict(self.constraints),
            "env": {key: "***" for key in self.env},
            "exec_timeout": self.exec_timeout,
        }

    def to_artifacts_config(self) -> UpdateArtifactsConfig:
        return UpdateArtifactsConfig(
            update_type=self.update_type,
            constraints=dict(self.constraints),
            env=dict(self.env),
            exec_timeout=self.exec_timeout,
        )


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Locate the settings file for this run.

    Args:
        explicit_path: Path given on the command line; it must exist.

    Returns:
        The resolved settings file, or ``None`` when defaults apply.

    Raises:
        ConfigError: *explicit_path* does not name a file.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Settings file given explicitly: %s", resolved)
        return resolved

    cwd = Path.cwd().resolve()

    candidate = cwd / "lockkeeper.toml"
    if candidate.is_file():
        logger.debug("Settings file: %s", candidate)
        return candidate

    candidate = cwd / "pyproject.toml"
    if candidate.is_file() and _pyproject_has_lockkeeper_section(candidate):
        logger.debug("Settings taken from [tool.lockkeeper] in %s", candidate)
        return candidate

    logger.debug("No lockkeeper settings in %s", cwd)
    return None


def _pyproject_has_lockkeeper_section(path: Path) -> bool:
    """Check for a ``[tool.lockkeeper]`` table; unreadable files count as no."""
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    tool = raw.get("tool", {})
    return isinstance(tool, dict) and "lockkeeper" in tool


def _settings_table(raw: Dict[str, Any], filename: str) -> Any:
    keys = _SECTION_PATHS.get(filename, ("lockkeeper",))
    table: Any = raw
    for key in keys:
        if not isinstance(table, dict):
            return {}
        table = table.get(key, {})
    return table


def load_config(config_path: Optional[Path] = None) -> LockkeeperConfig:
    """Build the run settings from *config_path* or the discovered file.

    Raises:
        ConfigError: The file is unreadable, or its table holds unknown keys
            or bad values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        return LockkeeperConfig()

    logger.info("Reading settings from %s", resolved)
    section = _settings_table(_read_toml(resolved), resolved.name)

    if not section:
        logger.debug("%s has no lockkeeper table; defaults apply", resolved.name)
        return LockkeeperConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Settings: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read {path}: {exc}",
            config_path=str(path),
        ) from exc


def _str_table(value: Any, option: str, config_path: str) -> Dict[str, str]:
    if not isinstance(value, dict):
        raise ConfigError(
            f"{option} must be a table, got {type(value).__name__}",
            config_path=config_path,
            option=option,
        )
    for key, item in value.items():
        if not isinstance(item, str):
            raise ConfigError(
                f"{option}.{key} must be a string, got {type(item).__name__}",
                config_path=config_path,
                option=f"{option}.{key}",
            )
    return dict(value)


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> LockkeeperConfig:
    """Parse and validate the ``[lockkeeper]`` / ``[tool.lockkeeper]`` table.

    Raises:
        ConfigError: Unknown keys, wrong types or unsupported values.
    """
    if not isinstance(section, dict):
        raise ConfigError(
            f"lockkeeper settings must be a table, got {type(section).__name__}",
            config_path=config_path,
        )

    config = LockkeeperConfig()

    unknown = set(section) - KNOWN_KEYS
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    if "update_type" in section:
        val = section["update_type"]
        if not isinstance(val, str) or val not in UPDATE_TYPES:
            raise ConfigError(
                f"update_type must be one of {', '.join(sorted(UPDATE_TYPES))}, "
                f"got {val!r}",
                config_path=config_path,
                option="update_type",
            )
        config.update_type = val

    if "constraints" in section:
        constraints = _str_table(section["constraints"], "constraints", config_path)
        unknown_tools = set(constraints) - KNOWN_CONSTRAINTS
        if unknown_tools:
            raise ConfigError(
                f"Unknown constraint tools: {', '.join(sorted(unknown_tools))}",
                config_path=config_path,
                option="constraints",
            )
        config.constraints = constraints

    if "env" in section:
        config.env = _str_table(section["env"], "env", config_path)

    if "exec_timeout" in section:
        val = section["exec_timeout"]
        # bool is a subclass of int
        if isinstance(val, bool) or not isinstance(val, int) or val <= 0:
            raise ConfigError(
                f"exec_timeout must be a positive integer, got {val!r}",
                config_path=config_path,
                option="exec_timeout",
            )
        config.exec_timeout = val

    return config
