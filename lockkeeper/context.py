"""
Shared context object for lockkeeper CLI commands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from lockkeeper.config import LockkeeperConfig


class LockkeeperContext:
    """Per-invocation state handed to every subcommand through Click.

    Attributes:
        config_path: Path to the configuration file, if one was used.
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
        config: Loaded configuration; ``None`` until the group callback runs.
    """

    __slots__ = ("config_path", "verbose", "color", "config")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True
        self.config: Optional[LockkeeperConfig] = None

    def get_config(self) -> LockkeeperConfig:
        """Return the loaded configuration, or defaults when none was loaded."""
        return self.config if self.config is not None else LockkeeperConfig()


#: Click decorator for injecting :class:`LockkeeperContext` into commands.
pass_context = click.make_pass_decorator(LockkeeperContext, ensure=True)
