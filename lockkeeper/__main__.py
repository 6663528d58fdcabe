"""
Executable module for lockkeeper.

Running ``python -m lockkeeper`` is equivalent to running ``lockkeeper``.
"""

from __future__ import annotations

import sys


def _print_startup_error(exc: ImportError) -> None:
    """Explain on stderr why the CLI could not be loaded."""
    from lockkeeper.__version__ import __version__

    sys.stderr.write("lockkeeper CLI could not be loaded.\n")
    sys.stderr.write(f"Python version    : {sys.version}\n")
    sys.stderr.write(f"lockkeeper version: {__version__}\n")
    sys.stderr.write(f"ImportError: {exc}\n")


def main() -> int:
    """Entry point for ``python -m lockkeeper``; returns the CLI exit code."""
    try:
        # Import lazily so dependencies are only loaded during CLI use
        from lockkeeper.cli import main as cli_main
    except ImportError as exc:
        _print_startup_error(exc)
        return 1

    return cli_main()


if __name__ == "__main__":
    sys.exit(main())
