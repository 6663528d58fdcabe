"""
lockkeeper command group.

Global options (config file, verbosity, color) are resolved here once and
stored on a :class:`~lockkeeper.context.LockkeeperContext` that every
subcommand receives. :func:`main` maps outcomes to process exit codes.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional

import click

from lockkeeper.__version__ import __version__
from lockkeeper.config import load_config
from lockkeeper.context import LockkeeperContext
from lockkeeper.exceptions import ConfigError, LockkeeperError
from lockkeeper.utils.console import print_error, print_warning, reconfigure_console
from lockkeeper.utils.logger import get_logger, level_for_verbosity, setup_logging

logger = get_logger("cli")

#: Exit status when the user interrupts a run.
EXIT_INTERRUPTED = 130


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    envvar="LOCKKEEPER_CONFIG",
    help="Read settings from this file instead of lockkeeper.toml / pyproject.toml.",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Log more (-v for progress, -vv for uv commands and lock parsing).",
)
@click.option(
    "--color/--no-color",
    default=True,
    envvar="LOCKKEEPER_COLOR",
    help="Colorize tables and messages.",
)
@click.version_option(
    version=__version__,
    prog_name="lockkeeper",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """Extract dependencies and keep uv.lock in step with pyproject.toml.

    \b
    Commands:
      deps     Show pyproject dependencies with their locked versions
      lock     Run uv lock and report which versions moved
      bazel    Extract dependencies from Bazel rule fragments (JSON)

    \b
    Examples:
      lockkeeper deps --json
      lockkeeper lock -p requests -p idna
      lockkeeper -vv lock --maintenance
      lockkeeper bazel workspace-rules.json
    """
    setup_logging(level=level_for_verbosity(verbose), verbose=verbose >= 2)

    # uv and rich both honor NO_COLOR
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    try:
        settings = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    state = LockkeeperContext()
    state.config_path = config or settings.source_path
    state.verbose = verbose
    state.color = color
    state.config = settings
    ctx.obj = state

    logger.debug(
        "lockkeeper %s (config=%s, verbose=%d, color=%s)",
        __version__,
        state.config_path or "<defaults>",
        verbose,
        color,
    )


from lockkeeper.commands.deps import deps  # noqa: E402
from lockkeeper.commands.lock import lock  # noqa: E402
from lockkeeper.commands.bazel import bazel  # noqa: E402

cli.add_command(deps)
cli.add_command(lock)
cli.add_command(bazel)


def main() -> int:
    """Run the CLI and return its exit status.

    Returns:
        0 on success, 1 on failure, 2 on usage errors, 75 when ``uv`` hit a
        transient failure and 130 when interrupted.
    """
    try:
        result = cli(standalone_mode=False)
    except (click.exceptions.Abort, KeyboardInterrupt):
        print_warning("Interrupted")
        return EXIT_INTERRUPTED
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 1
    except LockkeeperError as exc:
        print_error(str(exc))
        logger.debug("Details: %s", exc.details or "<none>", exc_info=True)
        return 1
    except Exception as exc:
        print_error(f"Internal error: {exc}")
        logger.exception("Unhandled exception")
        return 1

    return result if isinstance(result, int) else 0


if __name__ == "__main__":
    sys.exit(main())
