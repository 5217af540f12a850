"""The ``bbcreds`` command line.

The root Typer app owns the global flags (output format, verbosity, which
credential store to use) and mounts two command groups:

* ``bbcreds credentials ...`` -- :mod:`bbcreds.commands.credentials`
* ``bbcreds endpoints ...`` -- :mod:`bbcreds.commands.endpoints`

:func:`main` is the console-script entry point.  It turns a
:class:`~bbcreds.exceptions.BBCredsError` into its exit code, and anything
else into a crash log under ``<data_dir>/logs`` plus exit code 1.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from bbcreds import __version__
from bbcreds.commands.credentials import credentials_app
from bbcreds.commands.endpoints import endpoints_app
from bbcreds.exceptions import BBCredsError
from bbcreds.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED
from bbcreds.output import OutputFormat, OutputManager, error, set_output

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="bbcreds",
    help="Manage Bitbucket credentials and resolve them the way a build would.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)
app.add_typer(credentials_app, name="credentials", help="Store, grant and look up credentials.")
app.add_typer(endpoints_app, name="endpoints", help="Configure Bitbucket Cloud and Server endpoints.")


def _show_version(value: bool) -> None:
    if value:
        typer.echo(f"bbcreds {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_show_version, is_eager=True, help="Show version and exit."
    ),
    credentials_file: Optional[str] = typer.Option(
        None, "--credentials-file", "-c", help="Credential store file (overrides config and env)."
    ),
    json_output: bool = typer.Option(False, "--json", help="Write records as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Write records as tab-separated text."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colour."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print records, warnings and errors."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log lookups and file access to stderr."),
) -> None:
    """Install the output manager and logging, and share global flags via ``ctx.obj``."""
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        fmt = OutputFormat.AUTO
    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )

    ctx.obj = {"credentials_file": credentials_file, "verbose": verbose}


def _on_sigint(signum: int, frame: Any) -> None:
    sys.stderr.write("\nCancelled.\n")
    sys.exit(EXIT_INTERRUPTED)


def _write_crash_log() -> str:
    """Write the active exception's traceback to the data dir and return its path."""
    from bbcreds.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    header = f"bbcreds {__version__}\nargv: {' '.join(sys.argv)}\n\n"
    log_path.write_text(header + traceback.format_exc(), encoding="utf-8")
    return str(log_path)


def main() -> None:
    """Console-script entry point.

    Raises:
        SystemExit: Always; carries Typer's exit code, the
            ``BBCredsError.exit_code``, or 1 after an unexpected crash.
    """
    signal.signal(signal.SIGINT, _on_sigint)
    try:
        app()
    except BBCredsError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)
    except Exception:
        logger.debug("Unhandled exception", exc_info=True)
        log_path = _write_crash_log()
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
