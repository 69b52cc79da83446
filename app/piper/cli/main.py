"""Main CLI application entry point.

Defines the Typer application and global options.
"""

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.logging import RichHandler

from piper import __version__
from piper.cli.commands import clean, compress, config, history, restore, scan
from piper.utils.formatting import err_console

# Create main Typer app
app = typer.Typer(
    name="piper",
    help="Find and reclaim disk space taken by dependency folders and stale logs.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"piper version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route piper's log records through Rich on stderr.

    Args:
        verbose: Show debug records instead of warnings only.
    """
    package_logger = logging.getLogger("piper")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)

    handler = RichHandler(console=err_console, show_path=False, show_time=verbose)
    handler.setFormatter(logging.Formatter("%(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    package_logger.propagate = False


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Config file to use instead of ~/.config/piper/config.toml.",
        ),
    ] = None,
) -> None:
    """piper - reclaim disk space from regenerable artifacts.

    Finds heavy dependency folders (node_modules, target, venv) and stale
    logs, then compresses them in place or moves them to the trash.
    """
    configure_logging(verbose)

    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path.expanduser() if config_path is not None else None


# Register commands
app.command(name="scan")(scan.scan)
app.command(name="compress")(compress.compress)
app.command(name="clean")(clean.clean)
app.command(name="restore")(restore.restore)
app.add_typer(history.app, name="history")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
