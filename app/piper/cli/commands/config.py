"""Config command implementation.

Shows the effective configuration and writes a default config file.
"""

from pathlib import Path
from typing import Annotated

import tomli_w
import typer

from piper.cli.types import get_config
from piper.core.config import ConfigError, PiperConfig, config_to_dict, save_config
from piper.core.paths import get_config_path
from piper.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show or initialize the configuration.",
    no_args_is_help=True,
)


@app.command()
def show(ctx: typer.Context) -> None:
    """Print the effective configuration as TOML."""
    config = get_config(ctx)
    console.print(
        tomli_w.dumps(config_to_dict(config)),
        markup=False,
        highlight=False,
        soft_wrap=True,
        end="",
    )


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with the default settings."""
    explicit: Path | None = (ctx.obj or {}).get("config_path")
    target = explicit or get_config_path()

    if target.exists() and not force:
        print_info(f"Config already exists: {target}")
        print_info("Use --force to overwrite it.")
        raise typer.Exit(code=1)

    try:
        saved = save_config(PiperConfig(), target)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {saved}")
