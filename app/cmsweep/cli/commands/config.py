"""Configuration management commands.

Shows, locates and initializes the cmsweep configuration file.
"""

from pathlib import Path
from typing import Annotated

import tomli_w
import typer
from rich.table import Table

from cmsweep.cli.types import load_config_or_exit
from cmsweep.core.config import AppConfig, ConfigError, save_config
from cmsweep.core.paths import get_config_path
from cmsweep.utils.formatting import console, print_error, print_success

app = typer.Typer(
    help="Show and initialize the cmsweep configuration.",
    no_args_is_help=True,
)


@app.command()
def show(
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to the cmsweep config file."),
    ] = None,
    policy: Annotated[
        bool,
        typer.Option("--policy", "-p", help="Also list the effective protection policy."),
    ] = False,
) -> None:
    """Print the effective configuration as TOML."""
    config = load_config_or_exit(config_path)
    console.print(tomli_w.dumps(config.model_dump()), markup=False, highlight=False)

    if policy:
        effective = config.protection_policy()
        table = Table(
            title="Effective Protection Policy",
            header_style="bold_header",
            border_style="border",
        )
        table.add_column("Rule", style="muted")
        table.add_column("Values", style="protected")
        table.add_row("names", ", ".join(sorted(effective.names)))
        table.add_row("prefixes", ", ".join(effective.prefixes))
        table.add_row("namespaces", ", ".join(sorted(effective.namespaces)))
        console.print(table)


@app.command()
def path() -> None:
    """Print the default configuration file path."""
    console.print(str(get_config_path()), markup=False, highlight=False)


@app.command()
def init(
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Where to write the config file."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with the default settings."""
    target = config_path or get_config_path()
    if target.exists() and not force:
        print_error(f"Config file already exists: {target} (use --force to overwrite)")
        raise typer.Exit(code=1)

    try:
        written = save_config(AppConfig(), target)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {written}")
