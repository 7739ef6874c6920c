"""Types and helpers shared by the CLI commands."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import typer

from cmsweep.core.config import AppConfig, ConfigError, load_config
from cmsweep.utils.formatting import print_error


@dataclass(frozen=True, slots=True)
class GlobalOptions:
    """Options given before the subcommand, stored in ``ctx.obj``."""

    verbose: bool = False
    quiet: bool = False


class OutputFormat(str, Enum):
    """Output format of the scan command."""

    TABLE = "table"
    JSON = "json"


def load_config_or_exit(path: Path | None) -> AppConfig:
    """Load the configuration, exiting with code 1 if it is invalid.

    Args:
        path: Explicit config file, or None for the default location.
    """
    try:
        return load_config(path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
