"""CLI package for cmsweep.

This package contains the Typer application and all subcommands.
"""

from cmsweep.cli.main import app

__all__ = ["app"]
