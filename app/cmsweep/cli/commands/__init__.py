"""CLI commands for cmsweep.

This package contains all subcommand implementations.
"""

from cmsweep.cli.commands import config, protected, scan

__all__ = ["config", "protected", "scan"]
