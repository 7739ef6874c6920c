"""Console output for cmsweep.

Reports go to ``console`` (stdout) so they can be piped; warnings,
errors, progress bars and log records go to ``err_console`` (stderr).
"""

import logging
import sys

from rich.console import Console
from rich.logging import RichHandler

from cmsweep.core.theme import get_theme


def _make_console(stderr: bool) -> Console:
    stream = sys.stderr if stderr else sys.stdout
    # Hex colors need truecolor; pipes get plain text
    color_system = "truecolor" if stream.isatty() else None
    return Console(theme=get_theme(), stderr=stderr, color_system=color_system)


console = _make_console(stderr=False)
err_console = _make_console(stderr=True)


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Send records of the ``cmsweep`` logger to stderr through Rich.

    WARNING and above are shown by default, DEBUG with ``verbose`` and
    only ERROR with ``quiet``. ``verbose`` wins if both are set. Calling
    this again only changes the level.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    logger = logging.getLogger("cmsweep")
    logger.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(
            RichHandler(console=err_console, show_path=verbose, rich_tracebacks=True)
        )


def print_info(message: str) -> None:
    console.print(f"[info]{message}[/]")


def print_success(message: str) -> None:
    console.print(f"[success]{message}[/]")


def print_warning(message: str) -> None:
    """Print ``Warning: message`` to stderr."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print ``Error: message`` to stderr."""
    err_console.print(f"[error]Error:[/] {message}")
