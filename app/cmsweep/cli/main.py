"""The ``cmsweep`` command.

Global options control log verbosity only; everything that talks to a
cluster lives in the ``scan`` subcommand.
"""

from typing import Annotated

import typer

from cmsweep import __version__
from cmsweep.cli.commands import config, protected, scan
from cmsweep.cli.types import GlobalOptions
from cmsweep.utils.formatting import configure_logging

app = typer.Typer(
    name="cmsweep",
    help="Find and remove unused Kubernetes ConfigMaps.",
    epilog="Protected ConfigMaps are never deleted. See 'cmsweep protected --help'.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"cmsweep version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=_print_version,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log API calls and per-kind results."),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Hide progress bars and all logs below ERROR."),
    ] = False,
) -> None:
    """Scan Pods, Deployments, StatefulSets, DaemonSets, Jobs and CronJobs
    for ConfigMap references and report the ConfigMaps nobody uses.
    """
    ctx.obj = GlobalOptions(verbose=verbose, quiet=quiet and not verbose)
    configure_logging(verbose=verbose, quiet=quiet)


app.add_typer(scan.app, name="scan")
app.command(name="protected")(protected.check_protected)
app.add_typer(config.app, name="config")
