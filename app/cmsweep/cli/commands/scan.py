"""Scan command implementation.

Finds ConfigMaps that are not referenced by any workload and optionally
deletes the unprotected ones after confirmation.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn

from cmsweep.cli.display import (
    build_json_report,
    create_deletion_table,
    print_deletion_summary,
    print_scan_result,
    print_warnings,
)
from cmsweep.cli.types import GlobalOptions, OutputFormat, load_config_or_exit
from cmsweep.cluster.client import ClusterConnectionError, connect
from cmsweep.cluster.fetcher import KubernetesFetcher, ResourceFetcher, describe_error
from cmsweep.core.inventory import InventoryCollector
from cmsweep.core.protected import ProtectionPolicy
from cmsweep.core.reconcile import reconcile
from cmsweep.models.deletion import DeletionReport
from cmsweep.models.reconcile import ReconciliationResult
from cmsweep.models.scan_result import ScanReport
from cmsweep.operators.configmap import ConfigMapOperator
from cmsweep.scanners.coordinator import ScanCoordinator
from cmsweep.utils.formatting import (
    console,
    err_console,
    print_error,
    print_info,
    print_warning,
)

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="Find unused ConfigMaps and optionally delete them.",
    invoke_without_command=True,
)

EXIT_CANCELLED = 130


def create_fetcher(
    kubeconfig: str | None,
    context: str | None,
    request_timeout: float,
) -> tuple[ResourceFetcher, str]:
    """Connect to the cluster, exiting with code 1 on failure.

    Returns:
        Tuple of (fetcher, connection display name).
    """
    try:
        connection = connect(kubeconfig=kubeconfig, context=context)
    except ClusterConnectionError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    fetcher = KubernetesFetcher(connection.api_client, request_timeout=request_timeout)
    return fetcher, connection.display_name


def resolve_namespaces(fetcher: ResourceFetcher, namespace: str | None) -> list[str]:
    """Return the namespaces to scan, exiting with code 1 on failure.

    Args:
        fetcher: Cluster access.
        namespace: Single namespace restriction, or None for all namespaces.

    Returns:
        Namespace names, sorted.
    """
    try:
        if namespace:
            if not fetcher.namespace_exists(namespace):
                print_error(f"Namespace {namespace} does not exist")
                raise typer.Exit(code=1)
            return [namespace]
        return sorted(fetcher.list_namespaces())
    except typer.Exit:
        raise
    except Exception as e:
        print_error(f"Cannot list namespaces: {describe_error(e)}")
        raise typer.Exit(code=1) from e


def run_scan(
    fetcher: ResourceFetcher,
    namespaces: list[str],
    workers: int,
    cancel_event: threading.Event,
    show_progress: bool = True,
) -> ScanReport:
    """Scan all namespaces with a progress bar on stderr."""
    coordinator = ScanCoordinator(fetcher, workers=workers, cancel_event=cancel_event)

    with Progress(
        TextColumn("[info]Scanning namespaces[/]"),
        BarColumn(),
        MofNCompleteColumn(),
        TextColumn("[muted]{task.description}[/]"),
        console=err_console,
        transient=True,
        disable=not show_progress,
    ) as progress:
        task = progress.add_task("", total=len(namespaces))

        def _advance(outcome: Any) -> None:
            progress.update(task, advance=1, description=outcome.namespace)

        return coordinator.scan_all(namespaces, on_complete=_advance)


def confirm_deletion(count: int) -> bool:
    """Ask the operator to type ``yes`` before deleting.

    Args:
        count: Number of ConfigMaps that would be deleted.

    Returns:
        True only if the answer is exactly "yes" (case-insensitive).
    """
    console.print(
        f"\n[warning]WARNING: You are about to delete {count} unused ConfigMap(s).[/]"
    )
    answer: str = typer.prompt(
        "This action cannot be undone. Are you sure? (yes/no)",
        default="no",
        show_default=False,
    )
    return answer.strip().lower() == "yes"


def _export(data: dict[str, Any], export_path: Path, announce: bool = True) -> None:
    export_path = export_path.resolve()
    if export_path.is_dir():
        print_error(f"Export path is a directory: {export_path}")
        raise typer.Exit(code=1)
    try:
        export_path.parent.mkdir(parents=True, exist_ok=True)
        export_path.write_text(json.dumps(data, indent=2))
        if announce:
            print_info(f"Results exported to {export_path}")
    except OSError as e:
        print_error(f"Failed to export: {e}")
        raise typer.Exit(code=1) from e


def _delete(
    fetcher: ResourceFetcher,
    result: ReconciliationResult,
    policy: ProtectionPolicy,
    *,
    dry_run: bool,
    yes: bool,
    cancel_event: threading.Event,
    skip_namespaces: frozenset[str],
    show_output: bool,
) -> DeletionReport | None:
    """Run the deletion flow. Returns None if the operator declined.

    ConfigMaps in ``skip_namespaces`` are reported but never deleted,
    because a workload that could not be listed may still reference them.
    """
    deletable = [
        ref
        for ref in result.unused
        if not policy.is_protected(ref) and ref.namespace not in skip_namespaces
    ]

    if deletable and not dry_run and not yes and not confirm_deletion(len(deletable)):
        print_info("Deletion cancelled")
        return None

    operator = ConfigMapOperator(
        fetcher,
        policy,
        dry_run=dry_run,
        cancel_event=cancel_event,
        skip_namespaces=skip_namespaces,
    )
    if show_output and not dry_run:
        console.print("\nDeleting unused ConfigMaps...")
    report = operator.delete_unused(result.unused)

    if show_output:
        console.print(create_deletion_table(report))
        print_deletion_summary(report)
    return report


@app.callback(invoke_without_command=True)
def scan_configmaps(
    ctx: typer.Context,
    namespace: Annotated[
        str | None,
        typer.Option(
            "--namespace",
            "-n",
            help="Only scan this namespace (default: all accessible namespaces).",
        ),
    ] = None,
    delete: Annotated[
        bool,
        typer.Option("--delete", help="Delete unused, unprotected ConfigMaps."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option(
            "--dry-run",
            help="Show what --delete would remove without deleting (implies --delete).",
        ),
    ] = False,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip the deletion confirmation prompt."),
    ] = False,
    workers: Annotated[
        int | None,
        typer.Option(
            "--workers",
            "-w",
            min=1,
            max=64,
            help="Namespaces scanned concurrently (default from config: 5).",
        ),
    ] = None,
    kubeconfig: Annotated[
        str | None,
        typer.Option("--kubeconfig", help="Path to the kubeconfig file."),
    ] = None,
    context: Annotated[
        str | None,
        typer.Option("--context", help="Kubeconfig context to use."),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to the cmsweep config file."),
    ] = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
    export_path: Annotated[
        Path | None,
        typer.Option("--export", "-e", help="Export results to a JSON file."),
    ] = None,
) -> None:
    """Scan workloads for ConfigMap references and report unused ConfigMaps.

    Examples:
        cmsweep scan                          # Scan all namespaces
        cmsweep scan -n demo                  # Scan one namespace
        cmsweep scan --delete                 # Delete unused ConfigMaps (asks first)
        cmsweep scan --dry-run                # Show what would be deleted
        cmsweep scan --format json            # Output as JSON
    """
    if ctx.invoked_subcommand is not None:
        return

    delete = delete or dry_run
    as_json = output_format == OutputFormat.JSON
    if as_json and delete and not (yes or dry_run):
        print_error("--format json with --delete requires --yes or --dry-run")
        raise typer.Exit(code=1)

    quiet = isinstance(ctx.obj, GlobalOptions) and ctx.obj.quiet
    config = load_config_or_exit(config_path)
    policy = config.protection_policy()
    effective_workers = workers or config.workers

    fetcher, connection_name = create_fetcher(kubeconfig, context, config.request_timeout)
    if not as_json:
        print_info(f"Using context: {connection_name}")
        if namespace:
            print_info(f"Scanning namespace: {namespace}")
        else:
            print_info("Scanning all accessible namespaces")

    namespaces = resolve_namespaces(fetcher, namespace)
    logger.debug("Resolved %d namespace(s) to scan", len(namespaces))

    # Inventory before workloads: a ConfigMap created after this listing
    # is never in exists, so it cannot be reported unused
    inventory = InventoryCollector(fetcher).list_all(namespaces)

    cancel_event = threading.Event()
    try:
        report = run_scan(
            fetcher,
            namespaces,
            effective_workers,
            cancel_event,
            show_progress=not (as_json or quiet),
        )
    except KeyboardInterrupt:
        print_warning("Scan cancelled")
        raise typer.Exit(code=EXIT_CANCELLED) from None

    if report.cancelled:
        print_error("Scan was cancelled; results are incomplete and nothing is reported unused.")
        raise typer.Exit(code=EXIT_CANCELLED)

    result = reconcile(report.used, inventory)
    warnings = report.warnings

    if not as_json:
        print_warnings(warnings, result.unknown_namespaces)
        console.print()
        print_scan_result(result, policy)

    deletion: DeletionReport | None = None
    if delete and result.unused:
        deletion = _delete(
            fetcher,
            result,
            policy,
            dry_run=dry_run,
            yes=yes,
            cancel_event=cancel_event,
            skip_namespaces=report.incomplete_namespaces,
            show_output=not as_json,
        )
    elif delete and not as_json:
        print_info("Nothing to delete.")

    data = build_json_report(result, policy, warnings, deletion)
    if export_path is not None:
        _export(data, export_path, announce=not as_json)
    if as_json:
        console.print_json(json.dumps(data))

    if deletion is not None and deletion.cancelled:
        print_warning("Deletion interrupted")
        raise typer.Exit(code=EXIT_CANCELLED)
    if deletion is not None and deletion.has_failures:
        raise typer.Exit(code=1)
