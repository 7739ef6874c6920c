"""Shared Rich display functions for scan and deletion results.

Provides table builders and summary printers for the in-use and unused
ConfigMaps, scan warnings, and deletion outcomes. Protection markers are
always computed with the same ProtectionPolicy that filters deletion.
"""

from typing import Any

from rich.table import Table

from cmsweep.core.protected import ProtectionPolicy
from cmsweep.models.deletion import DeletionReport, DeletionStatus
from cmsweep.models.reconcile import ReconciliationResult
from cmsweep.models.refs import ReferenceSet
from cmsweep.utils.formatting import console, print_success, print_warning

PROTECTED_MARKER = "(protected)"


def create_refs_table(
    title: str,
    refs: ReferenceSet,
    policy: ProtectionPolicy,
    name_style: str = "text",
) -> Table:
    """Create a Rich table listing ConfigMaps ordered by namespace and name.

    Protected ConfigMaps carry the ``(protected)`` marker.

    Args:
        title: Table title.
        refs: ConfigMaps to list.
        policy: Policy used to mark protected ConfigMaps.
        name_style: Style for unprotected ConfigMap names.

    Returns:
        Rich Table configured for ConfigMap display.
    """
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Namespace", style="namespace", no_wrap=True)
    table.add_column("ConfigMap", no_wrap=True)
    table.add_column("", no_wrap=True)

    for ref in refs.sorted():
        if policy.is_protected(ref):
            table.add_row(
                ref.namespace,
                f"[protected]{ref.name}[/]",
                f"[protected]{PROTECTED_MARKER}[/]",
            )
        else:
            table.add_row(ref.namespace, f"[{name_style}]{ref.name}[/]", "")

    return table


def print_scan_result(result: ReconciliationResult, policy: ProtectionPolicy) -> None:
    """Print the in-use and unused ConfigMap tables with a summary line."""
    if result.in_use:
        console.print(create_refs_table("ConfigMaps In Use", result.in_use, policy, "in_use"))
    else:
        console.print("[muted]No ConfigMaps are referenced by workloads.[/]")

    console.print()
    if result.unused:
        console.print(create_refs_table("Unused ConfigMaps", result.unused, policy, "unused"))
    else:
        print_success("No unused ConfigMaps found.")

    protected_count = sum(1 for ref in result.unused if policy.is_protected(ref))
    console.print(
        f"\n[dim]{len(result.exists)} ConfigMap(s): {len(result.in_use)} in use, "
        f"{len(result.unused)} unused ({protected_count} protected)[/]"
    )


def print_warnings(warnings: list[str], unknown_namespaces: tuple[str, ...] = ()) -> None:
    """Print scan warnings and namespaces with an unknown inventory."""
    for warning in warnings:
        print_warning(warning)
    if unknown_namespaces:
        print_warning(
            "ConfigMaps could not be listed in: "
            f"{', '.join(unknown_namespaces)} (treated as unknown, nothing reported unused there)"
        )


def create_deletion_table(report: DeletionReport) -> Table:
    """Create a Rich table with one row per deletion outcome.

    Args:
        report: Deletion report to display.

    Returns:
        Rich Table configured for deletion results.
    """
    table = Table(
        title="Deletion Results",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=10, justify="center")
    table.add_column("Namespace", style="namespace", no_wrap=True)
    table.add_column("ConfigMap", no_wrap=True)
    table.add_column("Details", style="muted")

    for outcome in report.outcomes:
        if outcome.status == DeletionStatus.DELETED:
            status, detail = "[success]deleted[/]", ""
        elif outcome.status == DeletionStatus.DRY_RUN:
            status, detail = "[info]dry-run[/]", "Would delete"
        elif outcome.status == DeletionStatus.SKIPPED:
            status = "[protected]skipped[/]"
            detail = outcome.reason.value if outcome.reason else ""
        else:
            status, detail = "[error]failed[/]", outcome.error or "Unknown error"
        table.add_row(status, outcome.ref.namespace, outcome.ref.name, detail)

    return table


def print_deletion_summary(report: DeletionReport) -> None:
    """Print deletion counts and the ConfigMaps that need attention.

    Skipped and failed ConfigMaps are listed explicitly so that success is
    never inferred from the absence of an error.
    """
    if report.skipped:
        console.print(f"\n[warning]Skipped {len(report.skipped)} ConfigMap(s):[/]")
        for outcome in report.skipped:
            reason = outcome.reason.value if outcome.reason else "skipped"
            console.print(f"  [protected]- {outcome.ref}[/] [muted]({reason})[/]")

    if report.failed:
        console.print(f"\n[error]Failed to delete {len(report.failed)} ConfigMap(s):[/]")
        for outcome in report.failed:
            console.print(f"  - {outcome.ref} [muted]{outcome.error}[/]")

    if report.dry_run:
        console.print(f"\n[info]Dry-run: {len(report.dry_run)} ConfigMap(s) would be deleted.[/]")
    elif not report.failed:
        print_success(f"\nSuccessfully deleted {len(report.deleted)} unused ConfigMap(s).")
    else:
        console.print(
            f"\n[success]{len(report.deleted)} deleted[/], "
            f"[protected]{len(report.skipped)} skipped[/], "
            f"[error]{len(report.failed)} failed[/]"
        )


def build_json_report(
    result: ReconciliationResult,
    policy: ProtectionPolicy,
    warnings: list[str],
    deletion: DeletionReport | None = None,
) -> dict[str, Any]:
    """Assemble the JSON document for ``--format json`` and ``--export``."""
    data: dict[str, Any] = {
        "in_use": [
            {**ref.to_dict(), "protected": policy.is_protected(ref)}
            for ref in result.in_use.sorted()
        ],
        "unused": [
            {**ref.to_dict(), "protected": policy.is_protected(ref)}
            for ref in result.unused.sorted()
        ],
        "warnings": warnings,
        "unknown_namespaces": list(result.unknown_namespaces),
    }
    if deletion is not None:
        data["deletion"] = deletion.to_dict()
    return data
