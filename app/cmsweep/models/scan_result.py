"""Scan result models.

This module defines the per-namespace scan outcome produced by the
namespace scanner and the aggregate report assembled by the scan
coordinator.
"""

from dataclasses import dataclass, field

from cmsweep.models.refs import ReferenceSet


@dataclass(slots=True)
class NamespaceScanOutcome:
    """Result of scanning the workloads of a single namespace.

    Attributes:
        namespace: Namespace that was scanned.
        used: ConfigMap references declared by workloads in the namespace.
        warnings: Non-fatal listing failures, one entry per failed kind.
    """

    namespace: str
    used: ReferenceSet = field(default_factory=ReferenceSet)
    warnings: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        """Check if every workload kind was listed successfully."""
        return not self.warnings


@dataclass(slots=True)
class ScanReport:
    """Aggregate result of scanning all target namespaces.

    Attributes:
        used: Union of the in-use references of every namespace.
        outcomes: Per-namespace outcomes, ordered by namespace.
        cancelled: Whether the run was cancelled before all scans finished.
    """

    used: ReferenceSet = field(default_factory=ReferenceSet)
    outcomes: list[NamespaceScanOutcome] = field(default_factory=list)
    cancelled: bool = False

    @property
    def warnings(self) -> list[str]:
        """Return warnings of all namespaces in namespace order."""
        return [warning for outcome in self.outcomes for warning in outcome.warnings]

    @property
    def incomplete_namespaces(self) -> frozenset[str]:
        """Return namespaces where at least one workload kind failed to list."""
        return frozenset(o.namespace for o in self.outcomes if not o.complete)
