"""Reconciliation result model."""

from dataclasses import dataclass, field

from cmsweep.models.refs import ReferenceSet


@dataclass(frozen=True, slots=True)
class InventoryResult:
    """ConfigMaps that exist in the target namespaces.

    Attributes:
        exists: Every ConfigMap that could be listed.
        unknown_namespaces: Namespaces whose ConfigMaps could not be listed.
            They contribute nothing to ``exists``.
    """

    exists: ReferenceSet = field(default_factory=ReferenceSet)
    unknown_namespaces: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ReconciliationResult:
    """Outcome of diffing in-use references against existing ConfigMaps.

    Invariants: ``unused == exists - in_use``, so ``unused`` never
    overlaps ``in_use`` and is always a subset of ``exists``.

    Attributes:
        in_use: References declared by workloads.
        exists: ConfigMaps present in the cluster.
        unused: ConfigMaps present but not referenced.
        unknown_namespaces: Namespaces whose inventory is unknown.
    """

    in_use: ReferenceSet
    exists: ReferenceSet
    unused: ReferenceSet
    unknown_namespaces: tuple[str, ...] = ()
