"""Reconciliation of in-use references against existing ConfigMaps."""

from cmsweep.models.reconcile import InventoryResult, ReconciliationResult
from cmsweep.models.refs import ReferenceSet


def reconcile(
    in_use: ReferenceSet,
    exists: ReferenceSet | InventoryResult,
) -> ReconciliationResult:
    """Compute the ConfigMaps that exist but are not referenced.

    References are compared by namespace and name, so ``a/app-config``
    being in use says nothing about ``b/app-config``.

    Args:
        in_use: References declared by workloads.
        exists: Existing ConfigMaps, or a full inventory result.

    Returns:
        ReconciliationResult with ``unused = exists - in_use``.
    """
    unknown: tuple[str, ...] = ()
    if isinstance(exists, InventoryResult):
        unknown = exists.unknown_namespaces
        exists = exists.exists

    return ReconciliationResult(
        in_use=in_use,
        exists=exists,
        unused=exists.difference(in_use),
        unknown_namespaces=unknown,
    )
