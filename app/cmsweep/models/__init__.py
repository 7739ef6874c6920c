"""Data models for cmsweep.

This module exports the core data structures used throughout the application.
"""

from cmsweep.models.deletion import (
    DeletionOutcome,
    DeletionReport,
    DeletionStatus,
    SkipReason,
)
from cmsweep.models.reconcile import InventoryResult, ReconciliationResult
from cmsweep.models.refs import ReferenceSet, ResourceRef
from cmsweep.models.scan_result import NamespaceScanOutcome, ScanReport

__all__ = [
    "DeletionOutcome",
    "DeletionReport",
    "DeletionStatus",
    "InventoryResult",
    "NamespaceScanOutcome",
    "ReconciliationResult",
    "ReferenceSet",
    "ResourceRef",
    "ScanReport",
    "SkipReason",
]
