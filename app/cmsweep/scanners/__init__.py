"""Workload scanners.

This module exports the workload kinds, the reference extractor and the
namespace/cluster scanners built on them.
"""

from cmsweep.scanners.base import WorkloadKind
from cmsweep.scanners.coordinator import ScanCoordinator
from cmsweep.scanners.extractor import extract_references
from cmsweep.scanners.kinds import WORKLOAD_KINDS
from cmsweep.scanners.namespace import NamespaceScanner

__all__ = [
    "WORKLOAD_KINDS",
    "NamespaceScanner",
    "ScanCoordinator",
    "WorkloadKind",
    "extract_references",
]
