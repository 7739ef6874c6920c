"""Deletion outcome models.

This module defines the per-ConfigMap outcome recorded by the deletion
engine and the report that aggregates those outcomes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from cmsweep.models.refs import ResourceRef


class DeletionStatus(Enum):
    """Outcome of a single deletion attempt.

    Attributes:
        DELETED: The ConfigMap was deleted.
        SKIPPED: The ConfigMap was not touched (see SkipReason).
        FAILED: The delete call raised an error.
        DRY_RUN: The ConfigMap would have been deleted.
    """

    DELETED = "deleted"
    SKIPPED = "skipped"
    FAILED = "failed"
    DRY_RUN = "dry-run"


class SkipReason(Enum):
    """Reason a ConfigMap was skipped.

    Attributes:
        PROTECTED: Matches the protection policy.
        CANCELLED: The run was cancelled before the ConfigMap was reached.
        INCOMPLETE_SCAN: Some workloads of its namespace could not be listed.
    """

    PROTECTED = "protected"
    CANCELLED = "cancelled"
    INCOMPLETE_SCAN = "incomplete-scan"


@dataclass(frozen=True, slots=True)
class DeletionOutcome:
    """Result of processing one unused ConfigMap.

    Attributes:
        ref: The ConfigMap that was processed.
        status: What happened to it.
        reason: Why it was skipped (only for SKIPPED).
        error: Error message (only for FAILED).
    """

    ref: ResourceRef
    status: DeletionStatus
    reason: SkipReason | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        """Validate outcome data after initialization."""
        if self.status == DeletionStatus.SKIPPED and self.reason is None:
            msg = "Skipped outcome requires a reason"
            raise ValueError(msg)
        if self.status == DeletionStatus.FAILED and not self.error:
            msg = "Failed outcome requires an error message"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            **self.ref.to_dict(),
            "status": self.status.value,
            "reason": self.reason.value if self.reason else None,
            "error": self.error,
        }


def deleted(ref: ResourceRef) -> DeletionOutcome:
    """Create a DELETED outcome."""
    return DeletionOutcome(ref=ref, status=DeletionStatus.DELETED)


def skipped(ref: ResourceRef, reason: SkipReason = SkipReason.PROTECTED) -> DeletionOutcome:
    """Create a SKIPPED outcome."""
    return DeletionOutcome(ref=ref, status=DeletionStatus.SKIPPED, reason=reason)


def failed(ref: ResourceRef, error: str) -> DeletionOutcome:
    """Create a FAILED outcome."""
    return DeletionOutcome(ref=ref, status=DeletionStatus.FAILED, error=error or "Unknown error")


@dataclass(slots=True)
class DeletionReport:
    """Aggregated outcomes of a deletion run.

    Attributes:
        outcomes: One outcome per processed ConfigMap, in processing order.
    """

    outcomes: list[DeletionOutcome] = field(default_factory=list)

    def add(self, outcome: DeletionOutcome) -> None:
        """Append an outcome."""
        self.outcomes.append(outcome)

    def _with_status(self, status: DeletionStatus) -> list[DeletionOutcome]:
        return [o for o in self.outcomes if o.status == status]

    @property
    def deleted(self) -> list[ResourceRef]:
        """References that were deleted."""
        return [o.ref for o in self._with_status(DeletionStatus.DELETED)]

    @property
    def skipped(self) -> list[DeletionOutcome]:
        """Skipped outcomes, including the skip reason."""
        return self._with_status(DeletionStatus.SKIPPED)

    @property
    def failed(self) -> list[DeletionOutcome]:
        """Failed outcomes, including the error message."""
        return self._with_status(DeletionStatus.FAILED)

    @property
    def dry_run(self) -> list[ResourceRef]:
        """References that would have been deleted."""
        return [o.ref for o in self._with_status(DeletionStatus.DRY_RUN)]

    @property
    def counts(self) -> dict[str, int]:
        """Count outcomes per status value."""
        return {status.value: len(self._with_status(status)) for status in DeletionStatus}

    @property
    def has_failures(self) -> bool:
        """Check if any deletion failed."""
        return any(o.status == DeletionStatus.FAILED for o in self.outcomes)

    @property
    def cancelled(self) -> bool:
        """Check if the run was interrupted before every reference was reached."""
        return any(o.reason == SkipReason.CANCELLED for o in self.outcomes)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "counts": self.counts,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }
