"""ConfigMap deletion operator.

Deletes unused ConfigMaps one by one, skipping protected ones, and
records an outcome for every reference. A failed deletion never stops
the batch.
"""

import logging
import threading
from collections.abc import Iterable

from cmsweep.cluster.fetcher import ResourceFetcher, describe_error
from cmsweep.core.protected import DEFAULT_POLICY, ProtectionPolicy
from cmsweep.models.deletion import (
    DeletionOutcome,
    DeletionReport,
    DeletionStatus,
    SkipReason,
    deleted,
    failed,
    skipped,
)
from cmsweep.models.refs import ResourceRef

logger = logging.getLogger(__name__)


class ConfigMapOperator:
    """Deletes unused ConfigMaps with protection checks.

    Attributes:
        fetcher: Cluster access used for the delete calls.
        policy: Protection policy; protected references are never deleted.

    Example:
        >>> operator = ConfigMapOperator(fetcher, policy, dry_run=True)
        >>> report = operator.delete_unused(result.unused)
        >>> report.counts["dry-run"]
    """

    def __init__(
        self,
        fetcher: ResourceFetcher,
        policy: ProtectionPolicy = DEFAULT_POLICY,
        *,
        dry_run: bool = False,
        cancel_event: threading.Event | None = None,
        skip_namespaces: Iterable[str] = (),
    ) -> None:
        self.fetcher = fetcher
        self.policy = policy
        self._dry_run = dry_run
        self._cancel = cancel_event or threading.Event()
        self._skip_namespaces = frozenset(skip_namespaces)

    def delete_unused(self, unused: Iterable[ResourceRef]) -> DeletionReport:
        """Delete every unprotected reference.

        References are processed in ``(namespace, name)`` order. A
        KeyboardInterrupt during a delete call sets the cancel event; the
        interrupted reference and every later one are recorded as
        ``SKIPPED(CANCELLED)`` and the partial report is returned.

        Args:
            unused: References to delete (typically ``ReconciliationResult.unused``).

        Returns:
            DeletionReport with one outcome per reference.
        """
        report = DeletionReport()

        for ref in sorted(unused):
            try:
                outcome = self._delete_single(ref)
            except KeyboardInterrupt:
                logger.warning("Deletion interrupted at ConfigMap %s", ref)
                self._cancel.set()
                outcome = skipped(ref, SkipReason.CANCELLED)
            report.add(outcome)

        counts = report.counts
        logger.info(
            "Deletion finished: %d deleted, %d skipped, %d failed",
            counts[DeletionStatus.DELETED.value],
            counts[DeletionStatus.SKIPPED.value],
            counts[DeletionStatus.FAILED.value],
        )
        return report

    def _delete_single(self, ref: ResourceRef) -> DeletionOutcome:
        if self.policy.is_protected(ref):
            logger.debug("Skipping protected ConfigMap %s", ref)
            return skipped(ref, SkipReason.PROTECTED)

        if ref.namespace in self._skip_namespaces:
            logger.debug("Skipping ConfigMap %s: workload scan of namespace incomplete", ref)
            return skipped(ref, SkipReason.INCOMPLETE_SCAN)

        if self._cancel.is_set():
            return skipped(ref, SkipReason.CANCELLED)

        if self._dry_run:
            logger.info("Dry-run: would delete ConfigMap %s", ref)
            return DeletionOutcome(ref=ref, status=DeletionStatus.DRY_RUN)

        try:
            self.fetcher.delete_config_map(ref.namespace, ref.name)
        except Exception as e:
            error = describe_error(e)
            logger.warning("Failed to delete ConfigMap %s: %s", ref, error)
            return failed(ref, error)

        logger.info("Deleted ConfigMap %s", ref)
        return deleted(ref)
