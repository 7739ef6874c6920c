"""Scan coordinator for all target namespaces.

Runs one NamespaceScanner per namespace on a bounded thread pool and
merges the per-namespace results into a single in-use set. The
coordinator returns only after every namespace task has finished, so no
ConfigMap is reported unused while its namespace is still being checked.
"""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed

from cmsweep.cluster.fetcher import ResourceFetcher
from cmsweep.core.config import DEFAULT_WORKERS
from cmsweep.models.scan_result import NamespaceScanOutcome, ScanReport
from cmsweep.scanners.namespace import NamespaceScanner

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[NamespaceScanOutcome], None]


class ScanCoordinator:
    """Scans many namespaces with bounded concurrency.

    Attributes:
        workers: Maximum number of namespaces scanned at the same time.

    Example:
        >>> coordinator = ScanCoordinator(fetcher, workers=5)
        >>> report = coordinator.scan_all(["default", "demo"])
        >>> sorted(report.used)
    """

    def __init__(
        self,
        fetcher: ResourceFetcher,
        workers: int = DEFAULT_WORKERS,
        cancel_event: threading.Event | None = None,
        scanner: NamespaceScanner | None = None,
    ) -> None:
        if workers < 1:
            msg = f"workers must be at least 1, got {workers}"
            raise ValueError(msg)
        self.workers = workers
        self.cancel_event = cancel_event or threading.Event()
        self._scanner = scanner or NamespaceScanner(fetcher, cancel_event=self.cancel_event)

    def _safe_scan(self, namespace: str) -> NamespaceScanOutcome:
        try:
            return self._scanner.scan(namespace)
        except Exception as e:
            logger.exception("Unexpected error scanning namespace %s", namespace)
            return NamespaceScanOutcome(
                namespace=namespace,
                warnings=[f"{namespace}: scan failed: {e}"],
            )

    def scan_all(
        self,
        namespaces: list[str],
        on_complete: ProgressCallback | None = None,
    ) -> ScanReport:
        """Scan every namespace and union the in-use references.

        Args:
            namespaces: Namespaces to scan. Duplicates are scanned once.
            on_complete: Called from the calling thread after each namespace finishes.

        Returns:
            ScanReport with the global in-use set and per-namespace outcomes.

        Raises:
            KeyboardInterrupt: After cancelling pending namespace scans. Any
                exception raised by ``on_complete`` is re-raised the same way.
        """
        report = ScanReport()
        targets = list(dict.fromkeys(namespaces))
        if not targets:
            return report

        logger.info("Scanning %d namespace(s) with %d worker(s)", len(targets), self.workers)
        executor = ThreadPoolExecutor(
            max_workers=min(self.workers, len(targets)),
            thread_name_prefix="cmsweep-scan",
        )
        completed = False
        try:
            futures = [executor.submit(self._safe_scan, ns) for ns in targets]
            for future in as_completed(futures):
                outcome = future.result()
                report.outcomes.append(outcome)
                report.used.update(outcome.used)
                if on_complete is not None:
                    on_complete(outcome)
            completed = True
        finally:
            if not completed:
                # Interrupt or failing callback: stop the workers still queued
                self.cancel_event.set()
            executor.shutdown(wait=completed, cancel_futures=not completed)

        report.outcomes.sort(key=lambda o: o.namespace)
        report.cancelled = self.cancel_event.is_set()
        logger.info(
            "Scan complete: %d ConfigMap reference(s), %d warning(s)",
            len(report.used),
            len(report.warnings),
        )
        return report
