"""Per-namespace workload scanner.

Lists the six workload kinds of one namespace concurrently and collects
the ConfigMaps they reference. A kind that fails to list is reported as
a warning; references found through the other kinds are still returned.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed

from cmsweep.cluster.fetcher import ResourceFetcher, describe_error
from cmsweep.models.refs import ReferenceSet
from cmsweep.models.scan_result import NamespaceScanOutcome
from cmsweep.scanners.base import WorkloadKind
from cmsweep.scanners.kinds import WORKLOAD_KINDS

logger = logging.getLogger(__name__)


class ScanCancelledError(Exception):
    """Raised inside a kind task when the run was cancelled before it started."""


class NamespaceScanner:
    """Scans the workloads of a single namespace for ConfigMap references.

    Each kind is listed in its own thread into a private set. The private
    sets are merged into the namespace set once every task has finished.

    Attributes:
        fetcher: Cluster access.
        kinds: Workload kinds to scan.
    """

    def __init__(
        self,
        fetcher: ResourceFetcher,
        kinds: tuple[WorkloadKind, ...] = WORKLOAD_KINDS,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.kinds = kinds
        self._cancel = cancel_event or threading.Event()

    def _scan_kind(self, kind: WorkloadKind, namespace: str) -> ReferenceSet:
        if self._cancel.is_set():
            raise ScanCancelledError(kind.name)
        refs = kind.references(self.fetcher, namespace)
        logger.debug("%s/%s: %d ConfigMap reference(s)", namespace, kind.name, len(refs))
        return refs

    def scan(self, namespace: str) -> NamespaceScanOutcome:
        """Scan one namespace.

        Args:
            namespace: Namespace to scan.

        Returns:
            NamespaceScanOutcome with the references of every kind that
            listed successfully and one warning per kind that did not.
        """
        outcome = NamespaceScanOutcome(namespace=namespace)
        if self._cancel.is_set():
            outcome.warnings.append(f"{namespace}: scan cancelled")
            return outcome

        failures: dict[str, str] = {}
        cancelled = False

        with ThreadPoolExecutor(
            max_workers=len(self.kinds),
            thread_name_prefix=f"cmsweep-{namespace}",
        ) as executor:
            future_to_kind = {
                executor.submit(self._scan_kind, kind, namespace): kind for kind in self.kinds
            }
            for future in as_completed(future_to_kind):
                kind = future_to_kind[future]
                try:
                    outcome.used.update(future.result())
                except ScanCancelledError:
                    cancelled = True
                except Exception as e:
                    failures[kind.name] = describe_error(e)

        # Report failures in declaration order, not completion order
        for kind in self.kinds:
            if kind.name in failures:
                message = f"{namespace}: failed to list {kind.name}: {failures[kind.name]}"
                logger.warning(message)
                outcome.warnings.append(message)
        if cancelled:
            outcome.warnings.append(f"{namespace}: scan cancelled")

        return outcome
