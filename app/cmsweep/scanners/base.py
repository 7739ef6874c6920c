"""Abstract base class for workload kinds.

This module defines the WorkloadKind interface. Every kind knows how to
list its objects through a ResourceFetcher and how to unwrap one object
to the pod spec that the reference extractor understands.
"""

from abc import ABC, abstractmethod
from typing import Any

from cmsweep.cluster.fetcher import ResourceFetcher
from cmsweep.models.refs import ReferenceSet
from cmsweep.scanners.extractor import extract_references


class WorkloadKind(ABC):
    """Abstract base class for all supported workload kinds.

    Example:
        >>> kind = DeploymentKind()
        >>> refs = kind.references(fetcher, "demo")
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the plural resource name (e.g. "deployments")."""

    @abstractmethod
    def list_objects(self, fetcher: ResourceFetcher, namespace: str) -> list[Any]:
        """List the objects of this kind in a namespace.

        Raises:
            Exception: Whatever the fetcher raises; the caller handles it.
        """

    @abstractmethod
    def pod_spec(self, obj: Any) -> Any:
        """Return the pod spec of an object, or None if it has none."""

    def references(self, fetcher: ResourceFetcher, namespace: str) -> ReferenceSet:
        """List the objects of this kind and extract their ConfigMap references.

        Args:
            fetcher: Cluster access.
            namespace: Namespace to scan.

        Returns:
            ConfigMap references declared by all objects of this kind.
        """
        refs = ReferenceSet()
        for obj in self.list_objects(fetcher, namespace):
            refs.update(extract_references(self.pod_spec(obj), namespace))
        return refs

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
