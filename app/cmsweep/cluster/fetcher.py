"""Resource fetcher for workloads and ConfigMaps.

The scanners, inventory collector and deletion operator only talk to the
cluster through the :class:`ResourceFetcher` protocol. The production
implementation wraps the typed APIs of the ``kubernetes`` client; tests
substitute an in-memory fake.
"""

import logging
from typing import Any, Protocol

from kubernetes import client
from kubernetes.client.exceptions import ApiException

from cmsweep.models.refs import ResourceRef

logger = logging.getLogger(__name__)


class ResourceFetcher(Protocol):
    """Cluster operations used by cmsweep.

    All workload listings return the API objects as returned by the
    kubernetes client (``V1Pod``, ``V1Deployment``, ...). Every method
    may raise; callers decide whether a failure is fatal.
    """

    def list_pods(self, namespace: str) -> list[Any]: ...

    def list_deployments(self, namespace: str) -> list[Any]: ...

    def list_stateful_sets(self, namespace: str) -> list[Any]: ...

    def list_daemon_sets(self, namespace: str) -> list[Any]: ...

    def list_jobs(self, namespace: str) -> list[Any]: ...

    def list_cron_jobs(self, namespace: str) -> list[Any]: ...

    def list_config_maps(self, namespace: str) -> list[ResourceRef]: ...

    def delete_config_map(self, namespace: str, name: str) -> None: ...

    def list_namespaces(self) -> list[str]: ...

    def namespace_exists(self, name: str) -> bool: ...


class KubernetesFetcher:
    """ResourceFetcher backed by the official kubernetes client.

    Attributes:
        request_timeout: Timeout in seconds applied to every API call.

    Example:
        >>> connection = connect()
        >>> fetcher = KubernetesFetcher(connection.api_client)
        >>> fetcher.list_namespaces()
        ['default', 'kube-system']
    """

    def __init__(self, api_client: client.ApiClient, request_timeout: float = 30.0) -> None:
        self.request_timeout = request_timeout
        self._core = client.CoreV1Api(api_client)
        self._apps = client.AppsV1Api(api_client)
        self._batch = client.BatchV1Api(api_client)

    def list_pods(self, namespace: str) -> list[Any]:
        return self._core.list_namespaced_pod(
            namespace, _request_timeout=self.request_timeout
        ).items

    def list_deployments(self, namespace: str) -> list[Any]:
        return self._apps.list_namespaced_deployment(
            namespace, _request_timeout=self.request_timeout
        ).items

    def list_stateful_sets(self, namespace: str) -> list[Any]:
        return self._apps.list_namespaced_stateful_set(
            namespace, _request_timeout=self.request_timeout
        ).items

    def list_daemon_sets(self, namespace: str) -> list[Any]:
        return self._apps.list_namespaced_daemon_set(
            namespace, _request_timeout=self.request_timeout
        ).items

    def list_jobs(self, namespace: str) -> list[Any]:
        return self._batch.list_namespaced_job(
            namespace, _request_timeout=self.request_timeout
        ).items

    def list_cron_jobs(self, namespace: str) -> list[Any]:
        return self._batch.list_namespaced_cron_job(
            namespace, _request_timeout=self.request_timeout
        ).items

    def list_config_maps(self, namespace: str) -> list[ResourceRef]:
        """List the ConfigMaps of a namespace as references."""
        items = self._core.list_namespaced_config_map(
            namespace, _request_timeout=self.request_timeout
        ).items
        return [ResourceRef(namespace, cm.metadata.name) for cm in items]

    def delete_config_map(self, namespace: str, name: str) -> None:
        """Delete a ConfigMap.

        Raises:
            ApiException: If the API rejects the request.
        """
        self._core.delete_namespaced_config_map(
            name, namespace, _request_timeout=self.request_timeout
        )
        logger.debug("Deleted ConfigMap %s/%s", namespace, name)

    def list_namespaces(self) -> list[str]:
        """List the names of all namespaces visible to the client."""
        items = self._core.list_namespace(_request_timeout=self.request_timeout).items
        return [ns.metadata.name for ns in items]

    def namespace_exists(self, name: str) -> bool:
        """Check if a namespace exists.

        Raises:
            ApiException: For errors other than 404 Not Found.
        """
        try:
            self._core.read_namespace(name, _request_timeout=self.request_timeout)
        except ApiException as e:
            if e.status == 404:
                return False
            raise
        return True


def describe_error(error: BaseException) -> str:
    """Return a one-line description of an API or transport error.

    ApiException renders headers and body over several lines; only the
    status and reason are kept.
    """
    if isinstance(error, ApiException):
        reason = error.reason or "API error"
        return f"{error.status} {reason}" if error.status else reason
    return str(error) or type(error).__name__
