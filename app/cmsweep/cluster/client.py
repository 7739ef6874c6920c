"""Cluster credential and context resolution.

Loads a kubeconfig (or the in-cluster service account when no kubeconfig
is available) into a dedicated API client, so nothing depends on the
kubernetes package's global default configuration.
"""

import logging
from dataclasses import dataclass

from kubernetes import client, config
from kubernetes.config.config_exception import ConfigException

logger = logging.getLogger(__name__)


class ClusterConnectionError(Exception):
    """Raised when cluster credentials cannot be resolved."""


@dataclass(frozen=True, slots=True)
class ClusterConnection:
    """A configured connection to a Kubernetes cluster.

    Attributes:
        api_client: API client bound to the resolved configuration.
        context: Name of the kubeconfig context, or None in-cluster.
        in_cluster: Whether the in-cluster service account is used.
    """

    api_client: client.ApiClient
    context: str | None
    in_cluster: bool = False

    @property
    def display_name(self) -> str:
        """Human-readable name of the connection."""
        if self.in_cluster:
            return "in-cluster"
        return self.context or "unknown"


def _active_context(kubeconfig: str | None, context: str | None) -> str | None:
    if context:
        return context
    try:
        _, active = config.list_kube_config_contexts(config_file=kubeconfig)
    except ConfigException:
        return None
    return active.get("name") if active else None


def connect(kubeconfig: str | None = None, context: str | None = None) -> ClusterConnection:
    """Resolve cluster credentials and build an API client.

    Tries the kubeconfig first (``kubeconfig`` path, ``$KUBECONFIG`` or
    ``~/.kube/config``). Falls back to the in-cluster configuration only
    when neither a kubeconfig path nor a context was requested explicitly.

    Args:
        kubeconfig: Path to a kubeconfig file. If None, uses the default locations.
        context: Kubeconfig context to use. If None, uses the current context.

    Returns:
        ClusterConnection for the resolved cluster.

    Raises:
        ClusterConnectionError: If no usable configuration is found.
    """
    configuration = client.Configuration()

    try:
        config.load_kube_config(
            config_file=kubeconfig,
            context=context,
            client_configuration=configuration,
            persist_config=False,
        )
    except (ConfigException, OSError) as e:
        if kubeconfig or context:
            raise ClusterConnectionError(f"Cannot load kubeconfig: {e}") from e
        logger.debug("No usable kubeconfig (%s), trying in-cluster config", e)
        try:
            config.load_incluster_config(client_configuration=configuration)
        except ConfigException as incluster_error:
            msg = f"Cannot resolve cluster credentials: {e}; in-cluster: {incluster_error}"
            raise ClusterConnectionError(msg) from incluster_error
        logger.info("Using in-cluster configuration")
        return ClusterConnection(
            api_client=client.ApiClient(configuration),
            context=None,
            in_cluster=True,
        )

    active = _active_context(kubeconfig, context)
    logger.info("Using kubeconfig context %s", active)
    return ClusterConnection(api_client=client.ApiClient(configuration), context=active)
