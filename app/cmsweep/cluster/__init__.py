"""Kubernetes API access.

This module exports the cluster connection helpers and the resource
fetcher used by the scanners and the deletion operator.
"""

from cmsweep.cluster.client import ClusterConnection, ClusterConnectionError, connect
from cmsweep.cluster.fetcher import KubernetesFetcher, ResourceFetcher

__all__ = [
    "ClusterConnection",
    "ClusterConnectionError",
    "KubernetesFetcher",
    "ResourceFetcher",
    "connect",
]
