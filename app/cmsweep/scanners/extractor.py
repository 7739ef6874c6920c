"""ConfigMap reference extraction from pod specifications.

This is the single place that knows which pod spec fields reference a
ConfigMap. It understands the static reference styles only:

- ``volumes[].configMap``
- ``containers[].envFrom[].configMapRef``
- ``containers[].env[].valueFrom.configMapKeyRef``

Ordinary and init containers are both inspected.
"""

from collections.abc import Iterator
from typing import Any

from cmsweep.models.refs import ReferenceSet, ResourceRef


def _names(pod_spec: Any) -> Iterator[str]:
    for volume in getattr(pod_spec, "volumes", None) or []:
        source = getattr(volume, "config_map", None)
        if source is not None:
            yield getattr(source, "name", None) or ""

    containers = list(getattr(pod_spec, "containers", None) or [])
    containers += list(getattr(pod_spec, "init_containers", None) or [])

    for container in containers:
        for env_from in getattr(container, "env_from", None) or []:
            source = getattr(env_from, "config_map_ref", None)
            if source is not None:
                yield getattr(source, "name", None) or ""

        for env in getattr(container, "env", None) or []:
            value_from = getattr(env, "value_from", None)
            key_ref = getattr(value_from, "config_map_key_ref", None)
            if key_ref is not None:
                yield getattr(key_ref, "name", None) or ""


def extract_references(pod_spec: Any, namespace: str) -> ReferenceSet:
    """Return the ConfigMaps referenced by a pod specification.

    Absent or None fields contribute nothing and references without a
    name are ignored, so this never raises for partial specs.

    Args:
        pod_spec: A ``V1PodSpec`` (or any object with the same attributes), or None.
        namespace: Namespace of the workload. References are namespace-local.

    Returns:
        Deduplicated set of referenced ConfigMaps.
    """
    if pod_spec is None:
        return ReferenceSet()
    return ReferenceSet(ResourceRef(namespace, name) for name in _names(pod_spec) if name)
