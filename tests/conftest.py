"""Pytest configuration and shared fixtures.

This module contains the in-memory fetcher and the workload builders
used across all test modules. Workloads are built from the real
kubernetes client model classes so that attribute names match what the
API returns.
"""

import threading
import time
from collections import defaultdict
from typing import Any

import pytest
from cmsweep.models.refs import ResourceRef
from kubernetes import client
from kubernetes.client.exceptions import ApiException

# =============================================================================
# Pod spec builders
# =============================================================================


def volume_spec(*names: str) -> client.V1PodSpec:
    """Pod spec referencing ConfigMaps only through volumes."""
    return client.V1PodSpec(
        containers=[client.V1Container(name="app", image="busybox")],
        volumes=[
            client.V1Volume(name=f"vol-{i}", config_map=client.V1ConfigMapVolumeSource(name=n))
            for i, n in enumerate(names)
        ],
    )


def env_from_spec(*names: str, init: bool = False) -> client.V1PodSpec:
    """Pod spec referencing ConfigMaps only through envFrom."""
    container = client.V1Container(
        name="app",
        image="busybox",
        env_from=[
            client.V1EnvFromSource(config_map_ref=client.V1ConfigMapEnvSource(name=n))
            for n in names
        ],
    )
    if init:
        return client.V1PodSpec(
            containers=[client.V1Container(name="main", image="busybox")],
            init_containers=[container],
        )
    return client.V1PodSpec(containers=[container])


def key_ref_spec(*names: str) -> client.V1PodSpec:
    """Pod spec referencing ConfigMaps only through env valueFrom.configMapKeyRef."""
    return client.V1PodSpec(
        containers=[
            client.V1Container(
                name="app",
                image="busybox",
                env=[
                    client.V1EnvVar(
                        name=f"VAR_{i}",
                        value_from=client.V1EnvVarSource(
                            config_map_key_ref=client.V1ConfigMapKeySelector(name=n, key="k")
                        ),
                    )
                    for i, n in enumerate(names)
                ],
            )
        ]
    )


# =============================================================================
# Workload builders
# =============================================================================


def _meta(name: str) -> client.V1ObjectMeta:
    return client.V1ObjectMeta(name=name)


def _template(spec: client.V1PodSpec) -> client.V1PodTemplateSpec:
    return client.V1PodTemplateSpec(spec=spec)


def make_pod(spec: client.V1PodSpec, name: str = "pod") -> client.V1Pod:
    return client.V1Pod(metadata=_meta(name), spec=spec)


def make_deployment(spec: client.V1PodSpec, name: str = "deploy") -> client.V1Deployment:
    return client.V1Deployment(
        metadata=_meta(name),
        spec=client.V1DeploymentSpec(selector=client.V1LabelSelector(), template=_template(spec)),
    )


def make_stateful_set(spec: client.V1PodSpec, name: str = "sts") -> client.V1StatefulSet:
    return client.V1StatefulSet(
        metadata=_meta(name),
        spec=client.V1StatefulSetSpec(
            selector=client.V1LabelSelector(),
            service_name="svc",
            template=_template(spec),
        ),
    )


def make_daemon_set(spec: client.V1PodSpec, name: str = "ds") -> client.V1DaemonSet:
    return client.V1DaemonSet(
        metadata=_meta(name),
        spec=client.V1DaemonSetSpec(selector=client.V1LabelSelector(), template=_template(spec)),
    )


def make_job(spec: client.V1PodSpec, name: str = "job") -> client.V1Job:
    return client.V1Job(metadata=_meta(name), spec=client.V1JobSpec(template=_template(spec)))


def make_cron_job(spec: client.V1PodSpec, name: str = "cron") -> client.V1CronJob:
    return client.V1CronJob(
        metadata=_meta(name),
        spec=client.V1CronJobSpec(
            schedule="*/5 * * * *",
            job_template=client.V1JobTemplateSpec(
                spec=client.V1JobSpec(template=_template(spec)),
            ),
        ),
    )


# =============================================================================
# Fake fetcher
# =============================================================================

WORKLOAD_METHODS = (
    "list_pods",
    "list_deployments",
    "list_stateful_sets",
    "list_daemon_sets",
    "list_jobs",
    "list_cron_jobs",
)


class FakeFetcher:
    """In-memory ResourceFetcher.

    Workloads are registered per namespace and listing method. Failures
    can be injected per ``(method, namespace)`` pair and per ConfigMap
    deletion. All calls are recorded.
    """

    def __init__(self, delay: float = 0.0) -> None:
        self.workloads: dict[str, dict[str, list[Any]]] = defaultdict(lambda: defaultdict(list))
        self.config_maps: dict[str, list[str]] = defaultdict(list)
        self.namespaces: list[str] = []
        self.failures: dict[tuple[str, str], Exception] = {}
        self.delete_failures: dict[ResourceRef, BaseException] = {}
        self.deleted: list[ResourceRef] = []
        self.calls: list[tuple[str, str]] = []
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    # --- setup helpers ---

    def add(self, namespace: str, method: str, *objects: Any) -> "FakeFetcher":
        self._ensure_namespace(namespace)
        self.workloads[namespace][method].extend(objects)
        return self

    def add_config_maps(self, namespace: str, *names: str) -> "FakeFetcher":
        self._ensure_namespace(namespace)
        self.config_maps[namespace].extend(names)
        return self

    def fail(self, method: str, namespace: str, error: Exception | None = None) -> "FakeFetcher":
        self.failures[(method, namespace)] = error or ApiException(status=403, reason="Forbidden")
        return self

    def _ensure_namespace(self, namespace: str) -> None:
        if namespace not in self.namespaces:
            self.namespaces.append(namespace)

    # --- ResourceFetcher ---

    def _call(self, method: str, namespace: str) -> None:
        with self._lock:
            self.calls.append((method, namespace))
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            error = self.failures.get((method, namespace))
            if error is not None:
                raise error
        finally:
            with self._lock:
                self.in_flight -= 1

    def _list(self, method: str, namespace: str) -> list[Any]:
        self._call(method, namespace)
        return list(self.workloads[namespace][method])

    def list_pods(self, namespace: str) -> list[Any]:
        return self._list("list_pods", namespace)

    def list_deployments(self, namespace: str) -> list[Any]:
        return self._list("list_deployments", namespace)

    def list_stateful_sets(self, namespace: str) -> list[Any]:
        return self._list("list_stateful_sets", namespace)

    def list_daemon_sets(self, namespace: str) -> list[Any]:
        return self._list("list_daemon_sets", namespace)

    def list_jobs(self, namespace: str) -> list[Any]:
        return self._list("list_jobs", namespace)

    def list_cron_jobs(self, namespace: str) -> list[Any]:
        return self._list("list_cron_jobs", namespace)

    def list_config_maps(self, namespace: str) -> list[ResourceRef]:
        self._call("list_config_maps", namespace)
        return [ResourceRef(namespace, name) for name in self.config_maps[namespace]]

    def delete_config_map(self, namespace: str, name: str) -> None:
        ref = ResourceRef(namespace, name)
        self._call("delete_config_map", namespace)
        if ref in self.delete_failures:
            raise self.delete_failures[ref]
        self.deleted.append(ref)
        self.config_maps[namespace].remove(name)

    def list_namespaces(self) -> list[str]:
        self._call("list_namespaces", "")
        return list(self.namespaces)

    def namespace_exists(self, name: str) -> bool:
        self._call("namespace_exists", name)
        return name in self.namespaces


@pytest.fixture
def fetcher() -> FakeFetcher:
    """Empty in-memory fetcher."""
    return FakeFetcher()


@pytest.fixture
def demo_fetcher() -> FakeFetcher:
    """The ``demo`` namespace scenario.

    - app-config: mounted as a volume by a Deployment
    - logging-config: referenced via envFrom by a Pod
    - old-config: unreferenced
    - kube-root-ca.crt: unreferenced, protected
    """
    fake = FakeFetcher()
    fake.add_config_maps("demo", "app-config", "logging-config", "old-config", "kube-root-ca.crt")
    fake.add("demo", "list_deployments", make_deployment(volume_spec("app-config"), name="web"))
    fake.add("demo", "list_pods", make_pod(env_from_spec("logging-config"), name="logger"))
    return fake
