"""The six built-in workload kinds.

Pods carry their spec directly; Deployments, StatefulSets, DaemonSets and
Jobs wrap it in ``spec.template.spec``; CronJobs add one more level
through ``spec.job_template``.
"""

from typing import Any

from cmsweep.cluster.fetcher import ResourceFetcher
from cmsweep.scanners.base import WorkloadKind


def _template_spec(spec: Any) -> Any:
    template = getattr(spec, "template", None)
    return getattr(template, "spec", None)


class PodKind(WorkloadKind):
    """Bare pods."""

    @property
    def name(self) -> str:
        return "pods"

    def list_objects(self, fetcher: ResourceFetcher, namespace: str) -> list[Any]:
        return fetcher.list_pods(namespace)

    def pod_spec(self, obj: Any) -> Any:
        return getattr(obj, "spec", None)


class DeploymentKind(WorkloadKind):
    """apps/v1 Deployments."""

    @property
    def name(self) -> str:
        return "deployments"

    def list_objects(self, fetcher: ResourceFetcher, namespace: str) -> list[Any]:
        return fetcher.list_deployments(namespace)

    def pod_spec(self, obj: Any) -> Any:
        return _template_spec(getattr(obj, "spec", None))


class StatefulSetKind(WorkloadKind):
    """apps/v1 StatefulSets."""

    @property
    def name(self) -> str:
        return "statefulsets"

    def list_objects(self, fetcher: ResourceFetcher, namespace: str) -> list[Any]:
        return fetcher.list_stateful_sets(namespace)

    def pod_spec(self, obj: Any) -> Any:
        return _template_spec(getattr(obj, "spec", None))


class DaemonSetKind(WorkloadKind):
    """apps/v1 DaemonSets."""

    @property
    def name(self) -> str:
        return "daemonsets"

    def list_objects(self, fetcher: ResourceFetcher, namespace: str) -> list[Any]:
        return fetcher.list_daemon_sets(namespace)

    def pod_spec(self, obj: Any) -> Any:
        return _template_spec(getattr(obj, "spec", None))


class JobKind(WorkloadKind):
    """batch/v1 Jobs."""

    @property
    def name(self) -> str:
        return "jobs"

    def list_objects(self, fetcher: ResourceFetcher, namespace: str) -> list[Any]:
        return fetcher.list_jobs(namespace)

    def pod_spec(self, obj: Any) -> Any:
        return _template_spec(getattr(obj, "spec", None))


class CronJobKind(WorkloadKind):
    """batch/v1 CronJobs."""

    @property
    def name(self) -> str:
        return "cronjobs"

    def list_objects(self, fetcher: ResourceFetcher, namespace: str) -> list[Any]:
        return fetcher.list_cron_jobs(namespace)

    def pod_spec(self, obj: Any) -> Any:
        job_template = getattr(getattr(obj, "spec", None), "job_template", None)
        return _template_spec(getattr(job_template, "spec", None))


WORKLOAD_KINDS: tuple[WorkloadKind, ...] = (
    PodKind(),
    DeploymentKind(),
    StatefulSetKind(),
    DaemonSetKind(),
    JobKind(),
    CronJobKind(),
)
