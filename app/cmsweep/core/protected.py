"""Protected ConfigMaps that should never be deleted.

This module defines the names, name prefixes and namespaces of
ConfigMaps that are critical for cluster operation and must be
excluded from cleanup. The same policy object annotates display
output and filters deletion, so the two never diverge.
"""

from dataclasses import dataclass
from enum import Enum

from cmsweep.models.refs import ResourceRef

# Exact ConfigMap names created by the control plane, cloud providers,
# CNI plugins and service meshes.
PROTECTED_NAMES: tuple[str, ...] = (
    "kube-root-ca.crt",
    "extension-apiserver-authentication",
    "cluster-info",
    "coredns",
    "kube-proxy",
    "kubeadm-config",
    "kubelet-config",
    "aws-auth",
    "azure-cloud-provider",
    "gcp-config",
    "istio-ca-root-cert",
    "prometheus-config",
    "calico-config",
    "weave-net",
    "flannel-cfg",
    "cilium-config",
)

PROTECTED_PREFIXES: tuple[str, ...] = (
    "kube-",
    "system-",
    "istio-",
    "linkerd-",
    "cert-manager-",
    "ingress-controller-leader-",
    "extension-apiserver-",
)

# Every ConfigMap in these namespaces is protected.
PROTECTED_NAMESPACES: tuple[str, ...] = (
    "kube-system",
    "kube-public",
    "kube-node-lease",
    "cert-manager",
    "istio-system",
    "monitoring",
    "ingress-nginx",
)


class ProtectionRule(str, Enum):
    """Kind of rule that protects a ConfigMap."""

    NAME = "name"
    PREFIX = "prefix"
    NAMESPACE = "namespace"


@dataclass(frozen=True, slots=True)
class ProtectionMatch:
    """Explains why a reference is protected.

    Attributes:
        rule: Which kind of rule matched.
        value: The protected name, prefix or namespace that matched.
    """

    rule: ProtectionRule
    value: str

    def __str__(self) -> str:
        return f"{self.rule.value} '{self.value}'"


@dataclass(frozen=True, slots=True)
class ProtectionPolicy:
    """Classifies ConfigMap references as protected or deletable.

    Attributes:
        names: Exact protected ConfigMap names.
        prefixes: Protected ConfigMap name prefixes.
        namespaces: Namespaces whose ConfigMaps are all protected.

    Example:
        >>> policy = ProtectionPolicy()
        >>> policy.is_protected(ResourceRef("default", "kube-root-ca.crt"))
        True
    """

    names: frozenset[str] = frozenset(PROTECTED_NAMES)
    prefixes: tuple[str, ...] = PROTECTED_PREFIXES
    namespaces: frozenset[str] = frozenset(PROTECTED_NAMESPACES)

    def explain(self, ref: ResourceRef) -> ProtectionMatch | None:
        """Return the first rule protecting ``ref``, or None.

        Rules are checked in order: exact name, name prefix, namespace.

        Args:
            ref: ConfigMap reference to check.

        Returns:
            The matching rule, or None if the reference is not protected.
        """
        if ref.name in self.names:
            return ProtectionMatch(ProtectionRule.NAME, ref.name)
        for prefix in self.prefixes:
            if ref.name.startswith(prefix):
                return ProtectionMatch(ProtectionRule.PREFIX, prefix)
        if ref.namespace in self.namespaces:
            return ProtectionMatch(ProtectionRule.NAMESPACE, ref.namespace)
        return None

    def is_protected(self, ref: ResourceRef) -> bool:
        """Check if a ConfigMap reference is protected and must not be deleted.

        Args:
            ref: ConfigMap reference to check.

        Returns:
            True if the name, a name prefix or the namespace is protected.
        """
        return self.explain(ref) is not None


DEFAULT_POLICY = ProtectionPolicy()
