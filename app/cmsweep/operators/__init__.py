"""ConfigMap operators.

This module exports the operator that executes deletions of unused
ConfigMaps.
"""

from cmsweep.operators.configmap import ConfigMapOperator

__all__ = ["ConfigMapOperator"]
