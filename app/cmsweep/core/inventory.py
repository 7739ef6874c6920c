"""Inventory of existing ConfigMaps."""

import logging

from cmsweep.cluster.fetcher import ResourceFetcher, describe_error
from cmsweep.models.reconcile import InventoryResult
from cmsweep.models.refs import ReferenceSet

logger = logging.getLogger(__name__)


class InventoryCollector:
    """Lists the ConfigMaps that exist in the target namespaces.

    A namespace whose listing fails contributes no ConfigMaps and is
    reported in ``unknown_namespaces``. Undercounting what exists can only
    make fewer ConfigMaps look unused.
    """

    def __init__(self, fetcher: ResourceFetcher) -> None:
        self.fetcher = fetcher

    def list_all(self, namespaces: list[str]) -> InventoryResult:
        """List ConfigMaps of every namespace.

        Args:
            namespaces: Namespaces to list.

        Returns:
            InventoryResult with the existing ConfigMaps and the namespaces
            that could not be listed.
        """
        exists = ReferenceSet()
        unknown: list[str] = []

        for namespace in dict.fromkeys(namespaces):
            try:
                refs = self.fetcher.list_config_maps(namespace)
            except Exception as e:
                logger.warning(
                    "Cannot list ConfigMaps in namespace %s: %s", namespace, describe_error(e)
                )
                unknown.append(namespace)
                continue
            exists.update(refs)

        return InventoryResult(exists=exists, unknown_namespaces=tuple(unknown))
