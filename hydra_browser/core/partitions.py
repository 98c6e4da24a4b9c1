"""
Registry of isolated storage contexts, one per partition letter.
"""

import logging
from collections.abc import Mapping
from types import MappingProxyType

from hydra_browser.exceptions import InvalidPartitionError
from hydra_browser.host.base import SessionFactory, StorageContext
from hydra_browser.models.pane import PARTITION_IDS, SESSION_PARTITION_PREFIX

log = logging.getLogger(__name__)


class PartitionRegistry:
    """
    Lazily creates and caches one storage context per partition.

    The same letter always yields the same context object for the lifetime of
    the registry; contexts are never destroyed.
    """

    def __init__(self, session_factory: SessionFactory):
        self._session_factory = session_factory
        self._contexts: dict[str, StorageContext] = {}

    @staticmethod
    def is_valid(candidate: str) -> bool:
        """Checks membership in the fixed A-Z alphabet."""
        return candidate in PARTITION_IDS

    @staticmethod
    def partition_name(partition: str) -> str:
        """Returns the host session name for a partition, e.g. 'persist:partition-A'."""
        return f"{SESSION_PARTITION_PREFIX}{partition}"

    def _require_valid(self, partition: str) -> None:
        if not self.is_valid(partition):
            raise InvalidPartitionError(
                f"Invalid partition {partition!r}: expected a single letter A-Z."
            )

    def get_or_create(self, partition: str) -> StorageContext:
        self._require_valid(partition)
        context = self._contexts.get(partition)
        if context is None:
            context = self._session_factory(self.partition_name(partition))
            self._contexts[partition] = context
            log.debug(f"Created storage context for partition {partition}.")
        return context

    def contexts(self) -> Mapping[str, StorageContext]:
        """Read-only view of the contexts created so far."""
        return MappingProxyType(self._contexts)

    def __contains__(self, partition: object) -> bool:
        return partition in self._contexts

    async def clear_data(self, partition: str) -> None:
        """Wipes one partition's storage; a partition never created is a no-op."""
        self._require_valid(partition)
        context = self._contexts.get(partition)
        if context is not None:
            await context.clear_storage_data()
            log.info(f"Cleared storage data for partition {partition}.")

    async def clear_all(self) -> None:
        for partition, context in list(self._contexts.items()):
            await context.clear_storage_data()
            log.debug(f"Cleared storage data for partition {partition}.")
        log.info(f"Cleared storage data for {len(self._contexts)} partitions.")
