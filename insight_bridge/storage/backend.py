"""
Memory Backend

Abstract key/value + query store for durable entries.
The bridge only relies on get/update/query; store/delete/count exist so
a backend can be populated and inspected without reaching into it.
"""

import time
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..common.schemas import MemoryEntry, MemoryEntryUpdate


class MemoryBackend(ABC):
    """
    Abstract base class for storage backends.

    Each backend must implement:
    - get: Fetch one entry by id
    - update: Apply a partial update, return the new entry
    - query: List every entry in a namespace
    - store / delete / count
    """

    @abstractmethod
    async def get(self, entry_id: str) -> Optional[MemoryEntry]:
        """
        Fetch an entry by id.

        Returns:
            The entry, or None if no entry has that id
        """
        pass

    @abstractmethod
    async def update(self, entry_id: str, update: MemoryEntryUpdate) -> Optional[MemoryEntry]:
        """
        Apply an update to an entry.

        Args:
            entry_id: Entry to update
            update: Fields to write

        Returns:
            The updated entry, or None if no entry has that id
        """
        pass

    @abstractmethod
    async def query(self, namespace: str) -> List[MemoryEntry]:
        """List all entries in a namespace"""
        pass

    @abstractmethod
    async def store(self, entry: MemoryEntry) -> None:
        """Insert or replace an entry"""
        pass

    @abstractmethod
    async def delete(self, entry_id: str) -> bool:
        """Delete an entry, returning whether it existed"""
        pass

    @abstractmethod
    async def count(self, namespace: Optional[str] = None) -> int:
        """Count entries, optionally within one namespace"""
        pass


class InMemoryBackend(MemoryBackend):
    """
    Dict-backed backend.

    update() merges the given metadata over the stored metadata and
    bumps updated_at, the same way a durable backend records a write.
    Entries are copied on the way in and out so callers never share
    state with the store.
    """

    def __init__(self, entries: Optional[List[MemoryEntry]] = None):
        self._entries: Dict[str, MemoryEntry] = {}
        for entry in entries or []:
            self._entries[entry.id] = entry.model_copy(deep=True)

    async def get(self, entry_id: str) -> Optional[MemoryEntry]:
        entry = self._entries.get(entry_id)
        if entry is None:
            return None
        return entry.model_copy(deep=True)

    async def update(self, entry_id: str, update: MemoryEntryUpdate) -> Optional[MemoryEntry]:
        entry = self._entries.get(entry_id)
        if entry is None:
            return None

        if update.metadata is not None:
            entry.metadata = {**entry.metadata, **update.metadata}
        if update.content is not None:
            entry.content = update.content
        if update.tags is not None:
            entry.tags = list(update.tags)
        entry.updated_at = time.time()

        return entry.model_copy(deep=True)

    async def query(self, namespace: str) -> List[MemoryEntry]:
        return [
            entry.model_copy(deep=True)
            for entry in self._entries.values()
            if entry.namespace == namespace
        ]

    async def store(self, entry: MemoryEntry) -> None:
        self._entries[entry.id] = entry.model_copy(deep=True)

    async def delete(self, entry_id: str) -> bool:
        return self._entries.pop(entry_id, None) is not None

    async def count(self, namespace: Optional[str] = None) -> int:
        if namespace is None:
            return len(self._entries)
        return sum(1 for e in self._entries.values() if e.namespace == namespace)
