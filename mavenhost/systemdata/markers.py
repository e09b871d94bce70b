"""
Index markers: the durable record of which directories have had a listing page generated.

A marker means the directory's existence is already reflected in its parent's listing, so the
ancestor walk can stop there. Markers record existence, not freshness, and are never deleted.
"""

import logging
from datetime import UTC, datetime
from typing import Protocol

from elasticsearch import ApiError, AsyncElasticsearch, BadRequestError, NotFoundError, TransportError

from mavenhost.errors import StorageUnavailable

logger = logging.getLogger("mavenhost.markers")

MARKER_MAPPING = {
    "properties": {
        "directory": {"type": "keyword"},
        "indexed_at": {"type": "date"},
    }
}


class IndexMemory(Protocol):
    async def is_indexed(self, directory: str) -> bool: ...

    async def mark_indexed(self, directory: str) -> None: ...


class ElasticIndexMemory:
    """Markers stored as one document per directory, with the directory path as document id"""

    def __init__(self, elastic: AsyncElasticsearch, index: str):
        self.elastic = elastic
        self.index = index

    async def ensure_index(self) -> None:
        try:
            if not await self.elastic.indices.exists(index=self.index):
                logger.info(f"Creating marker index {self.index}")
                await self.elastic.indices.create(index=self.index, mappings=MARKER_MAPPING)
        except BadRequestError as e:
            # another worker created it first
            if e.error != "resource_already_exists_exception":
                raise StorageUnavailable(f"Cannot create marker index {self.index}: {e}") from e
        except (ApiError, TransportError) as e:
            raise StorageUnavailable(f"Cannot create marker index {self.index}: {e}") from e

    async def is_indexed(self, directory: str) -> bool:
        try:
            await self.elastic.get(index=self.index, id=directory, source=False)
        except NotFoundError:
            return False
        except (ApiError, TransportError) as e:
            raise StorageUnavailable(f"Cannot read marker for {directory}: {e}") from e
        return True

    async def mark_indexed(self, directory: str) -> None:
        doc = dict(directory=directory, indexed_at=datetime.now(UTC).isoformat())
        try:
            await self.elastic.index(index=self.index, id=directory, document=doc, refresh=True)
        except (ApiError, TransportError) as e:
            raise StorageUnavailable(f"Cannot write marker for {directory}: {e}") from e


class MemoryIndexMemory:
    def __init__(self):
        self.indexed: set[str] = set()

    async def is_indexed(self, directory: str) -> bool:
        return directory in self.indexed

    async def mark_indexed(self, directory: str) -> None:
        self.indexed.add(directory)
