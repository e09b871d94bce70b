"""
The content store holds uploaded artifacts and the generated listing pages, keyed by path.

Listing follows S3 "directory" semantics: with a delimiter, keys below the prefix that contain
another delimiter are rolled up into common prefixes (subdirectories), the rest are objects (files).
"""

from typing import Protocol

from typing_extensions import TypedDict


class ListObject(TypedDict):
    key: str


class Listing(TypedDict):
    common_prefixes: list[str]
    objects: list[ListObject]


class StoredObject(TypedDict):
    key: str
    body: bytes
    content_type: str


class ContentStore(Protocol):
    async def put(self, key: str, body: bytes, content_type: str) -> None: ...

    async def get(self, key: str) -> StoredObject:
        """Read an object back, raising FileNotFoundError if it does not exist.

        The indexing pipeline only writes and lists; reads serve tests and operators checking what was stored.
        """
        ...

    async def list(self, prefix: str, delimiter: str = "/") -> Listing: ...
