"""In-memory content store, used for tests and when no S3 storage is configured."""

from mavenhost.objectstorage.contentstore import Listing, ListObject, StoredObject


class MemoryContentStore:
    def __init__(self):
        self.objects: dict[str, StoredObject] = {}

    async def put(self, key: str, body: bytes, content_type: str) -> None:
        self.objects[key] = StoredObject(key=key, body=bytes(body), content_type=content_type)

    async def get(self, key: str) -> StoredObject:
        try:
            return self.objects[key]
        except KeyError:
            raise FileNotFoundError(f"Object {key} not found in store")

    async def list(self, prefix: str, delimiter: str = "/") -> Listing:
        common_prefixes: list[str] = []
        objects: list[ListObject] = []
        for key in sorted(self.objects):
            if not key.startswith(prefix):
                continue
            rest = key[len(prefix) :]
            if delimiter and delimiter in rest:
                common_prefix = prefix + rest[: rest.index(delimiter) + len(delimiter)]
                if common_prefix not in common_prefixes:
                    common_prefixes.append(common_prefix)
            else:
                objects.append(ListObject(key=key))
        return Listing(common_prefixes=common_prefixes, objects=objects)
