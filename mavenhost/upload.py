import logging
from typing import Sequence

from mavenhost.auth import authorize
from mavenhost.errors import EmptyBody, Forbidden, InvalidScope
from mavenhost.models import AuthorizedUser, WorkItem
from mavenhost.objectstorage import ContentStore
from mavenhost.paths import content_type_for, repository_name, storage_key, validate_artifact_path
from mavenhost.queue import WorkQueue

logger = logging.getLogger("mavenhost.upload")


class UploadIntake:
    def __init__(
        self,
        store: ContentStore,
        queue: WorkQueue,
        root: str,
        allowed_repos: Sequence[str],
        users: Sequence[AuthorizedUser],
        prefix: str = "",
    ):
        self.store = store
        self.queue = queue
        self.root = root
        self.allowed_repos = set(allowed_repos)
        self.users = list(users)
        self.prefix = prefix.strip("/")

    def resolve(self, request_path: str) -> str:
        """Strip the URL prefix from the request path and check it names an artifact under the root"""
        path = request_path.lstrip("/")
        if self.prefix:
            if not path.startswith(self.prefix + "/"):
                raise InvalidScope("Trying to push outside of repository.")
            path = path[len(self.prefix) + 1 :]
        return validate_artifact_path(path, self.root)

    async def upload(self, request_path: str, body: bytes | None, authorization: str | None) -> str:
        """
        Store an uploaded artifact and enqueue it for indexing, returning its artifact path.

        Indexing happens asynchronously: the work item is only sent after the object was written,
        so whoever handles it will see the new object.
        """
        path = self.resolve(request_path)
        repository = repository_name(path, self.root)
        if repository not in self.allowed_repos:
            raise Forbidden(f"{repository} is not an allowed repository.")
        if not authorize(authorization, repository, self.users):
            raise Forbidden("Not authorized.")
        if not body:
            raise EmptyBody("No body provided.")

        await self.store.put(storage_key(path), body, content_type_for(path))
        await self.queue.send(WorkItem.upload(path))
        logger.info(f"Stored {path} ({len(body)} bytes)")
        return path
