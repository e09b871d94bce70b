import logging

from mavenhost.models import WorkItem
from mavenhost.paths import directory_of
from mavenhost.propagate import AncestorPropagator
from mavenhost.purge import CachePurger
from mavenhost.queue import Message, WorkQueue

logger = logging.getLogger("mavenhost.dispatcher")


class WorkDispatcher:
    """
    Consumes batches of work items.

    Upload items are purged from the CDN, and each distinct directory in the batch gets one
    index item. Duplicates across batches are expected; indexing is idempotent.
    Index items run the ancestor propagator, after which all regenerated listings are purged.
    A failing item is retried on its own and does not fail the rest of the batch.
    """

    def __init__(self, queue: WorkQueue, propagator: AncestorPropagator, purger: CachePurger):
        self.queue = queue
        self.propagator = propagator
        self.purger = purger

    async def handle_batch(self, messages: list[Message]) -> None:
        uploads = [m for m in messages if m.body.kind == "upload"]
        if uploads:
            await self.handle_uploads(uploads)
        indexing = [m for m in messages if m.body.kind == "index"]
        if indexing:
            await self.handle_indexing(indexing)

    async def handle_uploads(self, messages: list[Message]) -> None:
        by_directory: dict[str, list[Message]] = {}
        for message in messages:
            by_directory.setdefault(directory_of(message.body.path), []).append(message)

        for directory, directory_messages in by_directory.items():
            try:
                await self.queue.send(WorkItem.index(directory))
            except Exception:
                logger.exception(f"Could not enqueue indexing of {directory}")
                for message in directory_messages:
                    message.retry()

        await self.purger.purge([m.body.path for m in messages])

    async def handle_indexing(self, messages: list[Message]) -> None:
        changed: list[str] = []
        for message in messages:
            try:
                changed += await self.propagator.propagate(message.body.path)
            except Exception:
                logger.exception(f"Indexing {message.body.path} failed (attempt {message.attempts})")
                message.retry()
        if changed:
            await self.purger.purge(changed)
