"""
In-process work queue with at-least-once delivery.

Messages are handed to a handler in batches. A handler marks the messages it could not process
with message.retry(); those (or the whole batch, if the handler raises) are delivered again
after a delay, until they have been attempted max_attempts times.
"""

import asyncio
import logging
from typing import Awaitable, Callable

from mavenhost.models import WorkItem

logger = logging.getLogger("mavenhost.queue")


class Message:
    def __init__(self, body: WorkItem, attempts: int = 1):
        self.body = body
        self.attempts = attempts
        self.retry_requested = False

    def retry(self) -> None:
        self.retry_requested = True

    def __repr__(self):
        return f"Message({self.body.kind}:{self.body.path}, attempts={self.attempts})"


BatchHandler = Callable[[list[Message]], Awaitable[None]]


class WorkQueue:
    def __init__(self, batch_size: int = 100, max_attempts: int = 5, retry_delay: float = 5.0):
        self.batch_size = batch_size
        self.max_attempts = max_attempts
        self.retry_delay = retry_delay
        self._queue: asyncio.Queue[Message] = asyncio.Queue()
        self._task: asyncio.Task | None = None
        self._handler: BatchHandler | None = None
        self._inflight: list[Message] = []
        # retries waiting for their delay to pass
        self._delayed: dict[Message, asyncio.TimerHandle] = {}

    async def send(self, item: WorkItem) -> None:
        self._queue.put_nowait(Message(item))

    def pending(self) -> int:
        return self._queue.qsize()

    def _take(self, n: int) -> list[Message]:
        batch: list[Message] = []
        while len(batch) < n and not self._queue.empty():
            batch.append(self._queue.get_nowait())
        return batch

    def _release(self, message: Message) -> None:
        self._delayed.pop(message, None)
        self._queue.put_nowait(message)

    def _redeliver(self, message: Message, delay: float) -> None:
        if message.attempts >= self.max_attempts:
            logger.error(f"Dropping {message} after {message.attempts} attempts")
            return
        retried = Message(message.body, attempts=message.attempts + 1)
        if delay > 0:
            self._delayed[retried] = asyncio.get_running_loop().call_later(delay, self._release, retried)
        else:
            self._queue.put_nowait(retried)

    def _requeue(self) -> None:
        """Put an interrupted batch and all delayed retries back on the queue"""
        for message in self._inflight:
            self._queue.put_nowait(Message(message.body, attempts=message.attempts))
        self._inflight = []
        for message, handle in self._delayed.items():
            handle.cancel()
            self._queue.put_nowait(message)
        self._delayed.clear()

    async def deliver(self, batch: list[Message], handler: BatchHandler, delay: float = 0) -> None:
        try:
            await handler(batch)
        except Exception:
            logger.exception(f"Error handling batch of {len(batch)} messages, will redeliver all")
            for message in batch:
                message.retry()
        for message in batch:
            if message.retry_requested:
                self._redeliver(message, delay)

    async def drain(self, handler: BatchHandler) -> None:
        """Process messages until the queue is empty, redelivering failures immediately"""
        while batch := self._take(self.batch_size):
            self._inflight = batch
            await self.deliver(batch, handler)
            self._inflight = []

    def start(self, handler: BatchHandler) -> asyncio.Task:
        if self._task is not None and not self._task.done():
            return self._task
        self._handler = handler
        self._task = asyncio.create_task(self._run(handler))
        return self._task

    async def _run(self, handler: BatchHandler) -> None:
        logger.info("Work queue consumer started")
        while True:
            first = await self._queue.get()
            self._inflight = [first] + self._take(self.batch_size - 1)
            await self.deliver(self._inflight, handler, delay=self.retry_delay)
            self._inflight = []

    async def stop(self, timeout: float = 30.0) -> None:
        """Stop the consumer, and try to finish pending work within the timeout"""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        self._requeue()
        if self._handler is not None and self.pending():
            logger.info(f"Finishing {self.pending()} pending work items before shutdown")
            try:
                await asyncio.wait_for(self.drain(self._handler), timeout=timeout)
            except asyncio.TimeoutError:
                self._requeue()
                logger.warning(f"Shutdown timeout, {self.pending()} work items were not processed")
