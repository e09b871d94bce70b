import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import AsyncGenerator

import httpx
from aiobotocore.config import AioConfig
from aiobotocore.session import get_session
from elasticsearch import AsyncElasticsearch
from types_aiobotocore_s3.client import S3Client

from mavenhost.config import Settings, purge_enabled, s3_enabled
from mavenhost.dispatcher import WorkDispatcher
from mavenhost.listing import IndexGenerator
from mavenhost.objectstorage import ContentStore
from mavenhost.objectstorage.memory import MemoryContentStore
from mavenhost.objectstorage.s3bucket import S3ContentStore
from mavenhost.propagate import AncestorPropagator
from mavenhost.purge import CachePurger
from mavenhost.queue import WorkQueue
from mavenhost.systemdata.markers import ElasticIndexMemory, IndexMemory, MemoryIndexMemory
from mavenhost.upload import UploadIntake

logger = logging.getLogger("mavenhost.connections")


class MavenServices:
    """All components of the upload and indexing pipeline, wired to their dependencies"""

    def __init__(self, settings: Settings, store: ContentStore, memory: IndexMemory, purger: CachePurger):
        self.settings = settings
        self.store = store
        self.memory = memory
        self.purger = purger
        self.queue = WorkQueue(
            batch_size=settings.queue_batch_size,
            max_attempts=settings.queue_max_attempts,
            retry_delay=settings.queue_retry_delay,
        )
        self.generator = IndexGenerator(store, title=settings.listing_title)
        self.propagator = AncestorPropagator(self.generator, memory, root=settings.repository_root)
        self.dispatcher = WorkDispatcher(self.queue, self.propagator, purger)
        self.intake = UploadIntake(
            store,
            self.queue,
            root=settings.repository_root,
            allowed_repos=settings.allowed_repos,
            users=settings.authorized_users,
            prefix=settings.prefix,
        )

    def start(self) -> None:
        self.queue.start(self.dispatcher.handle_batch)

    async def stop(self) -> None:
        await self.queue.stop(timeout=self.settings.shutdown_timeout)

    async def drain(self) -> None:
        """Process all pending work now (for the CLI and tests)"""
        await self.queue.drain(self.dispatcher.handle_batch)


@asynccontextmanager
async def mavenhost_connections(settings: Settings) -> AsyncGenerator[MavenServices, None]:
    """
    Open the connections used by mavenhost and yield the services built on them.
    Use this once:
        - For running the server: in the FastAPI lifespan
        - For CLI commands: within the CLI command
    """
    async with AsyncExitStack() as stack:
        store = await _open_store(settings, stack)
        memory = await _open_memory(settings, stack)
        http = await stack.enter_async_context(httpx.AsyncClient(timeout=30))
        purger = CachePurger(
            http,
            zone=settings.cloudflare_zone,
            token=settings.cloudflare_token,
            origin=settings.origin,
            batch_size=settings.purge_batch_size,
            api_url=settings.purge_api_url,
        )
        if not purge_enabled(settings):
            logger.warning("Cloudflare zone or token not set, CDN purging is disabled")
        yield MavenServices(settings, store, memory, purger)


async def _open_store(settings: Settings, stack: AsyncExitStack) -> ContentStore:
    if not s3_enabled(settings):
        logger.warning("S3 is not configured, storing artifacts in memory")
        return MemoryContentStore()

    ## It seems aioboto3 uses some of the sync boto3 types, so we need to hack around typing here.
    session = get_session()
    client = session.create_client(
        service_name="s3",
        endpoint_url=settings.s3_host,
        region_name=settings.s3_region,
        aws_access_key_id=settings.s3_access_key,
        aws_secret_access_key=settings.s3_secret_key,
        config=AioConfig(signature_version="s3v4"),
    )
    s3: S3Client = await stack.enter_async_context(client)
    store = S3ContentStore(s3, settings.s3_bucket)
    await store.ensure_bucket()
    logger.info(f"Connected to S3 at {settings.s3_host}, bucket {settings.s3_bucket}")
    return store


async def _open_memory(settings: Settings, stack: AsyncExitStack) -> IndexMemory:
    if not settings.elastic_host:
        logger.warning("Elasticsearch is not configured, keeping index markers in memory")
        return MemoryIndexMemory()

    logger.debug(
        f"Connecting with elasticsearch at {settings.elastic_host}, password? {'yes' if settings.elastic_password else 'no'} "
    )
    if settings.elastic_password:
        elastic = AsyncElasticsearch(
            settings.elastic_host,
            basic_auth=("elastic", settings.elastic_password),
            verify_certs=bool(settings.elastic_verify_ssl),
        )
    else:
        elastic = AsyncElasticsearch(settings.elastic_host)
    stack.push_async_callback(elastic.close)

    if not await elastic.ping():
        raise ConnectionError(f"Cannot connect to elasticsearch server {settings.elastic_host}")
    memory = ElasticIndexMemory(elastic, settings.marker_index)
    await memory.ensure_index()
    return memory
