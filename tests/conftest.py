import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from mavenhost import api
from mavenhost.auth import hash_password
from mavenhost.config import Settings
from mavenhost.connections import MavenServices
from mavenhost.models import AuthorizedUser
from mavenhost.purge import CachePurger
from mavenhost.systemdata.markers import MemoryIndexMemory
from tests.tools import FailingStore

ORIGIN = "https://maven.test"
PURGE_API = "https://purge.test"
PURGE_ENDPOINT = f"{PURGE_API}/zones/testzone/purge_cache"


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        origin=ORIGIN,
        allowed_repos=["lib", "releases", "snapshots"],
        authorized_users=[
            AuthorizedUser(username="ci", password=hash_password("secret"), scope="*"),
            AuthorizedUser(username="releaser", password=hash_password("hunter2", "pepper"), salt="pepper", scope="releases"),
        ],
        cloudflare_zone="testzone",
        cloudflare_token="testtoken",
        purge_api_url=PURGE_API,
        queue_retry_delay=0,
    )


@pytest.fixture()
def purge_api(httpx_mock):
    """Mocks the CDN purge API, accepting any number of requests"""
    httpx_mock.add_response(url=PURGE_ENDPOINT, method="POST", json={"success": True}, is_optional=True, is_reusable=True)
    return httpx_mock


@pytest.fixture()
async def services(settings, purge_api):
    async with httpx.AsyncClient() as http:
        purger = CachePurger(
            http,
            zone=settings.cloudflare_zone,
            token=settings.cloudflare_token,
            origin=settings.origin,
            batch_size=settings.purge_batch_size,
            api_url=settings.purge_api_url,
        )
        yield MavenServices(settings, FailingStore(), MemoryIndexMemory(), purger)


@pytest.fixture()
async def client(services):
    api.app.state.services = services
    async with AsyncClient(transport=ASGITransport(app=api.app), base_url="http://test") as client:
        yield client
