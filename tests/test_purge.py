import json

import httpx
import pytest

from mavenhost.purge import CachePurger, batched
from tests.conftest import ORIGIN, PURGE_API, PURGE_ENDPOINT
from tests.tools import purged_urls


def make_purger(client: httpx.AsyncClient, **kargs) -> CachePurger:
    options = dict(zone="testzone", token="testtoken", origin=ORIGIN, api_url=PURGE_API)
    options.update(kargs)
    return CachePurger(client, **options)


def paths(n):
    return [f"repository/lib/file-{i}.jar" for i in range(n)]


def test_batched():
    assert list(batched([], 30)) == []
    assert [len(b) for b in batched(paths(30), 30)] == [30]
    assert [len(b) for b in batched(paths(31), 30)] == [30, 1]
    assert [len(b) for b in batched(paths(60), 30)] == [30, 30]


@pytest.mark.anyio
@pytest.mark.parametrize("n,expected_requests", [(0, 0), (1, 1), (30, 1), (31, 2), (60, 2), (61, 3), (95, 4)])
async def test_purge_batch_count(httpx_mock, n, expected_requests):
    for _ in range(expected_requests):
        httpx_mock.add_response(url=PURGE_ENDPOINT, method="POST", json={"success": True})
    async with httpx.AsyncClient() as client:
        await make_purger(client).purge(paths(n))

    requests = httpx_mock.get_requests()
    assert len(requests) == expected_requests
    assert all(len(json.loads(r.content)["files"]) <= 30 for r in requests)
    # every path appears in exactly one batch, in order
    assert purged_urls(httpx_mock) == [f"{ORIGIN}/{p}" for p in paths(n)]


@pytest.mark.anyio
async def test_purge_request_format(httpx_mock):
    httpx_mock.add_response(url=PURGE_ENDPOINT, method="POST", json={"success": True})
    async with httpx.AsyncClient() as client:
        await make_purger(client, origin=ORIGIN + "/").purge(["repository/", "/repository/lib/"])

    request = httpx_mock.get_request()
    assert request is not None
    assert request.headers["Authorization"] == "Bearer testtoken"
    assert json.loads(request.content) == {"files": [f"{ORIGIN}/repository/", f"{ORIGIN}/repository/lib/"]}


@pytest.mark.anyio
async def test_failed_batch_does_not_block_others(httpx_mock):
    httpx_mock.add_response(url=PURGE_ENDPOINT, method="POST", status_code=500, json={"success": False})
    httpx_mock.add_exception(httpx.ConnectError("purge API unreachable"), url=PURGE_ENDPOINT)
    httpx_mock.add_response(url=PURGE_ENDPOINT, method="POST", json={"success": True})
    async with httpx.AsyncClient() as client:
        await make_purger(client).purge(paths(61))

    assert len(httpx_mock.get_requests()) == 3


@pytest.mark.anyio
async def test_purge_disabled_without_credentials(httpx_mock):
    async with httpx.AsyncClient() as client:
        purger = make_purger(client, zone=None)
        assert not purger.enabled
        await purger.purge(paths(5))
    assert httpx_mock.get_requests() == []
