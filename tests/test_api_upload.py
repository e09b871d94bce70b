import asyncio

import pytest

from tests.conftest import ORIGIN
from tests.tools import build_headers, check, links, purged_urls

CI = build_headers("ci", "secret")


async def listing(services, directory) -> list[str]:
    return links((await services.store.get(directory))["body"].decode("utf-8"))


@pytest.mark.anyio
async def test_upload_into_empty_repository(client, services, purge_api):
    res = await client.put("/repository/lib/1.0/lib-1.0.jar", content=b"jar bytes", headers=CI)
    check(res, 200)
    assert res.json() == {"message": "Upload successful.", "path": "repository/lib/1.0/lib-1.0.jar"}

    # stored before the response, indexed in the background
    stored = await services.store.get("repository/lib/1.0/lib-1.0.jar")
    assert stored["body"] == b"jar bytes"
    assert stored["content_type"] == "application/java-archive"
    assert services.queue.pending() == 1

    await services.drain()

    assert await listing(services, "repository/lib/1.0/") == ["../", "lib-1.0.jar"]
    assert await listing(services, "repository/lib/") == ["../", "1.0/"]
    assert await listing(services, "repository/") == ["../", "lib/"]
    assert {
        f"{ORIGIN}/repository/lib/1.0/lib-1.0.jar",
        f"{ORIGIN}/repository/lib/1.0/",
        f"{ORIGIN}/repository/lib/",
        f"{ORIGIN}/repository/",
    } <= set(purged_urls(purge_api))


@pytest.mark.anyio
async def test_content_types(client, services):
    for path, content_type in [
        ("repository/lib/1.0/lib-1.0.pom", "application/xml"),
        ("repository/lib/1.0/lib-1.0.module", "application/json"),
        ("repository/lib/1.0/lib-1.0.jar.sha1", "application/octet-stream"),
    ]:
        check(await client.put(f"/{path}", content=b"x", headers=CI), 200)
        assert (await services.store.get(path))["content_type"] == content_type


@pytest.mark.anyio
async def test_unauthorized_upload(client, services):
    path = "/repository/releases/org/example/1.0/example-1.0.jar"
    check(await client.put(path, content=b"jar"), 401)
    check(await client.put(path, content=b"jar", headers=build_headers("ci", "wrong")), 401)
    check(await client.put(path, content=b"jar", headers=build_headers("nobody", "secret")), 401)
    # scoped credentials only work for their own repository
    check(await client.put("/repository/lib/1.0/lib.jar", content=b"jar", headers=build_headers("releaser", "hunter2")), 401)
    # repository not in the allow list
    check(await client.put("/repository/private/1.0/x.jar", content=b"jar", headers=CI), 401)

    assert services.store.objects == {}
    assert services.queue.pending() == 0

    check(await client.put(path, content=b"jar", headers=build_headers("releaser", "hunter2")), 200)
    assert services.queue.pending() == 1


@pytest.mark.anyio
async def test_upload_outside_repository(client, services):
    res = await client.put("/other/lib/1.0/lib.jar", content=b"jar", headers=CI)
    check(res, 401)
    assert res.json()["message"] == "Trying to push outside of repository."
    # a path ending in a slash would overwrite a listing page
    check(await client.put("/repository/lib/1.0/", content=b"<html/>", headers=CI), 401)
    assert services.store.objects == {}


@pytest.mark.anyio
async def test_upload_empty_body(client, services):
    res = await client.put("/repository/lib/1.0/lib-1.0.jar", headers=CI)
    check(res, 400)
    assert res.json()["message"] == "No body provided."
    assert services.queue.pending() == 0


@pytest.mark.anyio
async def test_upload_storage_failure(client, services):
    services.store.fail_put.add("repository/lib/1.0/lib-1.0.jar")
    check(await client.put("/repository/lib/1.0/lib-1.0.jar", content=b"jar", headers=CI), 500)
    assert services.queue.pending() == 0


@pytest.mark.anyio
async def test_only_put_is_allowed(client):
    check(await client.get("/repository/lib/1.0/lib-1.0.jar"), 405)
    check(await client.post("/repository/lib/1.0/lib-1.0.jar", content=b"jar", headers=CI), 405)


@pytest.mark.anyio
async def test_upload_with_url_prefix(client, services):
    services.intake.prefix = "maven"
    check(await client.put("/repository/lib/1.0/lib.jar", content=b"jar", headers=CI), 401)
    res = await client.put("/maven/repository/lib/1.0/lib.jar", content=b"jar", headers=CI)
    check(res, 200)
    assert res.json()["path"] == "repository/lib/1.0/lib.jar"


@pytest.mark.anyio
async def test_upload_with_spaces(client, services):
    check(await client.put("/repository/lib/my+dir/a+b.jar", content=b"jar", headers=CI), 200)
    assert "repository/lib/my dir/a b.jar" in services.store.objects
    await services.drain()
    assert await listing(services, "repository/lib/my dir/") == ["../", "a+b.jar"]
    assert await listing(services, "repository/lib/") == ["../", "my+dir/"]


@pytest.mark.anyio
async def test_concurrent_uploads_into_same_directory(client, services):
    responses = await asyncio.gather(
        client.put("/repository/lib/1.0/lib-1.0.jar", content=b"jar", headers=CI),
        client.put("/repository/lib/1.0/lib-1.0.pom", content=b"<project/>", headers=CI),
    )
    for res in responses:
        check(res, 200)
    await services.drain()
    assert await listing(services, "repository/lib/1.0/") == ["../", "lib-1.0.jar", "lib-1.0.pom"]


@pytest.mark.anyio
async def test_later_uploads_keep_listings_current(client, services):
    check(await client.put("/repository/lib/1.0/lib-1.0.jar", content=b"jar", headers=CI), 200)
    await services.drain()
    check(await client.put("/repository/lib/2.0/lib-2.0.jar", content=b"jar", headers=CI), 200)
    check(await client.put("/repository/lib/1.0/lib-1.0.pom", content=b"<project/>", headers=CI), 200)
    await services.drain()

    assert await listing(services, "repository/lib/") == ["../", "1.0/", "2.0/"]
    assert await listing(services, "repository/lib/1.0/") == ["../", "lib-1.0.jar", "lib-1.0.pom"]
    assert await listing(services, "repository/lib/2.0/") == ["../", "lib-2.0.jar"]


@pytest.mark.anyio
async def test_get_config(client, services):
    res = await client.get("/config")
    check(res, 200)
    config = res.json()
    assert config["allowed_repos"] == ["lib", "releases", "snapshots"]
    assert config["purge_enabled"] is True
    assert config["s3_enabled"] is False
    assert config["pending_work"] == 0
