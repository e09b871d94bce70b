"""
Invalidate CDN (Cloudflare) cached copies of changed paths.

The purge API accepts a limited number of URLs per request, so paths are sent in batches.
Batches are independent: a failed batch is logged and not retried, the others are still sent.
"""

import logging
import math
from typing import Iterable, Iterator

import httpx

logger = logging.getLogger("mavenhost.purge")

FILES_PER_REQUEST = 30


def batched(items: list[str], size: int) -> Iterator[list[str]]:
    """Split items into ceil(len / size) consecutive batches, the last one possibly partial"""
    for i in range(math.ceil(len(items) / size)):
        yield items[i * size : (i + 1) * size]


class CachePurger:
    def __init__(
        self,
        client: httpx.AsyncClient,
        zone: str | None,
        token: str | None,
        origin: str,
        batch_size: int = FILES_PER_REQUEST,
        api_url: str = "https://api.cloudflare.com/client/v4",
    ):
        self.client = client
        self.zone = zone
        self.token = token
        self.origin = origin.rstrip("/")
        self.batch_size = batch_size
        self.api_url = api_url.rstrip("/")

    @property
    def enabled(self) -> bool:
        return bool(self.zone and self.token)

    @property
    def endpoint(self) -> str:
        return f"{self.api_url}/zones/{self.zone}/purge_cache"

    def url_for(self, path: str) -> str:
        return f"{self.origin}/{path.lstrip('/')}"

    async def purge(self, paths: Iterable[str]) -> None:
        urls = [self.url_for(path) for path in paths]
        if not self.enabled:
            logger.debug(f"Purging disabled, not purging {len(urls)} urls")
            return
        for batch in batched(urls, self.batch_size):
            await self._purge_batch(batch)

    async def _purge_batch(self, urls: list[str]) -> bool:
        headers = {"Authorization": f"Bearer {self.token}"}
        try:
            r = await self.client.post(self.endpoint, json={"files": urls}, headers=headers)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Purge of {len(urls)} urls failed with status {e.response.status_code}: {e.response.text}")
            return False
        except httpx.HTTPError as e:
            logger.warning(f"Purge of {len(urls)} urls failed: {e!r}")
            return False
        logger.debug(f"Purged {len(urls)} urls")
        return True
