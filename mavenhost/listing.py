"""
Generate the browsable directory listing pages.

A listing page is stored at the directory path itself and enumerates the directory's immediate
children: subdirectories first, then files. It is regenerated in full every time.
"""

import logging
from dataclasses import dataclass, field

from jinja2 import Environment, PackageLoader, select_autoescape

from mavenhost.objectstorage import ContentStore
from mavenhost.paths import LISTING_CONTENT_TYPE, storage_key, url_path

logger = logging.getLogger("mavenhost.listing")

templates = Environment(loader=PackageLoader("mavenhost", "templates"), autoescape=select_autoescape())


@dataclass
class ListingPage:
    directory: str
    html: str
    changed_paths: list[str] = field(default_factory=list)


class IndexGenerator:
    def __init__(self, store: ContentStore, title: str = "Maven"):
        self.store = store
        self.title = title

    async def list_children(self, directory: str) -> list[str]:
        """Names (in URL form) of the subdirectories and files directly in this directory"""
        prefix = storage_key(directory)
        listing = await self.store.list(prefix, delimiter="/")
        subdirectories = sorted(url_path(p[len(prefix) :]) for p in listing["common_prefixes"])
        # the listing page of the directory itself is stored at the prefix
        files = sorted(url_path(o["key"][len(prefix) :]) for o in listing["objects"] if o["key"] != prefix)
        return subdirectories + files

    def render(self, directory: str, entries: list[str]) -> str:
        template = templates.get_template("listing.html")
        return template.render(title=self.title, directory=directory, entries=entries)

    async def generate(self, directory: str) -> ListingPage:
        entries = await self.list_children(directory)
        html = self.render(directory, entries)
        await self.store.put(storage_key(directory), html.encode("utf-8"), LISTING_CONTENT_TYPE)
        logger.debug(f"Generated listing for {directory} with {len(entries)} entries")
        return ListingPage(directory=directory, html=html, changed_paths=[directory])
