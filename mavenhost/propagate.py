import logging

from mavenhost.listing import IndexGenerator
from mavenhost.paths import parent_directory
from mavenhost.systemdata.markers import IndexMemory

logger = logging.getLogger("mavenhost.propagate")


class AncestorPropagator:
    """
    Regenerate the listing of a directory, and of every ancestor whose listing may not yet
    link to the directory below it.

    The directory itself is always regenerated. Walking up, each unmarked directory causes its
    parent to be regenerated; the walk stops at the first marked directory or at the repository root.
    Markers are written afterwards, top-most first, so a directory is never marked before its
    own listing and those of its ancestors have been written.
    """

    def __init__(self, generator: IndexGenerator, memory: IndexMemory, root: str):
        self.generator = generator
        self.memory = memory
        self.root = root

    async def propagate(self, directory: str) -> list[str]:
        """Returns the paths of all regenerated listing pages"""
        page = await self.generator.generate(directory)
        changed = list(page.changed_paths)

        unmarked: list[str] = []
        current: str | None = directory
        while current is not None and not await self.memory.is_indexed(current):
            unmarked.append(current)
            current = parent_directory(current, self.root)
            if current is not None:
                page = await self.generator.generate(current)
                changed += page.changed_paths

        for marked in reversed(unmarked):
            await self.memory.mark_indexed(marked)
        if unmarked:
            logger.info(f"Indexed {directory}, newly marked: {', '.join(unmarked)}")
        return changed
