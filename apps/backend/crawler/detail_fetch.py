"""
Detail page enrichment for harvested item stubs.
"""
import logging
from typing import List

from core.errors import RenderingError
from crawler.listing import ItemStub
from crawler.plugins.base import SiteProfile

logger = logging.getLogger(__name__)

OUTER_HTML_EXPRESSION = "nodes => nodes.map(node => node.outerHTML)"


class DetailFetcher:
    """
    Visits each stub's detail link on the shared surface, one at a time.

    A failing detail page leaves that stub's detail_html as None and the
    loop moves on. Nothing is retried.
    """

    def __init__(self, profile: SiteProfile):
        self.profile = profile

    async def fetch_one(self, surface, stub: ItemStub) -> str:
        await surface.navigate(stub.detail_link)
        await surface.wait_for_settled_url(stub.detail_link)
        regions = await surface.query_all(self.profile.detail_selector, OUTER_HTML_EXPRESSION)
        return "\n".join(regions)

    async def enrich(self, surface, stubs: List[ItemStub]) -> int:
        """Fill detail_html in place. Returns the number of failed items."""
        failures = 0
        for position, stub in enumerate(stubs, start=1):
            try:
                logger.debug(f"[detail] ({position}/{len(stubs)}) {stub.id} -> {stub.detail_link}")
                stub.detail_html = await self.fetch_one(surface, stub)
            except RenderingError as e:
                failures += 1
                logger.warning(f"[detail] Failed to fetch detail for {stub.id}: {e}")
                continue

        logger.info(f"[detail] Enriched {len(stubs) - failures}/{len(stubs)} items")
        return failures
