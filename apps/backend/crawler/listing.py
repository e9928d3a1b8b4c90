"""
Listing page harvesting: one stub per item container.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urljoin

from crawler.plugins.base import SiteProfile

logger = logging.getLogger(__name__)

# First anchor of each container plus the container's own markup
ITEM_EXPRESSION = """nodes => nodes.map(node => {
  const anchor = node.querySelector("a");
  return {
    detailLink: anchor ? anchor.href : null,
    html: node.outerHTML,
  };
})"""


@dataclass
class ItemStub:
    """An item seen on a listing page, waiting for its detail HTML."""
    id: str
    summary_html: str
    detail_link: str
    detail_html: Optional[str] = None


class ListingHarvester:
    """Extracts item stubs from a rendered listing page"""

    def __init__(self, profile: SiteProfile):
        self.profile = profile

    async def harvest(self, surface, page_url: str) -> List[ItemStub]:
        nodes = await surface.query_all(self.profile.item_selector, ITEM_EXPRESSION)
        stubs = self.stubs_from_nodes(nodes, page_url)
        logger.info(f"[listing] {len(stubs)} items on {page_url}")
        return stubs

    def stubs_from_nodes(self, nodes: List[dict], page_url: str) -> List[ItemStub]:
        stubs = []
        for node in nodes:
            link = (node or {}).get("detailLink")
            if not link:
                # Ad slots and separators carry no detail link
                continue
            try:
                link = urljoin(page_url, link)
                item_id = self.profile.item_id(link)
            except ValueError as e:
                logger.debug(f"[listing] Skipping unparseable detail link {link!r}: {e}")
                continue
            stubs.append(ItemStub(
                id=item_id,
                summary_html=node.get("html") or "",
                detail_link=link,
            ))
        return stubs
