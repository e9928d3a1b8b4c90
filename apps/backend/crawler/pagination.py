"""
Pagination link discovery and canonicalization.
"""
import logging
from typing import List, Optional
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

from crawler.plugins.base import SiteProfile

logger = logging.getLogger(__name__)

HREF_EXPRESSION = "anchors => anchors.map(a => a.href)"


def canonicalize_page_url(url: str, page_param: Optional[str]) -> str:
    """
    Canonical form of a listing URL.

    Query parameters are ordered by name with the page parameter moved to
    the end, and the fragment is dropped, so logically identical pages
    compare equal as strings. Canonicalizing twice changes nothing.
    """
    parts = urlsplit(url)
    params = parse_qsl(parts.query, keep_blank_values=True)

    page_values = [value for name, value in params if name == page_param]
    others = sorted((pair for pair in params if pair[0] != page_param), key=lambda pair: pair[0])
    if page_values:
        others.append((page_param, page_values[0]))

    return urlunsplit((
        parts.scheme.lower(),
        parts.netloc.lower(),
        parts.path,
        urlencode(others),
        "",
    ))


def same_host(link: str, origin_url: str) -> bool:
    return urlsplit(link).hostname == urlsplit(origin_url).hostname


def filter_pagination_links(links: List[str], origin_url: str, page_param: Optional[str]) -> List[str]:
    """Resolve, drop off-site links and canonicalize, keeping discovery order."""
    resolved = []
    seen = set()
    for link in links:
        if not link:
            continue
        try:
            absolute = urljoin(origin_url, link)
            if urlsplit(absolute).scheme not in ("http", "https"):
                continue
            if not same_host(absolute, origin_url):
                logger.debug(f"[pagination] Skipping off-site link {absolute}")
                continue
            canonical = canonicalize_page_url(absolute, page_param)
        except ValueError as e:
            logger.debug(f"[pagination] Skipping unparseable link {link!r}: {e}")
            continue
        if canonical not in seen:
            seen.add(canonical)
            resolved.append(canonical)
    return resolved


class PaginationResolver:
    """Finds same-host pagination links on a rendered listing page"""

    def __init__(self, profile: SiteProfile):
        self.profile = profile

    def canonicalize(self, url: str) -> str:
        return canonicalize_page_url(url, self.profile.page_param)

    async def resolve(self, surface, origin_url: str) -> List[str]:
        links = await surface.query_all(self.profile.pagination_selector, HREF_EXPRESSION)
        pages = filter_pagination_links(links, origin_url, self.profile.page_param)
        logger.info(f"[pagination] {len(pages)} pagination links on {origin_url}")
        return pages
