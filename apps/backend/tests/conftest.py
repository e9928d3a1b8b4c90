"""
Shared fakes for the rendering surface and the extraction service.
"""

from contextlib import asynccontextmanager
from typing import Callable, Dict, List, Optional

import pytest
from bs4 import BeautifulSoup

from core.errors import NavigationError
from crawler.plugins.ebay import EbayProfile


class FakeSurface:
    """
    In-memory rendering surface.

    pages maps a URL to {"pagination": [...], "items": [...], "detail": [...]};
    each key answers query_all for the matching profile selector.
    """

    def __init__(self, profile, pages: Optional[Dict[str, Dict]] = None, failing: Optional[set] = None):
        self.profile = profile
        self.pages = pages or {}
        self.failing = failing or set()
        self.current_url = None
        self.navigations: List[str] = []
        self.queries: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    @asynccontextmanager
    async def exclusive(self):
        yield self

    async def navigate(self, url: str):
        self.navigations.append(url)
        if url in self.failing:
            raise NavigationError(f"Timed out loading {url}", url=url)
        self.current_url = url

    async def wait_for_settled_url(self, url: str):
        pass

    async def query_all(self, selector: str, expression: str) -> list:
        self.queries.append(selector)
        page = self.pages.get(self.current_url, {})
        if selector == self.profile.pagination_selector:
            return list(page.get("pagination", []))
        if selector == self.profile.item_selector:
            return list(page.get("items", []))
        if selector == self.profile.detail_selector:
            return list(page.get("detail", []))
        return []


class FakeExtractionClient:
    """Extraction service stand-in; handler(document) decides each reply."""

    def __init__(self, handler: Callable[[str], object]):
        self.handler = handler
        self.documents: List[str] = []

    async def complete(self, schema, document, record_description="record"):
        self.documents.append(document)
        result = self.handler(document)
        if isinstance(result, BaseException):
            raise result
        return result


def item_ids_in(document: str) -> List[str]:
    soup = BeautifulSoup(document, "html.parser")
    return [node["data-item-id"] for node in soup.select("div.item[data-item-id]")]


def echo_products(document: str) -> dict:
    """One product per wrapped item, titled with the item id."""
    return {"products": [{"title": item_id, "price": "-", "description": "-"} for item_id in item_ids_in(document)]}


def listing_item(item_id: str, host: str = "https://www.ebay.com") -> dict:
    return {
        "detailLink": f"{host}/itm/{item_id}",
        "html": f'<li class="s-item"><a href="{host}/itm/{item_id}">Item {item_id}</a></li>',
    }


@pytest.fixture
def ebay_profile():
    return EbayProfile()


@pytest.fixture
def echo_client():
    return FakeExtractionClient(echo_products)
