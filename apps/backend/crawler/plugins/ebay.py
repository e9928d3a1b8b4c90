"""
eBay search results profile.
"""
from typing import Dict
from urllib.parse import urlencode

from .base import SiteProfile

SEARCH_URL = "https://www.ebay.com/sch/i.html"


class EbayProfile(SiteProfile):
    """eBay keyword search: 240 results per page, detail pages under /itm/"""

    pagination_selector = 'nav[role="navigation"] ol a'
    item_selector = "#srp-river-results li"
    detail_selector = "div[data-testid=d-tabs] div[data-testid=d-vi-evo-region]"
    page_param = "_pgn"
    item_id_prefix = "/itm/"
    records_key = "products"
    record_description = "product"

    def __init__(self):
        super().__init__(name="ebay")

    def build_start_url(self, search: str, from_page: int) -> str:
        params = [
            ("_from", "R40"),
            ("_nkw", search),
            ("_sacat", "0"),
            ("rt", "nc"),
            ("_ipg", "240"),
            (self.page_param, str(from_page)),
        ]
        return f"{SEARCH_URL}?{urlencode(params)}"

    def record_properties(self) -> Dict[str, Dict]:
        return {
            "title": {"type": "string", "description": "The product title."},
            "price": {"type": "string", "description": "The product's price."},
            "description": {"type": "string", "description": "The product's description."},
        }
