"""
books.toscrape.com catalogue profile.

The catalogue has no search; the query's search term only gates the request.
"""
from typing import Dict

from .base import SiteProfile

BASE_URL = "https://books.toscrape.com"


class BooksToScrapeProfile(SiteProfile):
    pagination_selector = "ul.pager a"
    item_selector = "article.product_pod"
    detail_selector = "article.product_page"
    page_param = None
    item_id_prefix = "/catalogue/"
    records_key = "books"
    record_description = "book"

    def __init__(self):
        super().__init__(name="books")

    def build_start_url(self, search: str, from_page: int) -> str:
        return f"{BASE_URL}/catalogue/page-{from_page}.html"

    def item_id(self, detail_link: str) -> str:
        # /catalogue/<slug>/index.html
        return super().item_id(detail_link.replace("/index.html", "/"))

    def record_properties(self) -> Dict[str, Dict]:
        return {
            "title": {"type": "string", "description": "The book title."},
            "price": {"type": "string", "description": "The book's price."},
            "rating": {"type": "integer", "description": "The book's rating."},
        }
