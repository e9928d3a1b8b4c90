"""
Base site profile for listing crawls.
"""
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


class SiteProfile(ABC):
    """
    Site-specific knobs for a paginated listing site.

    A profile tells the crawler:
    1. Where a crawl starts for a given query
    2. Which elements are pagination links, item containers and detail regions
    3. How to derive an item id from its detail link
    4. Which record schema the extraction service should fill
    """

    # CSS selectors
    pagination_selector: str = ""
    item_selector: str = ""
    detail_selector: str = ""

    # Query parameter carrying the page number (None for path-based paging)
    page_param: Optional[str] = None

    # Path prefix in front of the item id in detail links
    item_id_prefix: str = "/"

    # Top-level array key in the extraction output
    records_key: str = "records"
    record_description: str = "record"

    def __init__(self, name: str):
        self.name = name
        self.logger = logging.getLogger(f"{__name__}.{name}")

    @abstractmethod
    def build_start_url(self, search: str, from_page: int) -> str:
        """First listing URL for a crawl."""
        pass

    @abstractmethod
    def record_properties(self) -> Dict[str, Dict]:
        """JSON schema properties of one extracted record."""
        pass

    def item_id(self, detail_link: str) -> str:
        """Derive a stable id from the detail link path."""
        path = urlparse(detail_link).path
        if path.startswith(self.item_id_prefix):
            path = path[len(self.item_id_prefix):]
        segments = [segment for segment in path.split("/") if segment]
        return segments[-1] if segments else detail_link

    def output_schema(self) -> Dict:
        """Schema handed to the extraction service."""
        return {
            "name": f"{self.records_key}_schema",
            "schema": {
                "type": "object",
                "properties": {
                    self.records_key: {
                        "type": "array",
                        "description": f"A list of {self.record_description} objects.",
                        "items": {
                            "type": "object",
                            "properties": self.record_properties(),
                        },
                    },
                },
            },
        }

    def __repr__(self):
        return f"<{self.__class__.__name__}(name={self.name})>"
