"""
Error types shared by the crawler and the extraction client.

Collaborator failures are raised as one of these and caught at the
narrowest boundary (per listing page, per detail item, per batch).
"""
from typing import Optional


class ScraperError(Exception):
    """Base class for scraper failures"""


class RenderingError(ScraperError):
    """A DOM query against the rendering surface failed"""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class NavigationError(RenderingError):
    """A page could not be reached or did not settle in time"""


class ExtractionServiceError(ScraperError):
    """Transport, auth or status failure talking to the extraction service"""


class MalformedExtractionResponse(ExtractionServiceError):
    """The extraction service answered, but not with parseable JSON"""

