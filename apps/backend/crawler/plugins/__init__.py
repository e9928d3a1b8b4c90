"""
Site profile system.

Profiles carry the site-specific parts of a listing crawl:
- Start URL for a search
- Pagination, item and detail selectors
- Item id derivation and the extraction output schema
"""

from .base import SiteProfile
from .registry import ProfileRegistry, get_profile_registry

__all__ = [
    'SiteProfile',
    'ProfileRegistry',
    'get_profile_registry'
]
