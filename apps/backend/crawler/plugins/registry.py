"""
Registry for site profiles.
"""
import logging
from typing import Dict, List, Optional

from .base import SiteProfile

logger = logging.getLogger(__name__)

# Global registry instance
_registry: Optional['ProfileRegistry'] = None


class ProfileRegistry:
    """Registry for site profiles, keyed by name"""

    def __init__(self):
        self._profiles: Dict[str, SiteProfile] = {}

    def register(self, profile: SiteProfile):
        """Register a profile"""
        if profile.name in self._profiles:
            logger.warning(f"Profile {profile.name} already registered, replacing")
        self._profiles[profile.name] = profile
        logger.debug(f"Registered site profile: {profile.name}")

    def get_profile(self, name: str) -> SiteProfile:
        """Get profile by name; raises KeyError for unknown names"""
        try:
            return self._profiles[name.lower()]
        except KeyError:
            raise KeyError(f"Unknown site profile {name!r} (known: {', '.join(self.names())})") from None

    def names(self) -> List[str]:
        return sorted(self._profiles)


def get_profile_registry() -> ProfileRegistry:
    """Get or create the global profile registry"""
    global _registry

    if _registry is None:
        from .books import BooksToScrapeProfile
        from .ebay import EbayProfile

        _registry = ProfileRegistry()
        _registry.register(EbayProfile())
        _registry.register(BooksToScrapeProfile())

    return _registry
