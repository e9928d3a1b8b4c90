"""
Environment-driven settings for the scraper service.
"""
import os
import logging
from functools import lru_cache
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"[config] {name}={raw!r} is not an integer, using {default}")
        return default


def _get_optional_int_env(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"[config] {name}={raw!r} is not an integer, ignoring")
        return None


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"[config] {name}={raw!r} is not a number, using {default}")
        return default


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class ScraperSettings:
    """Settings for collaborator wiring; none of them change pipeline semantics"""

    def __init__(self):
        # Extraction service (any OpenAI-compatible chat completions endpoint)
        self.extraction_api_key = os.getenv("EXTRACTION_API_KEY") or os.getenv("DEEPSEEK_API_KEY")
        self.extraction_base_url = os.getenv("EXTRACTION_BASE_URL", "https://api.deepseek.com/v1").rstrip("/")
        self.extraction_model = os.getenv("EXTRACTION_MODEL", "deepseek-chat")
        self.extraction_timeout_seconds = _get_float_env("EXTRACTION_TIMEOUT_SECONDS", 120.0)

        # HTTP bind
        self.host = os.getenv("SCRAPER_HOST", "0.0.0.0")
        self.port = _get_int_env("SCRAPER_PORT", 3000)
        self.env = os.getenv("SCRAPER_ENV", "production").lower()

        # Crawl
        self.site = os.getenv("SCRAPER_SITE", "ebay").lower()
        self.items_per_batch = max(1, _get_int_env("SCRAPER_ITEMS_PER_BATCH", 25))
        self.max_batch_chars = _get_optional_int_env("SCRAPER_MAX_BATCH_CHARS")
        self.navigation_timeout_ms = _get_int_env("SCRAPER_NAVIGATION_TIMEOUT_MS", 30000)

        # Browser
        self.browser = os.getenv("SCRAPER_BROWSER", "firefox").lower()
        self.headless = _get_bool_env("SCRAPER_HEADLESS", True)
        self.user_agent = os.getenv("SCRAPER_USER_AGENT", DEFAULT_USER_AGENT)

        # Ingress rate limiting
        self.rate_limit_max_requests = max(1, _get_int_env("RATE_LIMIT_MAX_REQUESTS", 5))
        self.rate_limit_window_ms = max(1, _get_int_env("RATE_LIMIT_WINDOW_MS", 60000))

        if not self.extraction_api_key:
            logger.warning("[config] EXTRACTION_API_KEY not set - every extraction batch will fail")

    @property
    def is_dev(self) -> bool:
        return self.env == "dev"


@lru_cache(maxsize=1)
def get_settings() -> ScraperSettings:
    """Return cached settings (call load_dotenv() before the first call)."""
    return ScraperSettings()
