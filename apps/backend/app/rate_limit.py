"""
IP-based fixed-window rate limiting for the scrape endpoint.
"""
import math

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import get_settings


def rate_limit_string(max_requests: int, window_ms: int) -> str:
    """limits notation for max_requests per window, e.g. '5/60 seconds'."""
    window_seconds = max(1, math.ceil(window_ms / 1000))
    return f"{max_requests}/{window_seconds} seconds"


def scrape_rate_limit() -> str:
    # Resolved per request so settings are read after load_dotenv()
    settings = get_settings()
    return rate_limit_string(settings.rate_limit_max_requests, settings.rate_limit_window_ms)


# The window opens on a client's first hit and its counter is dropped
# entirely when the window ends
limiter = Limiter(key_func=get_remote_address, strategy="fixed-window")
