"""
Run one crawl directly, without the HTTP server.

Usage:
    python scripts/run_scrape.py --search nike --from-page 1 --to-page 2
"""

import os
import sys
import json
import asyncio
import logging
import argparse

# Add backend to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

load_dotenv(os.path.join(os.path.dirname(__file__), '..', '.env'))

from app.config import get_settings
from core.ai_extractor import ExtractionClient
from crawler.browser_crawler import BrowserSession
from crawler.plugins import get_profile_registry
from pipeline.orchestrator import CrawlPipeline, CrawlQuery

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def run(search: str, from_page: int, to_page: int, site: str = None) -> list:
    settings = get_settings()
    profile = get_profile_registry().get_profile(site or settings.site)
    query = CrawlQuery.from_params(search, from_page, to_page)
    if query is None:
        logger.warning("Empty search, nothing to crawl")
        return []

    surface = await BrowserSession.launch(
        browser_name=settings.browser,
        headless=settings.headless,
        user_agent=settings.user_agent,
        navigation_timeout_ms=settings.navigation_timeout_ms,
    )
    client = ExtractionClient(
        api_key=settings.extraction_api_key,
        base_url=settings.extraction_base_url,
        model=settings.extraction_model,
        timeout=settings.extraction_timeout_seconds,
    )
    try:
        pipeline = CrawlPipeline(
            surface,
            client,
            profile,
            items_per_batch=settings.items_per_batch,
            max_batch_chars=settings.max_batch_chars,
            extraction_timeout=settings.extraction_timeout_seconds,
        )
        return await pipeline.run(query)
    finally:
        await client.aclose()
        await surface.close()


def main():
    parser = argparse.ArgumentParser(description="Crawl a listing site and print extracted records as JSON")
    parser.add_argument("--search", required=True, help="Search term")
    parser.add_argument("--from-page", type=int, default=1, help="Listing page to start from")
    parser.add_argument("--to-page", type=int, default=None, help="Maximum number of listing pages to visit")
    parser.add_argument("--site", default=None, help="Site profile (default: SCRAPER_SITE or ebay)")
    args = parser.parse_args()

    records = asyncio.run(run(args.search, args.from_page, args.to_page, args.site))
    print(json.dumps(records, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
