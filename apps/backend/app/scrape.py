"""
Scrape endpoint: runs one crawl per request.
"""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request

from app.rate_limit import limiter, scrape_rate_limit
from pipeline.orchestrator import CrawlPipeline, CrawlQuery

logger = logging.getLogger(__name__)
router = APIRouter()


def get_pipeline(request: Request) -> CrawlPipeline:
    """Dependency returning the pipeline built at startup."""
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise HTTPException(status_code=503, detail="Crawler not ready")
    return pipeline


@router.get("/scrape")
@limiter.limit(scrape_rate_limit)
async def scrape(
    request: Request,
    search: Optional[str] = Query(None),
    from_page: Optional[str] = Query(None),
    to_page: Optional[str] = Query(None),
):
    """
    Crawl search results and return extracted records.

    A missing or blank search returns an empty list without crawling.
    """
    query = CrawlQuery.from_params(search, from_page, to_page)
    if query is None:
        logger.info("[scrape] Empty search, nothing to crawl")
        return []

    pipeline = get_pipeline(request)
    logger.info(f"[scrape] search={query.search!r} from_page={query.from_page} to_page={query.to_page}")
    return await pipeline.run(query)
