"""
Crawl-and-extract pipeline.

Coordinates one crawl:
1. Breadth-first listing traversal bounded by the page budget
2. Detail enrichment of every harvested item
3. Partitioning into batches
4. Concurrent extraction and merge
"""

import time
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, Field, model_validator

from core.errors import RenderingError
from crawler.detail_fetch import DetailFetcher
from crawler.frontier import Frontier
from crawler.listing import ItemStub, ListingHarvester
from crawler.pagination import PaginationResolver
from crawler.plugins.base import SiteProfile

from .batcher import partition
from .dispatcher import ExtractionDispatcher, merge_outcomes

logger = logging.getLogger(__name__)


def _parse_page(raw: Any, default: int) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


class CrawlQuery(BaseModel):
    """A scrape request. to_page caps the number of listing pages visited."""
    search: str = Field(..., min_length=1)
    from_page: int = Field(1, ge=1)
    to_page: int = Field(1, ge=1)

    @model_validator(mode="after")
    def _clamp_to_page(self):
        if self.to_page < self.from_page:
            self.to_page = self.from_page
        return self

    @classmethod
    def from_params(
        cls,
        search: Optional[str],
        from_page: Any = None,
        to_page: Any = None,
    ) -> Optional["CrawlQuery"]:
        """
        Build a query from raw query-string values.

        Returns None when search is missing or blank. Non-numeric or
        non-positive page values fall back to their defaults.
        """
        search = (search or "").strip()
        if not search:
            return None
        start = _parse_page(from_page, 1)
        end = _parse_page(to_page, start)
        return cls(search=search, from_page=start, to_page=end)


@dataclass
class CrawlReport:
    pages_visited: int = 0
    pages_failed: int = 0
    items: int = 0
    detail_failures: int = 0
    batches: int = 0
    failed_batches: int = 0
    records: int = 0
    duration_ms: int = 0


class CrawlPipeline:
    """
    Runs crawls against one rendering surface and one extraction client.

    The surface is held exclusively while listing and detail pages are
    fetched; extraction calls run after it is released.
    """

    def __init__(
        self,
        surface,
        client,
        profile: SiteProfile,
        items_per_batch: int = 25,
        max_batch_chars: Optional[int] = None,
        extraction_timeout: Optional[float] = None,
    ):
        self.surface = surface
        self.profile = profile
        self.items_per_batch = items_per_batch
        self.max_batch_chars = max_batch_chars
        self.pagination = PaginationResolver(profile)
        self.harvester = ListingHarvester(profile)
        self.detail_fetcher = DetailFetcher(profile)
        self.dispatcher = ExtractionDispatcher(
            client,
            schema=profile.output_schema(),
            records_key=profile.records_key,
            record_description=profile.record_description,
            timeout=extraction_timeout,
        )

    async def harvest_listings(self, query: CrawlQuery, report: CrawlReport) -> List[ItemStub]:
        frontier = Frontier(max_pages=query.to_page)
        start_url = self.pagination.canonicalize(
            self.profile.build_start_url(query.search, query.from_page)
        )
        frontier.enqueue(start_url)

        stubs: List[ItemStub] = []
        while True:
            current_url = frontier.next_url()
            if current_url is None:
                break

            logger.info(f"[crawl] Listing page {frontier.visited_count}/{query.to_page}: {current_url}")
            try:
                await self.surface.navigate(current_url)
                await self.surface.wait_for_settled_url(current_url)

                for link in await self.pagination.resolve(self.surface, current_url):
                    frontier.enqueue(link)

                stubs.extend(await self.harvester.harvest(self.surface, current_url))
            except RenderingError as e:
                report.pages_failed += 1
                logger.error(f"[crawl] Error visiting listing {current_url}: {e}")
                continue

        report.pages_visited = frontier.visited_count
        return stubs

    async def crawl(self, query: CrawlQuery) -> Tuple[List[Any], CrawlReport]:
        """Crawl, enrich, batch and extract; returns the records and this crawl's report."""
        report = CrawlReport()
        started = time.time()

        async with self.surface.exclusive():
            stubs = await self.harvest_listings(query, report)
            report.items = len(stubs)
            report.detail_failures = await self.detail_fetcher.enrich(self.surface, stubs)

        batches = partition(stubs, self.items_per_batch, self.max_batch_chars)
        outcomes = await self.dispatcher.dispatch_batches(batches)

        records = merge_outcomes(outcomes)

        report.batches = len(batches)
        report.failed_batches = sum(1 for outcome in outcomes if not outcome.ok)
        report.records = len(records)
        report.duration_ms = int((time.time() - started) * 1000)

        logger.info(
            f"[crawl] search={query.search!r} pages={report.pages_visited} "
            f"(failed {report.pages_failed}) items={report.items} "
            f"detail_failures={report.detail_failures} batches={report.batches} "
            f"(failed {report.failed_batches}) records={report.records} in {report.duration_ms}ms"
        )
        return records, report

    async def run(self, query: CrawlQuery) -> List[Any]:
        """Flat record list for query."""
        records, _ = await self.crawl(query)
        return records
