"""
Concurrent fan-out of extraction batches with all-settled reconciliation.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, List, Optional, Sequence

from .batcher import Batch

logger = logging.getLogger(__name__)


@dataclass
class BatchOutcome:
    """Settled result of one batch: records on success, error or malformed on failure."""
    index: int
    records: List[Any] = field(default_factory=list)
    error: Optional[BaseException] = None
    malformed: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.malformed


async def settle_all(calls: Sequence[Awaitable[Any]]) -> List[Any]:
    """
    Await every call concurrently; return values and exceptions in call order.

    One failure never cancels the others.
    """
    return await asyncio.gather(*calls, return_exceptions=True)


def records_from_result(result: Any, records_key: str) -> Optional[List[Any]]:
    """The records array of a completed extraction, or None if malformed."""
    if not isinstance(result, dict):
        return None
    records = result.get(records_key)
    if not isinstance(records, list):
        return None
    return records


def merge_outcomes(outcomes: Sequence[BatchOutcome]) -> List[Any]:
    merged: List[Any] = []
    for outcome in sorted(outcomes, key=lambda outcome: outcome.index):
        merged.extend(outcome.records)
    return merged


class ExtractionDispatcher:
    """
    Issues one extraction call per batch, all at once, and merges results.

    Failed and malformed batches contribute nothing. Output follows batch
    order, not completion order. Nothing is retried.
    """

    def __init__(
        self,
        client,
        schema: Dict,
        records_key: str,
        record_description: str = "record",
        timeout: Optional[float] = None,
    ):
        self.client = client
        self.schema = schema
        self.records_key = records_key
        self.record_description = record_description
        self.timeout = timeout

    async def _extract(self, batch: Batch) -> Any:
        call = self.client.complete(self.schema, batch.render_document(), self.record_description)
        if self.timeout:
            return await asyncio.wait_for(call, timeout=self.timeout)
        return await call

    async def dispatch_batches(self, batches: Sequence[Batch]) -> List[BatchOutcome]:
        for batch in batches:
            logger.info(f"[dispatcher] Batch {batch.index}: {len(batch)} items")

        results = await settle_all([self._extract(batch) for batch in batches])

        outcomes = []
        for batch, result in zip(batches, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.TimeoutError):
                    logger.error(f"[dispatcher] Batch {batch.index} timed out after {self.timeout}s")
                else:
                    logger.error(f"[dispatcher] Batch {batch.index} failed: {result!r}")
                outcomes.append(BatchOutcome(index=batch.index, error=result))
                continue

            records = records_from_result(result, self.records_key)
            if records is None:
                logger.warning(
                    f"[dispatcher] Batch {batch.index} returned no '{self.records_key}' array, skipping"
                )
                outcomes.append(BatchOutcome(index=batch.index, malformed=True))
                continue

            outcomes.append(BatchOutcome(index=batch.index, records=records))

        return outcomes

    async def dispatch(self, batches: Sequence[Batch]) -> List[Any]:
        """Flat record list across all batches, in batch order."""
        outcomes = await self.dispatch_batches(batches)
        merged = merge_outcomes(outcomes)

        failed = sum(1 for outcome in outcomes if not outcome.ok)
        logger.info(
            f"[dispatcher] {len(merged)} records from {len(outcomes)} batches ({failed} failed)"
        )
        return merged
