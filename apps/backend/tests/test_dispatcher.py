"""
Unit tests for concurrent extraction dispatch.
"""

import asyncio

import pytest

from core.errors import ExtractionServiceError, MalformedExtractionResponse
from crawler.listing import ItemStub
from pipeline.batcher import partition
from pipeline.dispatcher import ExtractionDispatcher, records_from_result
from conftest import FakeExtractionClient, echo_products, item_ids_in


def make_batches(count: int, per_batch: int):
    items = [
        ItemStub(id=str(n), summary_html=f"<li>{n}</li>", detail_link=f"https://www.ebay.com/itm/{n}")
        for n in range(count)
    ]
    return partition(items, items_per_batch=per_batch)


def dispatcher_for(client, timeout=None):
    return ExtractionDispatcher(client, schema={"name": "product_schema"}, records_key="products", timeout=timeout)


class TestRecordsFromResult:

    def test_valid(self):
        assert records_from_result({"products": [{"title": "a"}]}, "products") == [{"title": "a"}]

    @pytest.mark.parametrize("result", [None, [], "products", {"items": []}, {"products": {"title": "a"}}])
    def test_malformed(self, result):
        assert records_from_result(result, "products") is None


class TestDispatch:

    @pytest.mark.asyncio
    async def test_merges_in_batch_order(self):
        client = FakeExtractionClient(echo_products)
        records = await dispatcher_for(client).dispatch(make_batches(5, 2))

        assert [record["title"] for record in records] == ["0", "1", "2", "3", "4"]
        assert len(client.documents) == 3

    @pytest.mark.asyncio
    async def test_one_failing_batch_isolated(self):
        def handler(document):
            if "1" in item_ids_in(document):
                return ExtractionServiceError("503 from service")
            return echo_products(document)

        client = FakeExtractionClient(handler)
        records = await dispatcher_for(client).dispatch(make_batches(6, 2))

        # batch 0 (items 0-1) failed; batches 1 and 2 survive
        assert [record["title"] for record in records] == ["2", "3", "4", "5"]

    @pytest.mark.asyncio
    async def test_malformed_response_contributes_nothing(self):
        def handler(document):
            ids = item_ids_in(document)
            if "0" in ids:
                return {"products": "not a list"}
            if "2" in ids:
                return MalformedExtractionResponse("not JSON")
            return echo_products(document)

        dispatcher = dispatcher_for(FakeExtractionClient(handler))
        outcomes = await dispatcher.dispatch_batches(make_batches(6, 2))

        assert outcomes[0].malformed is True
        assert outcomes[0].ok is False
        assert outcomes[0].records == []
        assert outcomes[1].ok is False
        assert isinstance(outcomes[1].error, MalformedExtractionResponse)
        assert [record["title"] for record in outcomes[2].records] == ["4", "5"]

    @pytest.mark.asyncio
    async def test_calls_run_concurrently_and_order_follows_submission(self):
        release = asyncio.Event()
        started = []

        class SlowFirstClient:
            async def complete(self, schema, document, record_description="record"):
                ids = item_ids_in(document)
                started.append(ids[0])
                if ids[0] == "0":
                    # First batch finishes last
                    await release.wait()
                elif len(started) == 2:
                    release.set()
                return echo_products(document)

        records = await dispatcher_for(SlowFirstClient()).dispatch(make_batches(4, 2))

        assert sorted(started) == ["0", "2"]
        assert [record["title"] for record in records] == ["0", "1", "2", "3"]

    @pytest.mark.asyncio
    async def test_timeout_counts_as_failure(self):
        class HangingClient:
            async def complete(self, schema, document, record_description="record"):
                if "0" in item_ids_in(document):
                    await asyncio.sleep(10)
                return echo_products(document)

        outcomes = await dispatcher_for(HangingClient(), timeout=0.05).dispatch_batches(make_batches(2, 1))

        assert outcomes[0].ok is False
        assert isinstance(outcomes[0].error, asyncio.TimeoutError)
        assert [record["title"] for record in outcomes[1].records] == ["1"]

    @pytest.mark.asyncio
    async def test_no_batches(self):
        client = FakeExtractionClient(echo_products)
        assert await dispatcher_for(client).dispatch([]) == []
        assert client.documents == []
