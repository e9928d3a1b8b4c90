"""
Unit tests for the crawl frontier.
"""

from crawler.frontier import Frontier
from crawler.pagination import canonicalize_page_url


class TestFrontierDedup:
    """A URL is queued once while pending and visited once overall."""

    def test_enqueue_same_url_twice(self):
        frontier = Frontier(max_pages=10)
        assert frontier.enqueue("https://example.com/s?_pgn=1") is True
        assert frontier.enqueue("https://example.com/s?_pgn=1") is False
        assert frontier.pending_count == 1

    def test_visited_url_not_requeued(self):
        frontier = Frontier(max_pages=10)
        frontier.enqueue("https://example.com/s?_pgn=1")
        url = frontier.next_url()

        assert url == "https://example.com/s?_pgn=1"
        assert frontier.enqueue(url) is False
        assert frontier.next_url() is None

    def test_reordered_pagination_links_dequeued_once(self):
        frontier = Frontier(max_pages=10)
        links = [
            "https://example.com/s?_pgn=2&_nkw=nike&rt=nc",
            "https://example.com/s?_nkw=nike&_pgn=2&rt=nc",
            "https://example.com/s?rt=nc&_nkw=nike&_pgn=2",
        ]
        for link in links:
            frontier.enqueue(canonicalize_page_url(link, "_pgn"))

        dequeued = []
        while True:
            url = frontier.next_url()
            if url is None:
                break
            dequeued.append(url)

        assert dequeued == ["https://example.com/s?_nkw=nike&rt=nc&_pgn=2"]

    def test_mark_visited_is_idempotent(self):
        frontier = Frontier(max_pages=10)
        frontier.mark_visited("https://example.com/a")
        frontier.mark_visited("https://example.com/a")
        assert frontier.visited_count == 1
        assert frontier.is_visited("https://example.com/a")


class TestFrontierBudget:
    """Traversal stops once the page budget is spent."""

    def test_fifo_order(self):
        frontier = Frontier(max_pages=10)
        for n in (1, 2, 3):
            frontier.enqueue(f"https://example.com/p{n}")

        assert [frontier.next_url() for _ in range(3)] == [
            "https://example.com/p1",
            "https://example.com/p2",
            "https://example.com/p3",
        ]

    def test_budget_caps_visited_count(self):
        frontier = Frontier(max_pages=2)
        for n in range(1, 6):
            frontier.enqueue(f"https://example.com/p{n}")

        visited = []
        while True:
            url = frontier.next_url()
            if url is None:
                break
            visited.append(url)
            # Newly discovered links never push past the budget
            frontier.enqueue(f"https://example.com/extra{len(visited)}")

        assert len(visited) == 2
        assert frontier.visited_count == 2
        assert frontier.should_continue() is False

    def test_empty_queue_stops(self):
        frontier = Frontier(max_pages=5)
        assert frontier.next_url() is None
        assert frontier.visited_count == 0
