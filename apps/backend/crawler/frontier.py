"""
Crawl frontier: pending queue plus visited set.
"""
import logging
from collections import deque
from typing import Deque, Optional, Set

logger = logging.getLogger(__name__)


class Frontier:
    """
    Breadth-first frontier bounded by a page budget.

    A URL is queued at most once while unvisited and visited at most once.
    URLs are compared as strings, so callers enqueue canonical forms.
    """

    def __init__(self, max_pages: int):
        self.max_pages = max_pages
        self._pending: Deque[str] = deque()
        self._pending_set: Set[str] = set()
        self._visited: Set[str] = set()

    def enqueue(self, url: str) -> bool:
        """Queue url unless already visited or pending. Returns True if queued."""
        if url in self._visited or url in self._pending_set:
            return False
        self._pending.append(url)
        self._pending_set.add(url)
        return True

    def dequeue_next(self) -> Optional[str]:
        """Pop the oldest pending URL, or None when the queue is empty."""
        if not self._pending:
            return None
        url = self._pending.popleft()
        self._pending_set.discard(url)
        return url

    def mark_visited(self, url: str):
        self._visited.add(url)

    def is_visited(self, url: str) -> bool:
        return url in self._visited

    def should_continue(self) -> bool:
        return bool(self._pending) and len(self._visited) < self.max_pages

    def next_url(self) -> Optional[str]:
        """
        Dequeue the next URL to crawl and mark it visited.

        Returns None once the queue is drained or the page budget is spent.
        """
        if not self.should_continue():
            return None
        url = self.dequeue_next()
        self.mark_visited(url)
        return url

    @property
    def visited_count(self) -> int:
        return len(self._visited)

    @property
    def pending_count(self) -> int:
        return len(self._pending)
