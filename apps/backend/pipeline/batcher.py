"""
Partitioning of enriched stubs into extraction batches.
"""

import html
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup, Comment

from crawler.listing import ItemStub

logger = logging.getLogger(__name__)

# Markup that costs payload without carrying item data
NOISE_TAGS = ["script", "style", "noscript", "svg", "iframe", "link", "meta", "template"]


def compact_fragment(fragment: Optional[str]) -> str:
    """Drop scripts, styles, inline SVG and comments from an HTML fragment."""
    if not fragment:
        return ""
    soup = BeautifulSoup(fragment, "html.parser")
    for tag in soup.find_all(NOISE_TAGS):
        # Nested noise goes with its already-removed parent
        if not tag.decomposed:
            tag.decompose()
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()
    return str(soup).strip()


def render_item(stub: ItemStub) -> str:
    """
    Wrap one stub's fragments in an identifying container.

    A stub whose detail fetch failed gets an empty detail block.
    """
    item_id = html.escape(stub.id, quote=True)
    return (
        f'<div class="item" data-item-id="{item_id}">\n'
        f'  <ul class="item-summary">\n{compact_fragment(stub.summary_html)}\n  </ul>\n'
        f'  <div class="item-detail">\n{compact_fragment(stub.detail_html)}\n  </div>\n'
        f'</div>'
    )


@dataclass(frozen=True)
class Batch:
    """An ordered group of stubs sent to the extraction service in one call."""
    index: int
    items: Tuple[ItemStub, ...]

    def __len__(self):
        return len(self.items)

    @property
    def item_ids(self) -> List[str]:
        return [stub.id for stub in self.items]

    def render_document(self) -> str:
        body = "\n".join(render_item(stub) for stub in self.items)
        return f'<div class="batch">\n{body}\n</div>'


def partition(
    stubs: Sequence[ItemStub],
    items_per_batch: int,
    max_batch_chars: Optional[int] = None,
) -> List[Batch]:
    """
    Split stubs into batches of at most items_per_batch, in discovery order.

    With max_batch_chars set, a batch is also closed early when the next
    item's rendered fragment would push it past that size. Every batch
    holds at least one item.
    """
    if items_per_batch < 1:
        raise ValueError("items_per_batch must be at least 1")

    groups: List[List[ItemStub]] = []
    current: List[ItemStub] = []
    current_chars = 0

    for stub in stubs:
        item_chars = len(render_item(stub)) if max_batch_chars else 0
        too_many = len(current) >= items_per_batch
        too_big = bool(max_batch_chars and current and current_chars + item_chars > max_batch_chars)
        if too_many or too_big:
            groups.append(current)
            current = []
            current_chars = 0
        current.append(stub)
        current_chars += item_chars

    if current:
        groups.append(current)

    batches = [Batch(index=i, items=tuple(group)) for i, group in enumerate(groups)]
    logger.info(f"[batcher] {len(stubs)} items -> {len(batches)} batches (<= {items_per_batch} per batch)")
    return batches
