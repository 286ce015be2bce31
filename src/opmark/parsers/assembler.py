"""Document assembler: block/page-break stream → pages → Document."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

from opmark.ir.schema import Document, DocumentMetadata, HeadingBlock, Page, plain_text
from opmark.parsers.blocks import Event, PageBreak

logger = logging.getLogger(__name__)


class DocumentAssembler:
    """Folds builder events into pages.

    There is always a first page, and every page break opens a new one,
    even when the page it closes is empty.
    """

    def iter_pages(self, events: Iterable[Event]) -> Iterator[Page]:
        """Yield each page as soon as it is complete."""
        index = 0
        blocks: list = []
        for event in events:
            if isinstance(event, PageBreak):
                yield Page(index=index, blocks=blocks)
                index += 1
                blocks = []
            else:
                blocks.append(event)
        yield Page(index=index, blocks=blocks)

    def assemble(
        self,
        events: Iterable[Event],
        metadata: Optional[DocumentMetadata] = None,
    ) -> Document:
        """Build the finished Document from the whole event stream."""
        pages = list(self.iter_pages(events))
        metadata = metadata or DocumentMetadata()

        update: dict = {"page_count": len(pages)}
        if not metadata.title:
            update["title"] = _first_heading_text(pages)

        logger.debug("Assembled %d page(s)", len(pages))
        return Document(metadata=metadata.model_copy(update=update), pages=pages)


def _first_heading_text(pages: list[Page]) -> str:
    for page in pages:
        for block in page.blocks:
            if isinstance(block, HeadingBlock):
                return plain_text(block.runs)
    return ""
