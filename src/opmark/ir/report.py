"""Parse report — diagnostics and statistics from a parse run."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Optional

from opmark.diagnostics import Diagnostic


@dataclass
class ParseReport:
    """Summary of an OpMark parse run."""

    # Source info
    source_file: str = ""
    page_count: int = 0
    empty_page_count: int = 0

    # Timing
    parse_time_seconds: float = 0.0

    # Block counts
    heading_count: int = 0
    paragraph_count: int = 0
    list_count: int = 0
    list_item_count: int = 0
    image_count: int = 0
    link_count: int = 0
    quote_count: int = 0
    code_block_count: int = 0
    separator_count: int = 0
    transition_count: int = 0
    transition_end_count: int = 0

    # Heading level distribution: {level: count}
    headings_by_level: dict[int, int] = field(default_factory=dict)

    # Lenient-parse warnings
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def block_count(self) -> int:
        return (
            self.heading_count
            + self.paragraph_count
            + self.list_count
            + self.image_count
            + self.link_count
            + self.quote_count
            + self.code_block_count
            + self.separator_count
            + self.transition_count
            + self.transition_end_count
        )

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self._to_dict(), indent=indent)

    def _to_dict(self) -> dict:
        """Convert to a plain dict for JSON serialization."""
        return {
            "source_file": self.source_file,
            "page_count": self.page_count,
            "empty_page_count": self.empty_page_count,
            "timing": {
                "parse_seconds": round(self.parse_time_seconds, 3),
            },
            "block_counts": {
                "headings": self.heading_count,
                "paragraphs": self.paragraph_count,
                "lists": self.list_count,
                "list_items": self.list_item_count,
                "images": self.image_count,
                "links": self.link_count,
                "quotes": self.quote_count,
                "code_blocks": self.code_block_count,
                "separators": self.separator_count,
                "transitions": self.transition_count,
                "transition_ends": self.transition_end_count,
            },
            "headings_by_level": {
                str(k): v for k, v in sorted(self.headings_by_level.items())
            },
            "diagnostics": [
                {
                    "code": diag.code.value,
                    "message": diag.message,
                    "line": diag.line,
                    "column": diag.column,
                }
                for diag in self.diagnostics
            ],
        }

    @classmethod
    def from_document(
        cls, doc: "Document", diagnostics: Optional[list[Diagnostic]] = None
    ) -> ParseReport:
        """Build a report by walking a parsed document."""
        report = cls(
            source_file=doc.metadata.source_file,
            page_count=len(doc.pages),
            diagnostics=list(diagnostics or []),
        )
        for page in doc.pages:
            if not page.blocks:
                report.empty_page_count += 1
            _walk_blocks(page.blocks, report)
        return report


def _walk_blocks(blocks: list, report: ParseReport) -> None:
    """Walk IR blocks to populate report counters."""
    from opmark.ir.schema import (
        CodeBlock,
        HeadingBlock,
        ImageBlock,
        LinkBlock,
        ListBlock,
        ParagraphBlock,
        QuoteBlock,
        SeparatorBlock,
        TransitionBlock,
        TransitionEndBlock,
    )

    for block in blocks:
        if isinstance(block, HeadingBlock):
            report.heading_count += 1
            report.headings_by_level[block.level] = (
                report.headings_by_level.get(block.level, 0) + 1
            )
        elif isinstance(block, ParagraphBlock):
            report.paragraph_count += 1
        elif isinstance(block, ListBlock):
            report.list_count += 1
            report.list_item_count += _count_items(block.items)
        elif isinstance(block, ImageBlock):
            report.image_count += 1
        elif isinstance(block, LinkBlock):
            report.link_count += 1
        elif isinstance(block, QuoteBlock):
            report.quote_count += 1
        elif isinstance(block, CodeBlock):
            report.code_block_count += 1
        elif isinstance(block, TransitionBlock):
            report.transition_count += 1
        elif isinstance(block, TransitionEndBlock):
            report.transition_end_count += 1
        elif isinstance(block, SeparatorBlock):
            report.separator_count += 1


def _count_items(items: list) -> int:
    return sum(1 + _count_items(item.children) for item in items)
