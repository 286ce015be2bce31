"""Tests for ParseReport — block counting, diagnostics, serialization."""

import json

from opmark.diagnostics import Diagnostic, DiagnosticCode
from opmark.ir.report import ParseReport
from opmark.ir.schema import (
    CodeBlock,
    Document,
    DocumentMetadata,
    HeadingBlock,
    ImageBlock,
    LinkBlock,
    ListBlock,
    ListItem,
    Page,
    ParagraphBlock,
    QuoteBlock,
    SeparatorBlock,
    TransitionBlock,
    TransitionEndBlock,
)


def _doc() -> Document:
    return Document(
        metadata=DocumentMetadata(source_file="deck.opmark"),
        pages=[
            Page(index=0, blocks=[
                HeadingBlock(level=1, text="H1"),
                ParagraphBlock(text="P1"),
                ListBlock(items=[
                    ListItem(text="a", children=[ListItem(text="a1")]),
                    ListItem(text="b"),
                ]),
            ]),
            Page(index=1, blocks=[
                HeadingBlock(level=2, text="H2a"),
                HeadingBlock(level=2, text="H2b"),
                TransitionBlock(order=1),
                ImageBlock(alt="x", src="x.png"),
                LinkBlock(label="l", url="u"),
                QuoteBlock(text="q"),
                CodeBlock(code="c"),
            ]),
            Page(index=2),
        ],
    )


class TestParseReportFromDocument:
    def test_counts_all_block_types(self):
        report = ParseReport.from_document(_doc())
        assert report.source_file == "deck.opmark"
        assert report.page_count == 3
        assert report.empty_page_count == 1
        assert report.heading_count == 3
        assert report.paragraph_count == 1
        assert report.list_count == 1
        assert report.list_item_count == 3
        assert report.image_count == 1
        assert report.link_count == 1
        assert report.quote_count == 1
        assert report.code_block_count == 1
        assert report.transition_count == 1
        assert report.block_count == 10

    def test_headings_by_level(self):
        report = ParseReport.from_document(_doc())
        assert report.headings_by_level == {1: 1, 2: 2}

    def test_structural_blocks_counted(self):
        doc = Document(pages=[
            Page(index=0, blocks=[
                ParagraphBlock(text="a"),
                SeparatorBlock(),
                TransitionBlock(order=1),
                TransitionEndBlock(),
                ParagraphBlock(text="b"),
            ]),
        ])
        report = ParseReport.from_document(doc)
        assert report.separator_count == 1
        assert report.transition_count == 1
        assert report.transition_end_count == 1
        assert report.block_count == 5

    def test_diagnostics_copied(self):
        diag = Diagnostic(DiagnosticCode.UNTERMINATED_DELIMITER, "x", line=1, column=2)
        report = ParseReport.from_document(_doc(), [diag])
        assert report.diagnostics == [diag]


class TestParseReportSerialization:
    def test_to_json(self):
        diag = Diagnostic(DiagnosticCode.UNTERMINATED_FENCE, "never closed", line=7)
        report = ParseReport.from_document(_doc(), [diag])
        report.parse_time_seconds = 0.12345
        data = json.loads(report.to_json())
        assert data["page_count"] == 3
        assert data["timing"]["parse_seconds"] == 0.123
        assert data["block_counts"]["headings"] == 3
        assert data["headings_by_level"] == {"1": 1, "2": 2}
        assert data["diagnostics"] == [
            {"code": "unterminated-fence", "message": "never closed", "line": 7, "column": None}
        ]

    def test_empty_report(self):
        data = json.loads(ParseReport().to_json())
        assert data["block_counts"]["paragraphs"] == 0
        assert data["diagnostics"] == []


class TestDiagnosticStr:
    def test_with_position(self):
        diag = Diagnostic(DiagnosticCode.UNTERMINATED_DELIMITER, "oops", line=3, column=9)
        assert str(diag) == "line 3, col 9: oops [unterminated-delimiter]"

    def test_without_position(self):
        diag = Diagnostic(DiagnosticCode.HEADING_LEVEL_CLAMPED, "oops")
        assert str(diag) == "oops [heading-level-clamped]"
