"""Tests for IR Pydantic models — serialization, validation, tree helpers."""

import json

import pytest
from pydantic import ValidationError

from opmark.ir import (
    BoldSpan,
    CodeBlock,
    Document,
    DocumentMetadata,
    HeadingBlock,
    ImageBlock,
    ImageSpan,
    ImageStyle,
    ItalicSpan,
    LinkSpan,
    ListBlock,
    ListItem,
    Page,
    ParagraphBlock,
    PlainSpan,
    SeparatorBlock,
    TransitionBlock,
    TransitionEndBlock,
    plain_text,
    source_text,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _sample_document() -> Document:
    """Build a realistic IR document for testing."""
    return Document(
        metadata=DocumentMetadata(
            source_file="deck.opmark",
            source_hash="abc123",
            parser_version="0.1.0",
            page_count=2,
            title="Intro",
        ),
        pages=[
            Page(
                index=0,
                blocks=[
                    HeadingBlock(level=2, text="Intro", runs=[PlainSpan(text="Intro")]),
                    ParagraphBlock(
                        text="Some *bold /deep/* text",
                        runs=[
                            PlainSpan(text="Some "),
                            BoldSpan(children=[
                                PlainSpan(text="bold "),
                                ItalicSpan(children=[PlainSpan(text="deep")]),
                            ]),
                            PlainSpan(text=" text"),
                        ],
                    ),
                    ListBlock(
                        ordered=True,
                        items=[
                            ListItem(text="one", ordered=True, number=1, children=[
                                ListItem(text="sub"),
                            ]),
                            ListItem(text="two", ordered=True, number=2),
                        ],
                    ),
                ],
            ),
            Page(
                index=1,
                blocks=[
                    ImageBlock(alt="chart", src="chart.png", style=ImageStyle(width=50)),
                    CodeBlock(code="print(1)", language="python"),
                    SeparatorBlock(direction="vertical"),
                ],
            ),
        ],
    )


class TestDocumentSerialization:
    def test_json_roundtrip(self):
        doc = _sample_document()
        assert Document.from_json(doc.to_json()) == doc

    def test_json_has_type_tags(self):
        data = json.loads(_sample_document().to_json())
        blocks = data["pages"][0]["blocks"]
        assert [b["type"] for b in blocks] == ["heading", "paragraph", "list"]
        assert blocks[1]["runs"][1]["type"] == "bold"
        assert blocks[1]["runs"][1]["children"][1]["type"] == "italic"

    def test_nested_list_items_survive(self):
        doc = Document.from_json(_sample_document().to_json())
        lst = doc.pages[0].blocks[2]
        assert lst.items[0].children[0].text == "sub"

    def test_invalid_block_type_rejected(self):
        bad = {"pages": [{"index": 0, "blocks": [{"type": "table"}]}]}
        with pytest.raises(ValidationError):
            Document.model_validate(bad)

    def test_iter_blocks(self):
        pairs = list(_sample_document().iter_blocks())
        assert [page for page, _ in pairs] == [0, 0, 0, 1, 1, 1]


class TestValidation:
    def test_heading_level_must_be_positive(self):
        with pytest.raises(ValidationError):
            HeadingBlock(level=0)

    def test_transition_order_non_negative(self):
        with pytest.raises(ValidationError):
            TransitionBlock(order=-1)

    def test_models_are_frozen(self):
        block = ParagraphBlock(text="x")
        with pytest.raises(ValidationError):
            block.text = "y"

    def test_bad_alignment_rejected(self):
        with pytest.raises(ValidationError):
            ImageStyle(align="middle")


class TestSpanText:
    def test_source_text_rebuilds_markers(self):
        spans = [
            PlainSpan(text="a "),
            BoldSpan(children=[ItalicSpan(children=[PlainSpan(text="b")])]),
            PlainSpan(text="*", escaped=True),
            LinkSpan(label="c", url="d"),
            ImageSpan(alt="e", src="f", options="w5"),
            LinkSpan(label="g:h", url="g:h", autolink=True),
        ]
        assert source_text(spans) == "a */b/*\\*[c](d)![e](f)<w5><g:h>"

    def test_plain_text_strips_markers(self):
        spans = [
            BoldSpan(children=[PlainSpan(text="a")]),
            PlainSpan(text="*", escaped=True),
            LinkSpan(label="b", url="c"),
        ]
        assert plain_text(spans) == "a*b"


class TestTransitionGroups:
    def test_no_transitions_single_group(self):
        page = Page(blocks=[ParagraphBlock(text="a"), ParagraphBlock(text="b")])
        (group,) = page.transition_groups()
        assert group.order == 0
        assert len(group.blocks) == 2

    def test_groups_by_transition(self):
        a, b, c = (ParagraphBlock(text=t) for t in "abc")
        page = Page(blocks=[a, TransitionBlock(order=1), b, TransitionEndBlock(), c])
        groups = page.transition_groups()
        assert [(g.order, g.blocks) for g in groups] == [(0, [a]), (1, [b]), (0, [c])]

    def test_empty_implicit_group_dropped(self):
        b = ParagraphBlock(text="b")
        page = Page(blocks=[TransitionBlock(order=3), b])
        assert [(g.order, g.blocks) for g in page.transition_groups()] == [(3, [b])]

    def test_empty_explicit_group_kept(self):
        page = Page(blocks=[TransitionBlock(order=2)])
        assert [g.order for g in page.transition_groups()] == [2]

    def test_empty_page(self):
        assert Page().transition_groups() == []
