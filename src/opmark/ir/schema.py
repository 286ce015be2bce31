"""Pydantic models for the OpMark Intermediate Representation (IR).

The IR is a pure tree: a Document owns its Pages, a Page owns its Blocks and
a Block owns its inline span tree. Nothing points back up the tree, so the
whole structure compares by value and round-trips through JSON.
"""

from __future__ import annotations

from typing import Annotated, ClassVar, Iterator, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Inline spans (discriminated union via `type` field)
# ---------------------------------------------------------------------------


class PlainSpan(_Node):
    """Unformatted text. ``escaped`` marks a single backslash-escaped char."""

    type: Literal["plain"] = "plain"
    text: str
    escaped: bool = False


class _FormattedSpan(_Node):
    children: list[InlineSpan] = Field(default_factory=list)

    marker: ClassVar[str] = ""


class BoldSpan(_FormattedSpan):
    type: Literal["bold"] = "bold"
    marker: ClassVar[str] = "*"


class ItalicSpan(_FormattedSpan):
    type: Literal["italic"] = "italic"
    marker: ClassVar[str] = "/"


class CodeSpan(_FormattedSpan):
    type: Literal["code"] = "code"
    marker: ClassVar[str] = "`"


class SmallSpan(_FormattedSpan):
    type: Literal["small"] = "small"
    marker: ClassVar[str] = "$"


class StrikethroughSpan(_FormattedSpan):
    type: Literal["strikethrough"] = "strikethrough"
    marker: ClassVar[str] = "~"


class UnderlineSpan(_FormattedSpan):
    type: Literal["underline"] = "underline"
    marker: ClassVar[str] = "_"


class ImageStyle(_Node):
    """Presentation hints from the ``<options>`` suffix of an image."""

    align: Literal["auto", "left", "right", "center"] = "auto"
    width: Optional[float] = None
    height: Optional[float] = None
    hyperlink: Optional[str] = None


class LinkSpan(_Node):
    type: Literal["link"] = "link"
    label: str
    url: str
    autolink: bool = False  # written as <url>


class ImageSpan(_Node):
    type: Literal["image"] = "image"
    alt: str
    src: str
    style: ImageStyle = Field(default_factory=ImageStyle)
    options: Optional[str] = None  # raw option text, kept for source_text()


InlineSpan = Annotated[
    Union[
        PlainSpan,
        BoldSpan,
        ItalicSpan,
        CodeSpan,
        SmallSpan,
        StrikethroughSpan,
        UnderlineSpan,
        LinkSpan,
        ImageSpan,
    ],
    Field(discriminator="type"),
]

FORMATTED_SPANS: tuple[type[_FormattedSpan], ...] = (
    BoldSpan,
    ItalicSpan,
    CodeSpan,
    SmallSpan,
    StrikethroughSpan,
    UnderlineSpan,
)

# Rebuild the recursive span models now that InlineSpan is defined
for _span_cls in FORMATTED_SPANS:
    _span_cls.model_rebuild()


def source_text(spans: list[InlineSpan]) -> str:
    """Rebuild the exact source a span sequence was resolved from."""
    parts: list[str] = []
    for span in spans:
        if isinstance(span, PlainSpan):
            parts.append("\\" + span.text if span.escaped else span.text)
        elif isinstance(span, LinkSpan):
            if span.autolink:
                parts.append(f"<{span.url}>")
            else:
                parts.append(f"[{span.label}]({span.url})")
        elif isinstance(span, ImageSpan):
            parts.append(f"![{span.alt}]({span.src})")
            if span.options is not None:
                parts.append(f"<{span.options}>")
        else:
            parts.append(span.marker + source_text(span.children) + span.marker)
    return "".join(parts)


def plain_text(spans: list[InlineSpan]) -> str:
    """Text content with all formatting stripped (links give their label)."""
    parts: list[str] = []
    for span in spans:
        if isinstance(span, PlainSpan):
            parts.append(span.text)
        elif isinstance(span, LinkSpan):
            parts.append(span.label)
        elif isinstance(span, ImageSpan):
            parts.append(span.alt)
        else:
            parts.append(plain_text(span.children))
    return "".join(parts)


# ---------------------------------------------------------------------------
# List items (recursive for nesting)
# ---------------------------------------------------------------------------


class ListItem(_Node):
    """A single list entry, optionally containing nested sub-items."""

    text: str
    runs: list[InlineSpan] = Field(default_factory=list)
    ordered: bool = False
    number: Optional[int] = None  # position among ordered siblings, from 1
    indent: int = 0
    line: Optional[int] = None
    children: list[ListItem] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Block types (discriminated union via `type` field)
# ---------------------------------------------------------------------------


class HeadingBlock(_Node):
    type: Literal["heading"] = "heading"
    line: Optional[int] = None
    level: int = Field(ge=1)
    text: str = ""
    runs: list[InlineSpan] = Field(default_factory=list)


class ParagraphBlock(_Node):
    type: Literal["paragraph"] = "paragraph"
    line: Optional[int] = None
    text: str = ""
    runs: list[InlineSpan] = Field(default_factory=list)


class ListBlock(_Node):
    type: Literal["list"] = "list"
    line: Optional[int] = None
    ordered: bool = False
    items: list[ListItem] = Field(default_factory=list)


class ImageBlock(_Node):
    type: Literal["image"] = "image"
    line: Optional[int] = None
    alt: str = ""
    src: str = ""
    style: ImageStyle = Field(default_factory=ImageStyle)


class LinkBlock(_Node):
    type: Literal["link"] = "link"
    line: Optional[int] = None
    label: str = ""
    url: str = ""
    autolink: bool = False


class QuoteBlock(_Node):
    type: Literal["quote"] = "quote"
    line: Optional[int] = None
    text: str = ""
    runs: list[InlineSpan] = Field(default_factory=list)


class CodeBlock(_Node):
    type: Literal["code_block"] = "code_block"
    line: Optional[int] = None
    code: str = ""
    language: Optional[str] = None


class SeparatorBlock(_Node):
    type: Literal["separator"] = "separator"
    line: Optional[int] = None
    direction: Literal["horizontal", "vertical"] = "horizontal"


class TransitionBlock(_Node):
    """Start of a group of blocks revealed together on interaction."""

    type: Literal["transition"] = "transition"
    line: Optional[int] = None
    order: int = Field(default=0, ge=0)


class TransitionEndBlock(_Node):
    type: Literal["transition_end"] = "transition_end"
    line: Optional[int] = None


Block = Annotated[
    Union[
        HeadingBlock,
        ParagraphBlock,
        ListBlock,
        ImageBlock,
        LinkBlock,
        QuoteBlock,
        CodeBlock,
        SeparatorBlock,
        TransitionBlock,
        TransitionEndBlock,
    ],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Pages
# ---------------------------------------------------------------------------


class TransitionGroup(_Node):
    """Blocks of one page that appear together."""

    order: int = 0
    blocks: list[Block] = Field(default_factory=list)


class Page(_Node):
    index: int = 0
    blocks: list[Block] = Field(default_factory=list)

    def transition_groups(self) -> list[TransitionGroup]:
        """Fold the page's blocks into reveal groups.

        Every page opens with an implicit group of order 0. A transition
        block starts a group with its own order; a transition end falls
        back to a fresh implicit group. Implicit groups left empty are
        dropped, explicit ones are kept even without content.
        """
        groups: list[tuple[int, list, bool]] = [(0, [], False)]
        for block in self.blocks:
            if isinstance(block, TransitionBlock):
                groups.append((block.order, [], True))
            elif isinstance(block, TransitionEndBlock):
                groups.append((0, [], False))
            else:
                groups[-1][1].append(block)
        return [
            TransitionGroup(order=order, blocks=blocks)
            for order, blocks, explicit in groups
            if blocks or explicit
        ]


# ---------------------------------------------------------------------------
# Document metadata
# ---------------------------------------------------------------------------


class DocumentMetadata(_Node):
    source_file: str = ""
    source_hash: str = ""
    parser: str = "opmark"
    parser_version: str = ""
    page_count: int = 0
    title: str = ""


# ---------------------------------------------------------------------------
# Top-level IR document
# ---------------------------------------------------------------------------


class Document(_Node):
    """The complete intermediate representation of a parsed OpMark document."""

    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)
    pages: list[Page] = Field(default_factory=list)

    def iter_blocks(self) -> Iterator[tuple[int, Block]]:
        """Yield ``(page_index, block)`` pairs in source order."""
        for page in self.pages:
            for block in page.blocks:
                yield page.index, block

    def to_json(self, **kwargs) -> str:
        """Serialize to JSON string."""
        kwargs.setdefault("indent", 2)
        return self.model_dump_json(**kwargs)

    @classmethod
    def from_json(cls, json_str: str) -> Document:
        """Deserialize from JSON string."""
        return cls.model_validate_json(json_str)


ListItem.model_rebuild()
Page.model_rebuild()
