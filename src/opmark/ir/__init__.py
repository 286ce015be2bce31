"""OpMark Intermediate Representation models."""

from opmark.ir.schema import (
    Block,
    BoldSpan,
    CodeBlock,
    CodeSpan,
    Document,
    DocumentMetadata,
    HeadingBlock,
    ImageBlock,
    ImageSpan,
    ImageStyle,
    InlineSpan,
    ItalicSpan,
    LinkBlock,
    LinkSpan,
    ListBlock,
    ListItem,
    Page,
    ParagraphBlock,
    PlainSpan,
    QuoteBlock,
    SeparatorBlock,
    SmallSpan,
    StrikethroughSpan,
    TransitionBlock,
    TransitionEndBlock,
    TransitionGroup,
    UnderlineSpan,
    plain_text,
    source_text,
)

__all__ = [
    "Block",
    "BoldSpan",
    "CodeBlock",
    "CodeSpan",
    "Document",
    "DocumentMetadata",
    "HeadingBlock",
    "ImageBlock",
    "ImageSpan",
    "ImageStyle",
    "InlineSpan",
    "ItalicSpan",
    "LinkBlock",
    "LinkSpan",
    "ListBlock",
    "ListItem",
    "Page",
    "ParagraphBlock",
    "PlainSpan",
    "QuoteBlock",
    "SeparatorBlock",
    "SmallSpan",
    "StrikethroughSpan",
    "TransitionBlock",
    "TransitionEndBlock",
    "TransitionGroup",
    "UnderlineSpan",
    "plain_text",
    "source_text",
]
