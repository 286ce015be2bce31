"""Line scanner: raw document text → classified line records.

Classification is purely lexical and looks at one line at a time. Every
line classifies to something, with TEXT as the fallback, so scanning
cannot fail.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

# Two columns of leading whitespace per nesting level, a tab counts as two.
INDENT_WIDTH = 2
MAX_INDENT_LEVEL = 5

# ---------------------------------------------------------------------------
# Line patterns (matched against the stripped line)
# ---------------------------------------------------------------------------

PAGE_BREAK_PATTERN = re.compile(r"^---$")
SEPARATOR_PATTERN = re.compile(r"^----(v?)$")
TRANSITION_PATTERN = re.compile(r"^---t(\d*)$")
TRANSITION_END_PATTERN = re.compile(r"^t---$")
FENCE_PATTERN = re.compile(r"^```(.*)$")
HEADING_PATTERN = re.compile(r"^(#+)\s+(.+)$")
ORDERED_ITEM_PATTERN = re.compile(r"^(\d+)\.\s+(.+)$")
UNORDERED_ITEM_PATTERN = re.compile(r"^-\s+(.+)$")
QUOTE_PATTERN = re.compile(r"^>\s+(.+)$")

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class LineKind(str, Enum):
    BLANK = "blank"
    PAGE_BREAK = "page_break"
    SEPARATOR = "separator"
    TRANSITION = "transition"
    TRANSITION_END = "transition_end"
    FENCE = "fence"
    HEADING = "heading"
    ORDERED_ITEM = "ordered_item"
    UNORDERED_ITEM = "unordered_item"
    QUOTE = "quote"
    TEXT = "text"

    @property
    def is_list_item(self) -> bool:
        return self in (LineKind.ORDERED_ITEM, LineKind.UNORDERED_ITEM)


@dataclass(frozen=True)
class Line:
    """One classified source line.

    ``text`` is the payload after the line's marker (the whole stripped
    line for TEXT). ``value`` holds the marker's argument where it has one:
    the heading level, the written list number, the transition order, the
    fence language or ``"v"`` for a vertical separator.
    """

    number: int
    raw: str
    kind: LineKind
    text: str = ""
    indent: int = 0
    value: Optional[str] = None

    @property
    def content(self) -> str:
        return self.raw.strip()


def indent_level(raw: str) -> int:
    expanded = raw.expandtabs(INDENT_WIDTH)
    width = len(expanded) - len(expanded.lstrip(" "))
    return min(width // INDENT_WIDTH, MAX_INDENT_LEVEL)


def classify(raw: str, number: int = 1) -> Line:
    """Classify a single raw line."""
    content = raw.strip()
    if not content:
        return Line(number, raw, LineKind.BLANK)

    if PAGE_BREAK_PATTERN.match(content):
        return Line(number, raw, LineKind.PAGE_BREAK)

    m = SEPARATOR_PATTERN.match(content)
    if m:
        return Line(number, raw, LineKind.SEPARATOR, value=m.group(1) or None)

    m = TRANSITION_PATTERN.match(content)
    if m:
        return Line(number, raw, LineKind.TRANSITION, value=m.group(1) or None)

    if TRANSITION_END_PATTERN.match(content):
        return Line(number, raw, LineKind.TRANSITION_END)

    m = FENCE_PATTERN.match(content)
    if m:
        language = m.group(1).strip()
        return Line(number, raw, LineKind.FENCE, text=content, value=language or None)

    m = HEADING_PATTERN.match(content)
    if m:
        return Line(
            number, raw, LineKind.HEADING, text=m.group(2), value=str(len(m.group(1)))
        )

    m = ORDERED_ITEM_PATTERN.match(content)
    if m:
        return Line(
            number,
            raw,
            LineKind.ORDERED_ITEM,
            text=m.group(2),
            indent=indent_level(raw),
            value=m.group(1),
        )

    m = UNORDERED_ITEM_PATTERN.match(content)
    if m:
        return Line(
            number, raw, LineKind.UNORDERED_ITEM, text=m.group(1), indent=indent_level(raw)
        )

    m = QUOTE_PATTERN.match(content)
    if m:
        return Line(number, raw, LineKind.QUOTE, text=m.group(1))

    return Line(number, raw, LineKind.TEXT, text=content)


def split_lines(text: str) -> Iterator[str]:
    """Lazily split on \\n, \\r\\n or \\r. A trailing newline adds no line."""
    pos = 0
    for m in _LINE_BREAK.finditer(text):
        yield text[pos:m.start()]
        pos = m.end()
    if pos < len(text):
        yield text[pos:]


def scan(text: str) -> Iterator[Line]:
    """Yield a classified Line for every line of ``text``, in order."""
    for number, raw in enumerate(split_lines(text), start=1):
        yield classify(raw, number)
