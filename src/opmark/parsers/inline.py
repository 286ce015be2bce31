"""Inline resolver: one line of text → ordered inline span tree.

Scanning is left to right. At each position, in order of precedence:

1. a backslash escapes the next character, which becomes its own plain span;
2. an atomic construct (``![alt](src)<opts>``, ``[label](url)``, ``<url>``)
   is taken whole, so its brackets and slashes never act as delimiters;
3. a delimiter character looks for the nearest valid closer of the same
   character to its right; the enclosed text becomes a formatted span and
   is resolved again (except code, which is literal);
4. anything else, including an opener with no closer, is plain text.

The result covers the input exactly once: ``source_text(resolve(s)) == s``.
"""

from __future__ import annotations

import re
from typing import Optional, Union

from opmark.diagnostics import DiagnosticCode, DiagnosticSink
from opmark.ir.schema import (
    BoldSpan,
    CodeSpan,
    ImageSpan,
    ImageStyle,
    InlineSpan,
    ItalicSpan,
    LinkSpan,
    PlainSpan,
    SmallSpan,
    StrikethroughSpan,
    UnderlineSpan,
)

ESCAPE = "\\"
CODE = "`"

DELIMITERS = {
    "*": BoldSpan,
    "/": ItalicSpan,
    CODE: CodeSpan,
    "$": SmallSpan,
    "~": StrikethroughSpan,
    "_": UnderlineSpan,
}

AtomicSpan = Union[ImageSpan, LinkSpan]

# ---------------------------------------------------------------------------
# Atomic constructs
# ---------------------------------------------------------------------------

AUTOLINK_PATTERN = re.compile(r"<([A-Za-z][A-Za-z0-9+.\-]*:[^\s<>]+)>")

_ALIGNMENTS = ("auto", "left", "right", "center")
_SIZE_OPTION = re.compile(r"^([wh])(\d+(?:\.\d+)?)$")


class Lookahead:
    """Next-occurrence tables over one line of text.

    A table for a character is built right to left the first time it is
    asked for, after which every lookup is constant time. Bracket and
    paren matching goes through here so that a line of unclosed ``[`` is
    not rescanned once per bracket.
    """

    def __init__(self, text: str):
        self.text = text
        self._tables: dict[str, list[int]] = {}

    def find(self, char: str, pos: int) -> int:
        """Index of the first ``char`` at or after ``pos``, or -1."""
        if pos >= len(self.text):
            return -1
        table = self._tables.get(char)
        if table is None:
            table = self._tables[char] = self._build(char)
        return table[pos]

    def _build(self, char: str) -> list[int]:
        text = self.text
        table = [-1] * len(text)
        following = -1
        for idx in range(len(text) - 1, -1, -1):
            if text[idx] == char:
                following = idx
            table[idx] = following
        return table


def parse_image_options(options: Optional[str]) -> ImageStyle:
    """Parse ``w50|h20|center|https://...`` into an ImageStyle.

    Unrecognized options are taken as the image's hyperlink target.
    """
    if not options:
        return ImageStyle()

    fields: dict = {}
    for option in options.split("|"):
        option = option.strip()
        if not option:
            continue
        if option in _ALIGNMENTS:
            fields["align"] = option
            continue
        m = _SIZE_OPTION.match(option)
        if m:
            key = "width" if m.group(1) == "w" else "height"
            fields[key] = float(m.group(2))
        else:
            fields["hyperlink"] = option
    return ImageStyle(**fields)


def _match_bracket(
    text: str, pos: int, ahead: Lookahead
) -> Optional[tuple[str, str, int]]:
    """Match ``[label](target)`` at ``pos``.

    The label runs to the first ``]`` and the target to the first ``)``
    after it. Returns label, target and the index just past the ``)``.
    """
    close = ahead.find("]", pos + 1)
    if close < 0 or not text.startswith("(", close + 1):
        return None
    paren = ahead.find(")", close + 2)
    if paren < 0:
        return None
    return text[pos + 1:close], text[close + 2:paren], paren + 1


def match_atomic(
    text: str, pos: int, ahead: Optional[Lookahead] = None
) -> Optional[tuple[AtomicSpan, int]]:
    """Match an image, link or autolink at ``pos``.

    Returns the span and the index just past it, or None.
    """
    if ahead is None:
        ahead = Lookahead(text)

    if text.startswith("![", pos):
        bracket = _match_bracket(text, pos + 1, ahead)
        if bracket is None:
            return None
        alt, src, end = bracket
        options = None
        if text.startswith("<", end):
            close = ahead.find(">", end + 1)
            if close >= 0:
                options = text[end + 1:close]
                end = close + 1
        span = ImageSpan(
            alt=alt,
            src=src,
            style=parse_image_options(options),
            options=options,
        )
        return span, end

    if text.startswith("[", pos):
        bracket = _match_bracket(text, pos, ahead)
        if bracket is None:
            return None
        label, url, end = bracket
        return LinkSpan(label=label, url=url), end

    if text.startswith("<", pos):
        if ahead.find(">", pos + 1) < 0:
            return None
        m = AUTOLINK_PATTERN.match(text, pos)
        if m:
            url = m.group(1)
            return LinkSpan(label=url, url=url, autolink=True), m.end()
    return None


def match_atomic_line(text: str) -> Optional[AtomicSpan]:
    """Return the atomic span if it makes up the whole of ``text``."""
    atom = match_atomic(text, 0)
    if atom is not None and atom[1] == len(text):
        return atom[0]
    return None


def _find_code_closer(text: str, start: int, ahead: Lookahead) -> Optional[int]:
    end = ahead.find(CODE, start + 1)
    if end <= start + 1:
        return None
    return end


def find_closer(
    text: str, start: int, ahead: Optional[Lookahead] = None
) -> Optional[int]:
    """Index of the closer for the delimiter at ``start``, or None.

    The closer is the nearest unescaped occurrence of the same character
    that is not inside an atomic construct or a code span. A closer right
    next to its opener encloses nothing and does not count.
    """
    if ahead is None:
        ahead = Lookahead(text)
    delim = text[start]
    if delim == CODE:
        return _find_code_closer(text, start, ahead)

    j = start + 1
    n = len(text)
    while j < n:
        ch = text[j]
        if ch == ESCAPE:
            j += 2
            continue
        if ch == delim:
            return j if j > start + 1 else None
        if ch == CODE:
            end = _find_code_closer(text, j, ahead)
            if end is not None:
                j = end + 1
                continue
        atom = match_atomic(text, j, ahead)
        if atom is not None:
            j = atom[1]
            continue
        j += 1
    return None


class InlineResolver:
    """Resolves text chunks into inline spans, reporting lenient spots."""

    def __init__(self, sink: DiagnosticSink | None = None):
        self.sink = sink

    def resolve(
        self, text: str, line: Optional[int] = None, column: int = 1
    ) -> list[InlineSpan]:
        """Resolve one line of text.

        Args:
            text: The text chunk; must not contain line breaks.
            line: Source line number, for diagnostics.
            column: 1-based source column of ``text[0]``, for diagnostics.

        Returns:
            Ordered spans covering ``text`` exactly once.
        """
        spans: list[InlineSpan] = []
        pending: list[str] = []
        ahead = Lookahead(text)
        # second character of the last empty pair, already reported
        empty_closer = -1

        def flush() -> None:
            if pending:
                spans.append(PlainSpan(text="".join(pending)))
                pending.clear()

        i = 0
        n = len(text)
        while i < n:
            ch = text[i]

            if ch == ESCAPE and i + 1 < n:
                flush()
                spans.append(PlainSpan(text=text[i + 1], escaped=True))
                i += 2
                continue

            atom = match_atomic(text, i, ahead)
            if atom is not None:
                flush()
                spans.append(atom[0])
                i = atom[1]
                continue

            span_cls = DELIMITERS.get(ch)
            if span_cls is not None:
                end = find_closer(text, i, ahead)
                if end is not None:
                    flush()
                    inner = text[i + 1:end]
                    if span_cls is CodeSpan:
                        children = [PlainSpan(text=inner)]
                    else:
                        children = self.resolve(inner, line, column + i + 1)
                    spans.append(span_cls(children=children))
                    i = end + 1
                    continue
                if text.startswith(ch, i + 1):
                    self._warn(DiagnosticCode.EMPTY_DELIMITERS, ch, line, column + i)
                    empty_closer = i + 1
                elif i != empty_closer:
                    self._warn(DiagnosticCode.UNTERMINATED_DELIMITER, ch, line, column + i)

            pending.append(ch)
            i += 1

        flush()
        return spans

    def _warn(
        self, code: DiagnosticCode, delim: str, line: Optional[int], column: int
    ) -> None:
        if self.sink is None:
            return
        if code is DiagnosticCode.EMPTY_DELIMITERS:
            message = f"Empty '{delim}{delim}' pair treated as text"
        else:
            message = f"Unterminated '{delim}' treated as text"
        self.sink.warn(code, message, line=line, column=column)


def resolve_inline(text: str) -> list[InlineSpan]:
    """Resolve ``text`` without collecting diagnostics."""
    return InlineResolver().resolve(text)


def join_lines(lines: list[list[InlineSpan]]) -> list[InlineSpan]:
    """Join per-line span lists with a plain newline.

    Plain text meeting at a line boundary is merged into one span; escaped
    spans are never merged.
    """
    out: list[InlineSpan] = []
    for idx, spans in enumerate(lines):
        if idx:
            _append_plain(out, "\n")
        for span in spans:
            if isinstance(span, PlainSpan) and not span.escaped:
                _append_plain(out, span.text)
            else:
                out.append(span)
    return out


def _append_plain(out: list[InlineSpan], text: str) -> None:
    last = out[-1] if out else None
    if isinstance(last, PlainSpan) and not last.escaped:
        out[-1] = PlainSpan(text=last.text + text)
    else:
        out.append(PlainSpan(text=text))
