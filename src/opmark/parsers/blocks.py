"""Block builder: classified lines → blocks and page-break signals.

A small state machine (idle, paragraph, quote, list, fence) groups
consecutive lines. Single-line constructs (headings, separators,
transitions, standalone images and links) close whatever is open and are
emitted at once. Nothing here raises: anything still open at end of
input is flushed as it stands.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Iterator, Optional, Union

from opmark.diagnostics import DiagnosticCode, DiagnosticSink
from opmark.ir.schema import (
    Block,
    CodeBlock,
    HeadingBlock,
    ImageBlock,
    ImageSpan,
    InlineSpan,
    LinkBlock,
    ListBlock,
    ListItem,
    ParagraphBlock,
    QuoteBlock,
    SeparatorBlock,
    TransitionBlock,
    TransitionEndBlock,
)
from opmark.parsers.inline import AtomicSpan, InlineResolver, join_lines, match_atomic_line
from opmark.parsers.scanner import Line, LineKind

MAX_HEADING_LEVEL = 5
FENCE = "```"


@dataclass(frozen=True)
class PageBreak:
    """Signal to the assembler that the current page ends here."""

    line: Optional[int] = None


Event = Union[Block, PageBreak]


class _State(Enum):
    IDLE = "idle"
    PARAGRAPH = "paragraph"
    QUOTE = "quote"
    LIST = "list"
    FENCE = "fence"


# ---------------------------------------------------------------------------
# Internal data structure for accumulating list items before freezing
# ---------------------------------------------------------------------------

@dataclass
class _PendingListItem:
    """Temporary holder for a list item while its list is still open."""
    line: Line
    runs: list[InlineSpan] = field(default_factory=list)
    children: list[_PendingListItem] = field(default_factory=list)


def _freeze_items(pending: list[_PendingListItem]) -> list[ListItem]:
    items: list[ListItem] = []
    number = 0
    for item in pending:
        ordered = item.line.kind is LineKind.ORDERED_ITEM
        if ordered:
            number += 1
        items.append(
            ListItem(
                text=item.line.text,
                runs=item.runs,
                ordered=ordered,
                number=number if ordered else None,
                indent=item.line.indent,
                line=item.line.number,
                children=_freeze_items(item.children),
            )
        )
    return items


def _column(line: Line) -> int:
    """1-based source column where the line's payload text starts."""
    return len(line.raw.rstrip()) - len(line.text) + 1


class BlockBuilder:
    """Groups scanner lines into blocks for one parse invocation."""

    def __init__(self, sink: DiagnosticSink | None = None):
        self.sink = sink
        self.resolver = InlineResolver(sink)
        self._state = _State.IDLE
        self._lines: list[Line] = []
        self._list_ordered = False
        self._list_items: list[_PendingListItem] = []
        # (indent, siblings) for each open nesting level of the current list
        self._list_stack: list[tuple[int, list[_PendingListItem]]] = []
        # the implicit first group of a page is order 0
        self._next_transition = 1

    def build(self, lines: Iterable[Line]) -> Iterator[Event]:
        """Yield blocks and page breaks in source order."""
        for line in lines:
            yield from self.feed(line)
        yield from self.finish()

    def feed(self, line: Line) -> list[Event]:
        """Consume one line, returning any events it completes."""
        if self._state is _State.FENCE:
            if line.kind is LineKind.FENCE and line.content == FENCE:
                return [self._close_fence()]
            self._lines.append(line)
            return []

        kind = line.kind
        if kind is LineKind.TEXT:
            atom = match_atomic_line(line.text)
            if atom is not None:
                return self._flush() + [self._atomic_block(atom, line)]
            return self._extend(_State.PARAGRAPH, line)
        if kind is LineKind.QUOTE:
            return self._extend(_State.QUOTE, line)
        if kind.is_list_item:
            return self._list_line(line)

        events = self._flush()
        if kind is LineKind.PAGE_BREAK:
            self._next_transition = 1
            events.append(PageBreak(line=line.number))
        elif kind is LineKind.HEADING:
            events.append(self._heading(line))
        elif kind is LineKind.SEPARATOR:
            direction = "vertical" if line.value == "v" else "horizontal"
            events.append(SeparatorBlock(line=line.number, direction=direction))
        elif kind is LineKind.TRANSITION:
            order = int(line.value) if line.value else self._next_transition
            self._next_transition = order + 1
            events.append(TransitionBlock(line=line.number, order=order))
        elif kind is LineKind.TRANSITION_END:
            events.append(TransitionEndBlock(line=line.number))
        elif kind is LineKind.FENCE:
            self._state = _State.FENCE
            self._lines = [line]
        return events

    def finish(self) -> list[Event]:
        """Flush whatever is still open at end of input."""
        events: list[Event] = []
        while self._state is _State.FENCE:
            # No closing fence: read the fence and everything after it again
            # as ordinary lines.
            pending = self._lines
            opener = pending[0]
            self._state = _State.IDLE
            self._lines = []
            if self.sink is not None:
                self.sink.warn(
                    DiagnosticCode.UNTERMINATED_FENCE,
                    "Code fence is never closed; treated as text",
                    line=opener.number,
                )
            events += self.feed(
                replace(opener, kind=LineKind.TEXT, text=opener.content, value=None)
            )
            for line in pending[1:]:
                events += self.feed(line)
        events += self._flush()
        return events

    # ------------------------------------------------------------------
    # Multi-line blocks
    # ------------------------------------------------------------------

    def _extend(self, state: _State, line: Line) -> list[Event]:
        if self._state is state:
            self._lines.append(line)
            return []
        events = self._flush()
        self._state = state
        self._lines = [line]
        return events

    def _flush(self) -> list[Event]:
        state = self._state
        lines = self._lines
        self._state = _State.IDLE
        self._lines = []

        if state is _State.PARAGRAPH:
            text, runs = self._resolve_lines(lines)
            return [ParagraphBlock(line=lines[0].number, text=text, runs=runs)]
        if state is _State.QUOTE:
            text, runs = self._resolve_lines(lines)
            return [QuoteBlock(line=lines[0].number, text=text, runs=runs)]
        if state is _State.LIST:
            block = ListBlock(
                line=self._list_items[0].line.number,
                ordered=self._list_ordered,
                items=_freeze_items(self._list_items),
            )
            self._list_items = []
            self._list_stack = []
            return [block]
        return []

    def _resolve_lines(self, lines: list[Line]) -> tuple[str, list[InlineSpan]]:
        text = "\n".join(line.text for line in lines)
        runs = join_lines(
            [self.resolver.resolve(line.text, line.number, _column(line)) for line in lines]
        )
        return text, runs

    def _list_line(self, line: Line) -> list[Event]:
        ordered = line.kind is LineKind.ORDERED_ITEM
        events: list[Event] = []

        if self._state is _State.LIST:
            depth, nested = self._landing(line.indent)
            # A change of marker kind only splits the list at its top level
            if depth == 1 and not nested and ordered != self._list_ordered:
                events = self._flush()

        if self._state is not _State.LIST:
            events += self._flush()
            self._state = _State.LIST
            self._list_ordered = ordered
            self._list_items = []
            self._list_stack = [(line.indent, self._list_items)]
            depth, nested = 1, False

        del self._list_stack[depth:]
        if nested:
            parent = self._list_stack[-1][1][-1]
            self._list_stack.append((line.indent, parent.children))

        runs = self.resolver.resolve(line.text, line.number, _column(line))
        self._list_stack[-1][1].append(_PendingListItem(line=line, runs=runs))
        return events

    def _landing(self, indent: int) -> tuple[int, bool]:
        """Nesting level an item with ``indent`` lands on.

        Returns the number of open levels kept and whether the item opens
        a new level below the last of them.
        """
        depth = len(self._list_stack)
        while depth > 1 and indent < self._list_stack[depth - 1][0]:
            depth -= 1
        return depth, indent > self._list_stack[depth - 1][0]

    def _close_fence(self) -> CodeBlock:
        opener, *body = self._lines
        self._state = _State.IDLE
        self._lines = []
        return CodeBlock(
            line=opener.number,
            code="\n".join(line.raw for line in body),
            language=opener.value,
        )

    # ------------------------------------------------------------------
    # Single-line blocks
    # ------------------------------------------------------------------

    def _heading(self, line: Line) -> HeadingBlock:
        level = int(line.value)
        if level > MAX_HEADING_LEVEL:
            if self.sink is not None:
                self.sink.warn(
                    DiagnosticCode.HEADING_LEVEL_CLAMPED,
                    f"Heading level {level} clamped to {MAX_HEADING_LEVEL}",
                    line=line.number,
                    column=1,
                )
            level = MAX_HEADING_LEVEL
        runs = self.resolver.resolve(line.text, line.number, _column(line))
        return HeadingBlock(line=line.number, level=level, text=line.text, runs=runs)

    @staticmethod
    def _atomic_block(atom: AtomicSpan, line: Line) -> Block:
        if isinstance(atom, ImageSpan):
            return ImageBlock(line=line.number, alt=atom.alt, src=atom.src, style=atom.style)
        return LinkBlock(
            line=line.number, label=atom.label, url=atom.url, autolink=atom.autolink
        )
