"""OpMark parser: scanner → block builder → document assembler.

Each call works on its own scanner, builder and diagnostic sink, so one
parser instance holds no state between documents beyond the diagnostics
of its most recent run.
"""

from __future__ import annotations

import importlib.metadata
import logging
from pathlib import Path
from typing import Iterator, Optional

from opmark.diagnostics import Diagnostic, DiagnosticSink
from opmark.exceptions import ParseError
from opmark.ir.schema import Block, Document, DocumentMetadata, Page
from opmark.parsers.assembler import DocumentAssembler
from opmark.parsers.base import BaseParser
from opmark.parsers.blocks import BlockBuilder, Event, PageBreak
from opmark.parsers.scanner import scan

logger = logging.getLogger(__name__)


class OpMarkParser(BaseParser):
    """Parser for OpMark presentation documents."""

    def __init__(self) -> None:
        self.diagnostics: list[Diagnostic] = []

    @property
    def name(self) -> str:
        return "opmark"

    @property
    def version(self) -> str:
        try:
            return importlib.metadata.version("opmark")
        except importlib.metadata.PackageNotFoundError:
            return "unknown"

    def events(self, text: str) -> Iterator[Event]:
        """Lazily yield blocks and page breaks in source order."""
        sink = DiagnosticSink()
        self.diagnostics = sink.items
        return BlockBuilder(sink).build(scan(text))

    def iter_pages(self, text: str) -> Iterator[Page]:
        """Yield each page once its last block has been read."""
        return DocumentAssembler().iter_pages(self.events(text))

    def iter_blocks(self, text: str) -> Iterator[tuple[int, Block]]:
        """Yield ``(page_index, block)`` pairs in source order."""
        page = 0
        for event in self.events(text):
            if isinstance(event, PageBreak):
                page += 1
            else:
                yield page, event

    def parse(
        self, text: str, metadata: Optional[DocumentMetadata] = None
    ) -> Document:
        """Parse ``text`` into a fully built Document. Never fails."""
        if metadata is None:
            metadata = DocumentMetadata(parser=self.name, parser_version=self.version)
        return DocumentAssembler().assemble(self.events(text), metadata)

    def parse_file(self, path: Path, encoding: str = "utf-8") -> Document:
        """Read and parse a document file.

        Raises:
            ParseError: If the file is missing or cannot be decoded.
        """
        path = Path(path)
        try:
            text = path.read_text(encoding=encoding)
        except FileNotFoundError:
            raise ParseError(f"Input file not found: {path}")
        except (UnicodeDecodeError, LookupError) as exc:
            raise ParseError(f"Cannot decode {path} as {encoding}: {exc}") from exc
        except OSError as exc:
            raise ParseError(f"Cannot read {path}: {exc}") from exc

        metadata = DocumentMetadata(
            source_file=str(path),
            source_hash=self.file_hash(path),
            parser=self.name,
            parser_version=self.version,
        )
        doc = self.parse(text, metadata)
        logger.debug(
            "Parsed %s: %d page(s), %d diagnostic(s)",
            path, len(doc.pages), len(self.diagnostics),
        )
        return doc


def parse(text: str) -> Document:
    """Parse OpMark ``text`` into a Document."""
    return OpMarkParser().parse(text)
