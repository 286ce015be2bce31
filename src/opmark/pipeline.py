"""Pipeline orchestrator: read → parse → (optional IR save) → report.

Wraps the pure OpMark parser with file handling, IR checkpoints and a
parse report for front-ends such as the CLI.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from pydantic import ValidationError

from opmark.config import Config
from opmark.exceptions import ParseError
from opmark.ir.report import ParseReport
from opmark.ir.schema import Document
from opmark.parsers.opmark_parser import OpMarkParser

logger = logging.getLogger(__name__)


class Pipeline:
    """Orchestrates OpMark file → IR conversion."""

    def __init__(self, config: Config | None = None):
        self.config = config or Config.default()
        self.last_report: ParseReport | None = None

    def parse(self, source_path: Path) -> Document:
        """Parse an OpMark file to IR and record a report.

        Args:
            source_path: Input OpMark file.

        Returns:
            The parsed Document.
        """
        source_path = Path(source_path)
        logger.info("Parsing %s", source_path)

        parser = OpMarkParser()
        t0 = time.monotonic()
        doc = parser.parse_file(source_path, encoding=self.config.input.encoding)
        elapsed = time.monotonic() - t0

        report = ParseReport.from_document(doc, parser.diagnostics)
        report.parse_time_seconds = elapsed
        self.last_report = report

        for diag in parser.diagnostics:
            logger.debug("%s: %s", source_path, diag)
        return doc

    def parse_text(self, text: str) -> Document:
        """Parse in-memory OpMark text and record a report."""
        parser = OpMarkParser()
        doc = parser.parse(text)
        self.last_report = ParseReport.from_document(doc, parser.diagnostics)
        return doc

    def convert(
        self,
        source_path: Path,
        output_path: Path,
        save_report: bool = False,
        report_path: Path | None = None,
    ) -> Path:
        """Parse a file and write its IR JSON.

        Args:
            source_path: Input OpMark file.
            output_path: Output IR JSON file.
            save_report: Whether to save a parse report JSON.
            report_path: Custom path for report JSON. Defaults to {output_stem}.report.json.

        Returns:
            Path to the written IR JSON file.
        """
        output_path = Path(output_path)
        doc = self.parse(source_path)
        self.save_ir(doc, output_path)

        if save_report and self.last_report is not None:
            if report_path is None:
                report_path = output_path.with_suffix(".report.json")
            Path(report_path).write_text(self.last_report.to_json(), encoding="utf-8")
            logger.info("Saved report to %s", report_path)

        return output_path

    def inspect(self, source_path: Path) -> str:
        """Parse a file and return its IR as formatted JSON string."""
        doc = self.parse(source_path)
        return self.dump(doc)

    def dump(self, doc: Document) -> str:
        """Serialize a Document using the configured output options."""
        return doc.to_json(
            indent=self.config.output.indent,
            exclude_none=self.config.output.exclude_none,
        )

    def save_ir(self, doc: Document, path: Path) -> Path:
        """Save IR to a JSON file.

        Args:
            doc: The document IR to save.
            path: Output JSON file path.

        Returns:
            The path written to.
        """
        path = Path(path)
        logger.info("Saving IR to %s", path)
        path.write_text(self.dump(doc), encoding="utf-8")
        return path

    @staticmethod
    def load_ir(ir_path: Path) -> Document:
        """Load a Document from a saved IR JSON file.

        Raises:
            ParseError: If the file is missing or is not valid IR.
        """
        ir_path = Path(ir_path)
        logger.info("Loading IR from %s", ir_path)
        try:
            json_str = ir_path.read_text(encoding="utf-8")
            return Document.from_json(json_str)
        except FileNotFoundError:
            raise ParseError(f"IR file not found: {ir_path}")
        except ValidationError as exc:
            raise ParseError(f"Invalid IR in {ir_path}: {exc}") from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise ParseError(f"Failed to load IR from {ir_path}: {exc}") from exc
