"""Abstract base class for document parsers."""

from __future__ import annotations

import hashlib
from abc import ABC, abstractmethod
from pathlib import Path

from opmark.ir.schema import Document


class BaseParser(ABC):
    """Base class that all markup parser implementations must extend."""

    @abstractmethod
    def parse(self, text: str) -> Document:
        """Parse document text and return its IR representation.

        Args:
            text: The full document source.

        Returns:
            A Document representing the parsed source.
        """

    @abstractmethod
    def parse_file(self, path: Path, encoding: str = "utf-8") -> Document:
        """Read and parse a document file.

        Raises:
            ParseError: If the file cannot be read or decoded.
        """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the parser name (e.g. 'opmark')."""

    @property
    @abstractmethod
    def version(self) -> str:
        """Return the parser version string."""

    @staticmethod
    def file_hash(path: Path) -> str:
        """Compute SHA-256 hash of a file for IR metadata."""
        h = hashlib.sha256()
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(8192), b""):
                h.update(chunk)
        return h.hexdigest()
