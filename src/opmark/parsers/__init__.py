"""OpMark parsing stages and the parser that wires them together."""

from opmark.parsers.base import BaseParser
from opmark.parsers.opmark_parser import OpMarkParser, parse

__all__ = ["BaseParser", "OpMarkParser", "parse"]
