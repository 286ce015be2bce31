"""Exception hierarchy for the OpMark parser front-end.

The grammar itself is total: nothing in the scanner, inline resolver,
block builder or assembler raises. These errors belong to the layers that
read files, load configuration and reload saved IR.
"""


class OpMarkError(Exception):
    """Base exception for all opmark errors."""


class ParseError(OpMarkError):
    """Raised when an input document or IR file cannot be read."""


class ConfigError(OpMarkError):
    """Raised when configuration is invalid or missing."""
