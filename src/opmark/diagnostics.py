"""Non-fatal diagnostics collected while parsing.

Diagnostics are purely additive: the parse result is identical whether or
not anybody looks at them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class DiagnosticCode(str, Enum):
    UNTERMINATED_DELIMITER = "unterminated-delimiter"
    EMPTY_DELIMITERS = "empty-delimiters"
    UNTERMINATED_FENCE = "unterminated-fence"
    HEADING_LEVEL_CLAMPED = "heading-level-clamped"


@dataclass(frozen=True)
class Diagnostic:
    """A warning about source text that was parsed leniently."""

    code: DiagnosticCode
    message: str
    line: Optional[int] = None
    column: Optional[int] = None

    def __str__(self) -> str:
        where = ""
        if self.line is not None:
            where = f"line {self.line}"
            if self.column is not None:
                where += f", col {self.column}"
            where += ": "
        return f"{where}{self.message} [{self.code.value}]"


class DiagnosticSink:
    """Collects diagnostics for a single parse invocation."""

    def __init__(self) -> None:
        self.items: list[Diagnostic] = []

    def warn(
        self,
        code: DiagnosticCode,
        message: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> None:
        diag = Diagnostic(code=code, message=message, line=line, column=column)
        logger.debug("%s", diag)
        self.items.append(diag)

    def __len__(self) -> int:
        return len(self.items)
