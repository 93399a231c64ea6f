"""
Diagnostics channel for non-fatal events.

Resolution and assembly report misses here instead of logging inline; the
caller owns the log, inspects it after the run and decides what to show.
Every event is also forwarded to loguru at its level.
"""

from enum import Enum
from typing import Dict, Iterator, List, Optional

from pydantic import BaseModel

from lsp2gxl.logging_config import logger


class DiagnosticCode(str, Enum):
    UNKNOWN_DOCUMENT = "unknown_document"
    NOT_WITHIN_SYMBOL = "not_within_symbol"
    NOT_A_NODE = "not_a_node"
    IMPORT_BINDING = "import_binding"
    MISSING_PARENT_DIRECTORY = "missing_parent_directory"
    CONTAINER_CYCLE = "container_cycle"


# Structural problems are warnings, expected misses are debug noise.
DIAGNOSTIC_LEVELS: Dict[DiagnosticCode, str] = {
    DiagnosticCode.UNKNOWN_DOCUMENT: "DEBUG",
    DiagnosticCode.NOT_WITHIN_SYMBOL: "DEBUG",
    DiagnosticCode.NOT_A_NODE: "WARNING",
    DiagnosticCode.IMPORT_BINDING: "DEBUG",
    DiagnosticCode.MISSING_PARENT_DIRECTORY: "WARNING",
    DiagnosticCode.CONTAINER_CYCLE: "WARNING",
}


class Diagnostic(BaseModel):
    code: DiagnosticCode
    message: str
    uri: Optional[str] = None
    symbol: Optional[str] = None


class DiagnosticLog:
    """Collects diagnostics emitted during one run."""

    def __init__(self):
        self._events: List[Diagnostic] = []

    def emit(
        self,
        code: DiagnosticCode,
        message: str,
        uri: Optional[str] = None,
        symbol: Optional[str] = None,
    ) -> Diagnostic:
        event = Diagnostic(code=code, message=message, uri=uri, symbol=symbol)
        self._events.append(event)
        logger.log(DIAGNOSTIC_LEVELS[code], message)
        return event

    def of(self, code: DiagnosticCode) -> List[Diagnostic]:
        return [event for event in self._events if event.code == code]

    def counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for event in self._events:
            counts[event.code.value] = counts.get(event.code.value, 0) + 1
        return counts

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)
