"""
Diagnostic sink — where recoverable problems are reported.

Transform failures and unresolvable sources never propagate out of the
core; they are described here instead.  The default sink forwards to the
``mapframe.diagnostics`` logger.
"""

from __future__ import annotations

import logging
from typing import Protocol

CATEGORY_CRS = "CRS"
CATEGORY_LAYERS = "Layers"


class DiagnosticSink(Protocol):
    def log(self, message: str, category: str) -> None: ...


class LoggingDiagnosticSink:
    """Writes diagnostics to :mod:`logging`.  CRS problems are warnings."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger or logging.getLogger("mapframe.diagnostics")

    def log(self, message: str, category: str) -> None:
        level = logging.WARNING if category == CATEGORY_CRS else logging.INFO
        self.logger.log(level, "[%s] %s", category, message)
