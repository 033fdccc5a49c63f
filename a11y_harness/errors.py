"""Exception types raised by the scan harness."""
from __future__ import annotations

from pathlib import Path
from typing import Optional


class HarnessError(Exception):
    """Base class for harness failures."""


class ScanResultShapeError(HarnessError, ValueError):
    """An axe result is missing a field the flattener needs."""

    def __init__(self, rule_id: Optional[str], field: str) -> None:
        self.rule_id = rule_id
        self.field = field
        super().__init__(f"Violation {rule_id or '<unknown>'!s} is missing field '{field}'")


class PageScanError(HarnessError):
    """Navigation or the axe run failed for a single page."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Scan of {url} failed: {reason}")


class ResultWriteError(HarnessError):
    """A result spreadsheet could not be written."""

    def __init__(self, name: str, path: Path, reason: str) -> None:
        self.name = name
        self.path = path
        super().__init__(f"Could not write results for '{name}' to {path}: {reason}")


class ConsolidationError(HarnessError):
    """The merge of result files cannot produce any output."""


class NoResultFilesError(ConsolidationError):
    """No result file in the directory could be read."""
