"""Error taxonomy for workbook ingestion.

Every error renders a human-readable message through ``str()`` so callers can
surface it directly.
"""
from __future__ import annotations

from typing import List, Optional, Sequence


class ScenarioLabError(ValueError):
    """Base class for ingestion failures."""


class EmptyInput(ScenarioLabError):
    def __init__(self, message: str = "Excel file is empty"):
        super().__init__(message)


class InsufficientColumns(ScenarioLabError):
    """Too few expected headers were recognized in the workbook."""

    def __init__(self, matched: Sequence[str], available: Sequence[str], required: int):
        self.matched: List[str] = list(matched)
        self.available: List[str] = list(available)
        self.required = int(required)
        found = ", ".join(self.matched) if self.matched else "none"
        super().__init__(
            f"Could not find enough expected columns (need {self.required}). "
            f"Found: {found}. Available columns: {', '.join(self.available)}"
        )


class RowProcessingError(ScenarioLabError):
    """Raised while normalizing a single row; recovered by skipping the row."""

    def __init__(self, position: int, reason: str):
        self.position = int(position)
        self.reason = reason
        super().__init__(f"Skipping row {self.position}: {reason}")


class EmptyResult(ScenarioLabError):
    def __init__(self, message: str = "No valid data rows found after transformation", diagnostics: Optional[Sequence[str]] = None):
        self.diagnostics: List[str] = list(diagnostics or [])
        super().__init__(message)


class ReadFailure(ScenarioLabError):
    def __init__(self, message: str = "Failed to read file"):
        super().__init__(message)
