"""
Workbook ingestion: read the first sheet, certify its headers, and normalize
each row into one account record.
"""

from .column_resolver import ColumnResolution, resolve_columns
from .reader import read_workbook
from .row_normalizer import NormalizationResult, normalize_rows, parse_month, strip_currency

__all__ = [
    "ColumnResolution",
    "NormalizationResult",
    "normalize_rows",
    "parse_month",
    "read_workbook",
    "resolve_columns",
    "strip_currency",
]
