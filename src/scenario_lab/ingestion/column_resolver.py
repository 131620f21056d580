from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from ..config import IngestConfig
from ..errors import InsufficientColumns
from ..logging_utils import get_logger, log_stage


@dataclass(frozen=True)
class ColumnResolution:
    """Expected headers that were recognized and the workbook columns that matched them."""

    matched: List[str] = field(default_factory=list)
    matched_columns: List[str] = field(default_factory=list)
    available: List[str] = field(default_factory=list)
    required: int = 0

    @property
    def matched_count(self) -> int:
        return len(self.matched_columns)


def header_matches(expected: str, present: str) -> bool:
    """Case-insensitive substring containment in either direction.

    Blank headers never match (the empty string is contained in everything).
    """
    a = str(expected).strip().lower()
    b = str(present).strip().lower()
    if not a or not b:
        return False
    return a in b or b in a


def resolve_columns(headers: Iterable[object], config: IngestConfig) -> ColumnResolution:
    """Certify that the workbook is probably in the configured layout.

    ``matched`` lists the configured primary headers that match any present
    header. One present column may satisfy several expected headers, so the
    threshold counts distinct present columns: a workbook with a single
    vaguely named column never passes. Raises InsufficientColumns when fewer
    than ``config.min_matched_columns`` columns match. No schema is bound here;
    fields are still looked up by exact name during normalization.
    """

    logger = get_logger("resolve")
    available = [str(h) for h in headers]
    expected = config.primary_headers()
    matched = [e for e in expected if any(header_matches(e, present) for present in available)]
    matched_columns = [p for p in available if any(header_matches(e, p) for e in expected)]
    log_stage(
        logger,
        "resolve",
        len(available),
        len(matched_columns),
        layout=config.name,
        expected_matched=len(matched),
        required=config.min_matched_columns,
    )
    if len(matched_columns) < config.min_matched_columns:
        raise InsufficientColumns(matched, available, config.min_matched_columns)
    return ColumnResolution(
        matched=matched,
        matched_columns=matched_columns,
        available=available,
        required=config.min_matched_columns,
    )
