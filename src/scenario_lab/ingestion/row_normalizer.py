from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from ..config import INTEGER_BOUNDS, INTEGER_FIELDS, NUMERIC_FIELDS, TEXT_FIELDS, FallbackRule, IngestConfig
from ..errors import EmptyResult, RowProcessingError
from ..logging_utils import get_logger, log_skipped_row, log_stage


_CURRENCY_RX = re.compile(r"[\s$,£€₱₣₹¥₩₽₺]")

# Full names are checked before abbreviations.
MONTH_TOKENS: Tuple[Tuple[str, int], ...] = (
    ("january", 1), ("february", 2), ("march", 3), ("april", 4),
    ("may", 5), ("june", 6), ("july", 7), ("august", 8),
    ("september", 9), ("october", 10), ("november", 11), ("december", 12),
    ("jan", 1), ("feb", 2), ("mar", 3), ("apr", 4), ("jun", 6), ("jul", 7),
    ("aug", 8), ("sept", 9), ("sep", 9), ("oct", 10), ("nov", 11), ("dec", 12),
)

ACCOUNT_NUMERIC_COLUMNS = [
    "start_month",
    "start_year",
    "years_of_engagement",
    "end_year",
    "monthly_revenue",
    "monthly_volume",
]


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return value is pd.NA


def strip_currency(value: Any) -> float | None:
    """Parse a money-like cell: strips currency symbols, spaces and thousands separators.

    Parentheses denote negatives, e.g. ``(1,234.50)``. Returns None when unparseable.
    """
    if _is_missing(value):
        return None
    s = _CURRENCY_RX.sub("", str(value).strip())
    if s == "":
        return None
    neg = False
    if s.startswith("(") and s.endswith(")"):
        neg = True
        s = s[1:-1]
    try:
        val = float(s)
    except ValueError:
        return None
    return -val if neg else val


def parse_positive(value: Any) -> float | None:
    """Return a finite positive number parsed from ``value``, else None."""
    val = strip_currency(value)
    if val is None or not math.isfinite(val) or val <= 0:
        return None
    return val


def parse_month(value: Any) -> Optional[int]:
    """Resolve a month-of-start cell to 1..12.

    Month names (full or abbreviated) are matched case-insensitively by
    substring containment; otherwise an integer in [1, 12] is accepted.
    """
    if _is_missing(value):
        return None
    text = str(value).strip().lower()
    if not text:
        return None
    for token, month in MONTH_TOKENS:
        if token in text:
            return month
    try:
        number = float(text)
    except ValueError:
        return None
    if number.is_integer() and 1 <= number <= 12:
        return int(number)
    return None


def apply_fallback(rule: FallbackRule, rng: np.random.Generator, today: date) -> float:
    if rule.kind == "uniform":
        return float(rng.uniform(rule.low, rule.high))
    if rule.kind == "current_year":
        return float(today.year)
    return float(rule.value)


@dataclass
class NormalizationResult:
    accounts: pd.DataFrame
    rows_in: int
    diagnostics: List[str] = field(default_factory=list)
    skipped_positions: List[int] = field(default_factory=list)
    duplicate_positions: List[int] = field(default_factory=list)
    imputed: Dict[str, int] = field(default_factory=dict)

    @property
    def rows_out(self) -> int:
        return int(len(self.accounts))


def _text_value(row: Mapping[str, Any], headers: List[str]) -> Optional[str]:
    for header in headers:
        value = row.get(header)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _normalize_row(
    row: Mapping[str, Any],
    position: int,
    config: IngestConfig,
    rng: np.random.Generator,
    today: date,
) -> Dict[str, Any]:
    if not isinstance(row, Mapping):
        raise RowProcessingError(position, f"expected a header mapping, got {type(row).__name__}")

    record: Dict[str, Any] = {}
    imputed: List[str] = []

    for fld in TEXT_FIELDS:
        headers = config.headers_for(fld)
        if not headers and fld != "account":
            continue
        value = _text_value(row, headers)
        if value is None:
            if fld == "account":
                value = config.account_placeholder.format(index=position)
            else:
                value = config.text_default(fld)
        record[fld] = value

    for fld in NUMERIC_FIELDS:
        value = None
        for header in config.headers_for(fld):
            value = parse_positive(row.get(header))
            if value is not None:
                break
        if value is not None and fld in INTEGER_FIELDS:
            low, high = INTEGER_BOUNDS[fld]
            if not low <= round(value) <= high:
                value = None
        if value is None:
            value = apply_fallback(config.fallbacks[fld], rng, today)
            imputed.append(fld)
        record[fld] = int(round(value)) if fld in INTEGER_FIELDS else float(value)

    month = None
    for header in config.headers_for("start_month"):
        month = parse_month(row.get(header))
        if month is not None:
            break
    if month is None:
        month = today.month
        imputed.append("start_month")
    record["start_month"] = int(month)

    record["end_year"] = record["start_year"] + record["years_of_engagement"] - 1
    record["imputed_fields"] = ";".join(imputed)
    return record


def account_columns(config: IngestConfig) -> List[str]:
    text = ["account"] + [f for f in config.mapped_fields() if f in TEXT_FIELDS and f != "account"]
    return text + ACCOUNT_NUMERIC_COLUMNS + ["imputed_fields"]


def normalize_rows(
    rows: pd.DataFrame,
    config: IngestConfig,
    rng: Optional[np.random.Generator] = None,
    today: Optional[date] = None,
) -> NormalizationResult:
    """Turn raw header→value rows into one account record per unique name.

    Row failures are skipped with a diagnostic carrying the 1-based row
    position. The first row for an account name wins; later rows with the
    same name are ignored. Fallback draws come from ``rng`` (seeded from
    ``config.seed`` when omitted) in row order, so results are reproducible.

    Raises EmptyResult when no usable rows remain.
    """

    logger = get_logger("normalize")
    rng = rng if rng is not None else np.random.default_rng(config.seed)
    today = today or date.today()

    raw_rows = rows.to_dict(orient="records") if isinstance(rows, pd.DataFrame) else list(rows)
    result = NormalizationResult(accounts=pd.DataFrame(), rows_in=len(raw_rows))
    records: List[Dict[str, Any]] = []
    seen: set[str] = set()

    for position, row in enumerate(raw_rows, start=1):
        try:
            record = _normalize_row(row, position, config, rng, today)
        except RowProcessingError as exc:
            result.diagnostics.append(log_skipped_row(logger, exc.position, exc.reason))
            result.skipped_positions.append(position)
            continue
        except Exception as exc:
            result.diagnostics.append(log_skipped_row(logger, position, str(exc) or type(exc).__name__))
            result.skipped_positions.append(position)
            continue

        if record["account"] in seen:
            result.diagnostics.append(
                log_skipped_row(logger, position, f"duplicate account '{record['account']}' ignored")
            )
            result.duplicate_positions.append(position)
            continue
        seen.add(record["account"])
        for fld in filter(None, record["imputed_fields"].split(";")):
            result.imputed[fld] = result.imputed.get(fld, 0) + 1
        records.append(record)

    columns = account_columns(config)
    accounts = pd.DataFrame(records, columns=columns)
    for col in ("start_month", "start_year", "years_of_engagement", "end_year"):
        accounts[col] = accounts[col].astype("int64")
    for col in ("monthly_revenue", "monthly_volume"):
        accounts[col] = accounts[col].astype("float64")
    result.accounts = accounts

    log_stage(
        logger,
        "normalize",
        result.rows_in,
        result.rows_out,
        skipped=len(result.skipped_positions),
        duplicates=len(result.duplicate_positions),
        imputed=sum(result.imputed.values()),
    )
    if accounts.empty:
        raise EmptyResult(diagnostics=result.diagnostics)
    return result
