from __future__ import annotations

from typing import Literal, Optional

import pandas as pd

from .config import ModelConstants
from .logging_utils import get_logger, log_stage
from .temporal_expander import DEFAULT_CONSTANTS, MONTH_LABELS, week_to_month


Granularity = Literal["weekly", "monthly", "yearly"]
MEASURES = ["revenue", "volume"]


def _normalize_granularity(granularity: str) -> str:
    g = str(granularity).strip().lower()
    if g not in ("weekly", "monthly", "yearly"):
        raise ValueError(f"Unsupported granularity '{granularity}'. Use weekly, monthly or yearly.")
    return g


def group_by_time(
    records: pd.DataFrame,
    granularity: Granularity = "weekly",
    constants: Optional[ModelConstants] = None,
) -> pd.DataFrame:
    """Sum revenue/volume per time bucket.

    - weekly: one row per week present, ascending
    - monthly: one row per month present (1..12), ascending, with ``month_name``
    - yearly: a single row tagged with the first record's year ("N/A" if empty)
    """

    constants = constants or DEFAULT_CONSTANTS
    logger = get_logger("aggregate")
    g = _normalize_granularity(granularity)

    if g == "weekly":
        out = records.groupby("week", sort=True)[MEASURES].sum().reset_index()
        out = out[["week"] + MEASURES]
    elif g == "monthly":
        months = pd.Series(week_to_month(records["week"].to_numpy(), constants), index=records.index, name="month")
        out = records[MEASURES].groupby(months, sort=True).sum().reset_index()
        out["month"] = out["month"].astype("int64")
        out["month_name"] = out["month"].map(lambda m: MONTH_LABELS[m - 1])
        out = out[["month", "month_name"] + MEASURES]
    else:
        year = records["year"].iloc[0] if not records.empty else "N/A"
        out = pd.DataFrame(
            [{"year": year, "revenue": float(records["revenue"].sum()), "volume": float(records["volume"].sum())}]
        )

    log_stage(logger, f"aggregate:{g}", len(records), len(out))
    return out


def group_by_key(records: pd.DataFrame, dimension: str) -> pd.DataFrame:
    """Sum revenue/volume per distinct ``dimension`` value, sorted by revenue descending.

    Equal revenues keep their encounter order.
    """
    if dimension not in records.columns:
        raise ValueError(f"Unknown grouping dimension '{dimension}'")
    out = records.groupby(dimension, sort=False)[MEASURES].sum().reset_index()
    return out.sort_values("revenue", ascending=False, kind="stable").reset_index(drop=True)


def status_by_agent(records: pd.DataFrame) -> pd.DataFrame:
    """Revenue per agent split by status, one column per status (0 where absent)."""
    if records.empty:
        return pd.DataFrame(columns=["agent"])
    agents = pd.unique(records["agent"])
    statuses = pd.unique(records["status"])
    pivot = (
        records.groupby(["agent", "status"], sort=False)["revenue"]
        .sum()
        .unstack("status", fill_value=0.0)
        .reindex(index=agents, columns=statuses, fill_value=0.0)
    )
    pivot.columns.name = None
    return pivot.rename_axis("agent").reset_index()


def top_accounts(records: pd.DataFrame, n: int = 10, measure: str = "revenue") -> pd.DataFrame:
    """Largest ``n`` accounts by ``measure``."""
    if measure not in MEASURES:
        raise ValueError(f"measure must be one of {MEASURES}")
    per_account = group_by_key(records, "account")
    return per_account.sort_values(measure, ascending=False, kind="stable").head(int(n)).reset_index(drop=True)
