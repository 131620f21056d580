"""Expand normalized accounts into a 52-week revenue/volume series.

For each account and week ``w`` of the report year:

    month(w)    = ceil(w / weeks_per_month), clamped to 1..12
    contributes = (year > start_year or (year == start_year and month(w) >= start_month))
                  and year <= end_year
    seasonal(w) = 1 + amplitude * sin(2π w / 52)
    revenue(w)  = monthly_revenue / weeks_per_month * seasonal(w)   when contributing, else 0

Accounts produce nothing before their committed start and nothing after the
end of their engagement window.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np
import pandas as pd

from .config import ModelConstants
from .logging_utils import get_logger, log_stage


MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
DEFAULT_CONSTANTS = ModelConstants()

WEEKLY_ATTRIBUTE_ORDER = [
    "account",
    "industry",
    "sales_category",
    "city",
    "area",
    "territory_code",
    "agent",
    "status",
]
WINDOW_COLUMNS = ["start_month", "start_year", "years_of_engagement", "end_year"]


def week_to_month(week, constants: ModelConstants = DEFAULT_CONSTANTS):
    """Map week number(s) to month 1..12. Accepts a scalar or array-like."""
    months = np.clip(np.ceil(np.asarray(week, dtype=float) / constants.weeks_per_month), 1, 12).astype(int)
    if np.ndim(months) == 0:
        return int(months)
    return months


def seasonal_factor(week, constants: ModelConstants = DEFAULT_CONSTANTS):
    weeks = np.asarray(week, dtype=float)
    factor = 1.0 + constants.seasonal_amplitude * np.sin(2 * np.pi * weeks / constants.weeks_per_year)
    if np.ndim(factor) == 0:
        return float(factor)
    return factor


@dataclass
class ExpansionResult:
    weekly: pd.DataFrame
    accounts: pd.DataFrame


def weekly_columns(accounts: pd.DataFrame) -> list[str]:
    attrs = [c for c in WEEKLY_ATTRIBUTE_ORDER if c in accounts.columns]
    return ["week", "year"] + attrs + ["revenue", "volume"] + WINDOW_COLUMNS


def expand_accounts(
    accounts: pd.DataFrame,
    year: int,
    constants: Optional[ModelConstants] = None,
) -> ExpansionResult:
    """Produce 52 weekly records per account for ``year``.

    Returns the weekly frame (account-major, week ascending) and a copy of
    ``accounts`` with ``base_revenue``/``base_volume`` set to the sum of each
    account's own weekly values.
    """

    constants = constants or DEFAULT_CONSTANTS
    logger = get_logger("expand")
    year = int(year)

    weeks = pd.DataFrame({"week": np.arange(1, constants.weeks_per_year + 1, dtype="int64")})
    grid = accounts.reset_index(drop=True).reset_index().rename(columns={"index": "_order"}).merge(weeks, how="cross")

    month = week_to_month(grid["week"].to_numpy(), constants)
    contributes = (
        (year > grid["start_year"].to_numpy())
        | ((year == grid["start_year"].to_numpy()) & (month >= grid["start_month"].to_numpy()))
    ) & (year <= grid["end_year"].to_numpy())
    seasonal = seasonal_factor(grid["week"].to_numpy(), constants)

    grid["year"] = year
    grid["revenue"] = np.where(contributes, grid["monthly_revenue"].to_numpy() / constants.weeks_per_month * seasonal, 0.0)
    grid["volume"] = np.where(contributes, grid["monthly_volume"].to_numpy() / constants.weeks_per_month * seasonal, 0.0)

    totals = grid.groupby("_order", sort=True)[["revenue", "volume"]].sum()
    enriched = accounts.reset_index(drop=True).copy()
    enriched["base_revenue"] = totals["revenue"].reindex(enriched.index, fill_value=0.0).to_numpy()
    enriched["base_volume"] = totals["volume"].reindex(enriched.index, fill_value=0.0).to_numpy()

    weekly = grid.sort_values(["_order", "week"], kind="stable")[weekly_columns(accounts)].reset_index(drop=True)
    log_stage(
        logger,
        "expand",
        len(accounts),
        len(weekly),
        year=year,
        contributing_weeks=int(contributes.sum()),
    )
    return ExpansionResult(weekly=weekly, accounts=enriched)
