"""YTD / MTD / run-rate forecast arithmetic over monthly aggregates.

    ytd           = Σ measure for months <= cutoff
    mtd           = measure of the cutoff month (0 if absent)
    avg_per_month = ytd / cutoff            (0 when cutoff <= 0)
    forecast      = ytd + (12 - cutoff) * avg_per_month * (1 + adj_pct / 100)
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Optional

import pandas as pd

from .aggregation import MEASURES, group_by_time, top_accounts
from .config import ModelConstants


MONTHS_PER_YEAR = 12


def _check_cutoff(cutoff: int) -> int:
    cutoff = int(cutoff)
    if cutoff > MONTHS_PER_YEAR:
        raise ValueError(f"month cutoff must be <= {MONTHS_PER_YEAR}, got {cutoff}")
    return cutoff


def _check_measure(measure: str) -> None:
    if measure not in MEASURES:
        raise ValueError(f"measure must be one of {MEASURES}")


def ytd(monthly: pd.DataFrame, cutoff: int, measure: str = "revenue") -> float:
    _check_measure(measure)
    cutoff = _check_cutoff(cutoff)
    if monthly.empty:
        return 0.0
    return float(monthly.loc[monthly["month"] <= cutoff, measure].sum())


def mtd(monthly: pd.DataFrame, cutoff: int, measure: str = "revenue") -> float:
    _check_measure(measure)
    cutoff = _check_cutoff(cutoff)
    if monthly.empty:
        return 0.0
    return float(monthly.loc[monthly["month"] == cutoff, measure].sum())


def avg_per_month(ytd_value: float, cutoff: int) -> float:
    cutoff = _check_cutoff(cutoff)
    return float(ytd_value) / cutoff if cutoff > 0 else 0.0


def run_rate_forecast(ytd_value: float, cutoff: int, adjustment_pct: float = 0.0) -> float:
    """Extrapolate the elapsed-month average over the remaining months."""
    cutoff = _check_cutoff(cutoff)
    remaining = MONTHS_PER_YEAR - cutoff
    return float(ytd_value) + remaining * avg_per_month(ytd_value, cutoff) * (1 + adjustment_pct / 100.0)


@dataclass(frozen=True)
class PeriodComparison:
    month_cutoff: int
    forecast_adjustment_pct: float
    ytd_revenue_current: float
    ytd_volume_current: float
    ytd_revenue_prior: float
    ytd_volume_prior: float
    mtd_revenue_current: float
    mtd_volume_current: float
    mtd_revenue_prior: float
    mtd_volume_prior: float
    forecast_revenue_current: float
    forecast_volume_current: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def compare_periods(
    current_monthly: pd.DataFrame,
    prior_monthly: pd.DataFrame,
    month_cutoff: int,
    forecast_adjustment_pct: float = 0.0,
) -> PeriodComparison:
    """YTD/MTD for both periods and the current period's forecast, per measure."""
    cutoff = _check_cutoff(month_cutoff)
    values: Dict[str, float] = {}
    for measure in MEASURES:
        values[f"ytd_{measure}_current"] = ytd(current_monthly, cutoff, measure)
        values[f"ytd_{measure}_prior"] = ytd(prior_monthly, cutoff, measure)
        values[f"mtd_{measure}_current"] = mtd(current_monthly, cutoff, measure)
        values[f"mtd_{measure}_prior"] = mtd(prior_monthly, cutoff, measure)
        values[f"forecast_{measure}_current"] = run_rate_forecast(
            values[f"ytd_{measure}_current"], cutoff, forecast_adjustment_pct
        )
    return PeriodComparison(month_cutoff=cutoff, forecast_adjustment_pct=float(forecast_adjustment_pct), **values)


@dataclass(frozen=True)
class KpiSummary:
    overall_revenue: float
    overall_volume: float
    avg_monthly_revenue: float
    avg_monthly_volume: float
    top_accounts_by_revenue: pd.DataFrame
    top_accounts_by_volume: pd.DataFrame


def summarize_kpis(
    records: pd.DataFrame,
    top_n: int = 10,
    constants: Optional[ModelConstants] = None,
) -> KpiSummary:
    """Headline figures for a (scenario-adjusted, filtered) weekly series.

    Monthly averages are taken across the monthly buckets present.
    """
    monthly = group_by_time(records, "monthly", constants)
    n_months = len(monthly)
    return KpiSummary(
        overall_revenue=float(records["revenue"].sum()),
        overall_volume=float(records["volume"].sum()),
        avg_monthly_revenue=float(monthly["revenue"].sum() / n_months) if n_months else 0.0,
        avg_monthly_volume=float(monthly["volume"].sum() / n_months) if n_months else 0.0,
        top_accounts_by_revenue=top_accounts(records, top_n, "revenue"),
        top_accounts_by_volume=top_accounts(records, top_n, "volume"),
    )
