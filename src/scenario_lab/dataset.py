from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

import pandas as pd


# meta key -> weekly column; optional dimensions are listed only when carried
META_DIMENSIONS = [
    ("industries", "industry"),
    ("sales_categories", "sales_category"),
    ("cities", "city"),
    ("areas", "area"),
    ("territory_codes", "territory_code"),
    ("agents", "agent"),
    ("statuses", "status"),
]
OPTIONAL_META = {"sales_categories", "cities", "territory_codes"}


@dataclass
class PipelineDataset:
    """One complete ingestion result: weekly series, accounts, meta and run info."""

    weekly: pd.DataFrame
    accounts: pd.DataFrame
    meta: Dict[str, Any] = field(default_factory=dict)
    info: Dict[str, Any] = field(default_factory=dict)

    @property
    def year(self) -> Any:
        return self.meta.get("year")

    @property
    def industries(self) -> List[str]:
        return list(self.meta.get("industries", []))


def _sorted_unique(series: pd.Series) -> List[Any]:
    return sorted(series.dropna().unique().tolist(), key=str)


def build_meta(weekly: pd.DataFrame) -> Dict[str, Any]:
    meta: Dict[str, Any] = {}
    for key, column in META_DIMENSIONS:
        if column in weekly.columns:
            meta[key] = _sorted_unique(weekly[column])
        elif key not in OPTIONAL_META:
            meta[key] = []
    years = _sorted_unique(weekly["year"]) if "year" in weekly.columns else []
    meta["year"] = int(max(years)) if years else None
    return meta


def build_date_range(weekly: pd.DataFrame) -> Dict[str, Any]:
    if weekly.empty:
        return {"min_week": None, "max_week": None, "years": []}
    return {
        "min_week": int(weekly["week"].min()),
        "max_week": int(weekly["week"].max()),
        "years": [int(y) for y in sorted(weekly["year"].unique())],
    }
