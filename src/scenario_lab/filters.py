from __future__ import annotations

from typing import Mapping, Optional

import pandas as pd

from .logging_utils import get_logger, log_stage


WILDCARD = "all"
FILTER_DIMENSIONS = (
    "account",
    "industry",
    "sales_category",
    "city",
    "area",
    "territory_code",
    "agent",
    "status",
)


def is_wildcard(value: Optional[object]) -> bool:
    return value is None or (isinstance(value, str) and value.strip().lower() == WILDCARD)


def active_filters(filters: Optional[Mapping[str, Optional[str]]]) -> dict:
    """Drop wildcard entries, keeping only dimensions that constrain the records."""
    return {dim: value for dim, value in (filters or {}).items() if not is_wildcard(value)}


def apply_filters(records: pd.DataFrame, filters: Optional[Mapping[str, Optional[str]]]) -> pd.DataFrame:
    """Return the records matching every non-wildcard dimension (logical AND).

    An empty result is valid. Unknown dimensions raise ValueError.
    """

    logger = get_logger("filter")
    constraints = active_filters(filters)
    unknown = [dim for dim in constraints if dim not in FILTER_DIMENSIONS]
    if unknown:
        raise ValueError(f"Unknown filter dimension(s): {unknown}. Allowed: {list(FILTER_DIMENSIONS)}")

    mask = pd.Series(True, index=records.index)
    for dim, value in constraints.items():
        if dim not in records.columns:
            # Dimension not carried by this layout: nothing can match it
            mask &= False
            continue
        mask &= records[dim] == value
    out = records.loc[mask].copy()
    log_stage(logger, "filter", len(records), len(out), constraints=len(constraints))
    return out
