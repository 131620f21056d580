"""What-if adjustment of weekly revenue and volume.

The adjustment never mutates its input: every call returns a new frame, so the
same base records can be re-run with any number of parameter sets.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

import pandas as pd

from .config import ModelConstants
from .logging_utils import get_logger, log_stage


@dataclass(frozen=True)
class ScenarioParameters:
    revenue_multiplier: float = 1.0
    volume_multiplier: float = 1.0
    mix_shift_industry: Optional[str] = None
    mix_shift_percent: float = 10.0

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "ScenarioParameters":
        data = dict(data or {})
        industry = data.get("mix_shift_industry")
        # "none" is the selector sentinel for no mix shift
        if isinstance(industry, str) and industry.strip().lower() in ("", "none"):
            industry = None
        return cls(
            revenue_multiplier=float(data.get("revenue_multiplier", 1.0)),
            volume_multiplier=float(data.get("volume_multiplier", 1.0)),
            mix_shift_industry=industry,
            mix_shift_percent=float(data.get("mix_shift_percent", 10.0)),
        )


def apply_scenario(
    records: pd.DataFrame,
    params: ScenarioParameters,
    constants: Optional[ModelConstants] = None,
) -> pd.DataFrame:
    """Scale revenue/volume; amplify the mix-shift industry on top.

    revenue' = revenue * revenue_multiplier * (1 + pct/100)            for the targeted industry
    volume'  = volume  * volume_multiplier  * (1 + factor * pct/100)   factor defaults to 0.6
    """

    constants = constants or ModelConstants()
    logger = get_logger("scenario")
    out = records.copy()
    out["revenue"] = out["revenue"] * params.revenue_multiplier
    out["volume"] = out["volume"] * params.volume_multiplier

    shifted = 0
    if params.mix_shift_industry:
        mask = out["industry"] == params.mix_shift_industry
        shifted = int(mask.sum())
        pct = params.mix_shift_percent / 100.0
        out.loc[mask, "revenue"] = out.loc[mask, "revenue"] * (1 + pct)
        out.loc[mask, "volume"] = out.loc[mask, "volume"] * (1 + constants.mix_shift_volume_factor * pct)

    log_stage(
        logger,
        "scenario",
        len(records),
        len(out),
        revenue_multiplier=params.revenue_multiplier,
        volume_multiplier=params.volume_multiplier,
        mix_shift_rows=shifted,
    )
    return out
