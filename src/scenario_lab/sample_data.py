"""Deterministic synthetic pipeline used as a demo dataset and prior-year reference.

Each account gets a monthly potential weighted by its industry and area, and
every week draws a noise factor in [0.6, 1.4] on top of a seasonal curve whose
phase is shifted per account.
"""
from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import pandas as pd

from .config import ModelConstants
from .dataset import PipelineDataset, build_date_range, build_meta


INDUSTRIES = ("Retail", "FMCG", "Technology", "Manufacturing", "Healthcare", "Logistics")
AREAS = ("NCR", "North Luzon", "South Luzon", "Visayas", "Mindanao")
AGENTS = ("Alonzo", "Bautista", "Cruz", "Dela Cruz", "Escobar", "Flores", "Garcia", "Hernandez")
STATUSES = ("Prospect", "Negotiation", "Won", "Lost", "On Hold")


def _account_name(industry: str, area: str, idx: int) -> str:
    return f"{industry[:3].upper()}-{area[:2].upper()}-ACCT-{idx:03d}"


def generate_sample(
    seed: int = 42,
    year: int = 2025,
    n_accounts: int = 80,
    uplift: float = 1.0,
    constants: Optional[ModelConstants] = None,
    industries: Sequence[str] = INDUSTRIES,
    areas: Sequence[str] = AREAS,
    agents: Sequence[str] = AGENTS,
    statuses: Sequence[str] = STATUSES,
) -> PipelineDataset:
    constants = constants or ModelConstants()
    rng = np.random.default_rng(seed)
    n_weeks = constants.weeks_per_year

    ind_idx = rng.integers(0, len(industries), size=n_accounts)
    area_idx = rng.integers(0, len(areas), size=n_accounts)
    agent_idx = rng.integers(0, len(agents), size=n_accounts)
    status_idx = rng.integers(0, len(statuses), size=n_accounts)
    industry_w = 0.8 + ind_idx * 0.08
    area_w = 0.9 + area_idx * 0.05
    monthly_revenue = 400_000 + rng.random(n_accounts) * 3_000_000 * industry_w * area_w
    monthly_volume = 40 + np.floor(rng.random(n_accounts) * 600 * industry_w * area_w)

    accounts = pd.DataFrame(
        {
            "account": [_account_name(industries[i], areas[a], k + 1) for k, (i, a) in enumerate(zip(ind_idx, area_idx))],
            "industry": [industries[i] for i in ind_idx],
            "area": [areas[i] for i in area_idx],
            "agent": [agents[i] for i in agent_idx],
            "status": [statuses[i] for i in status_idx],
            "start_month": 1,
            "start_year": int(year),
            "years_of_engagement": 1,
            "end_year": int(year),
            "monthly_revenue": monthly_revenue,
            "monthly_volume": monthly_volume,
            "imputed_fields": "",
        }
    )

    # weeks x accounts, flattened week-major
    weeks = np.arange(1, n_weeks + 1)
    phase = weeks[:, None] + np.arange(n_accounts)[None, :]
    season = 1 + constants.seasonal_amplitude * np.sin(2 * np.pi * phase / n_weeks)
    rev_noise = 0.6 + rng.random((n_weeks, n_accounts)) * 0.8
    vol_noise = 0.6 + rng.random((n_weeks, n_accounts)) * 0.8
    revenue = (monthly_revenue[None, :] / constants.weeks_per_month) * rev_noise * season * uplift
    volume = (monthly_volume[None, :] / constants.weeks_per_month) * vol_noise * season

    weekly = pd.DataFrame(
        {
            "week": np.repeat(weeks, n_accounts),
            "year": int(year),
            "account": np.tile(accounts["account"].to_numpy(), n_weeks),
            "industry": np.tile(accounts["industry"].to_numpy(), n_weeks),
            "area": np.tile(accounts["area"].to_numpy(), n_weeks),
            "agent": np.tile(accounts["agent"].to_numpy(), n_weeks),
            "status": np.tile(accounts["status"].to_numpy(), n_weeks),
            "revenue": revenue.ravel(),
            "volume": volume.ravel(),
            "start_month": 1,
            "start_year": int(year),
            "years_of_engagement": 1,
            "end_year": int(year),
        }
    )

    accounts["base_revenue"] = revenue.sum(axis=0)
    accounts["base_volume"] = volume.sum(axis=0)

    meta = build_meta(weekly)
    meta["industries"] = list(industries)
    info = {
        "total_rows": int(n_accounts),
        "processed_rows": int(n_accounts),
        "skipped_rows": 0,
        "duplicate_rows": 0,
        "original_columns": [],
        "matched_headers": [],
        "layout": "sample",
        "imputed": {},
        "diagnostics": [],
        "date_range": build_date_range(weekly),
        "seed": int(seed),
    }
    return PipelineDataset(weekly=weekly, accounts=accounts, meta=meta, info=info)
