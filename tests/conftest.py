import sys
from datetime import date
from pathlib import Path

import pandas as pd
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from scenario_lab.config import get_preset


@pytest.fixture
def today() -> date:
    return date(2025, 3, 15)


@pytest.fixture
def extended_config():
    return get_preset("extended")


@pytest.fixture
def standard_config():
    return get_preset("standard")


def make_accounts(rows):
    """Build a normalized accounts frame; each row overrides the defaults below."""
    defaults = {
        "account": "ACME",
        "industry": "Retail",
        "area": "NCR",
        "agent": "Cruz",
        "status": "Won",
        "start_month": 1,
        "start_year": 2025,
        "years_of_engagement": 1,
        "monthly_revenue": 434_500.0,
        "monthly_volume": 434.5,
        "imputed_fields": "",
    }
    records = []
    for row in rows:
        rec = {**defaults, **row}
        rec["end_year"] = rec["start_year"] + rec["years_of_engagement"] - 1
        records.append(rec)
    return pd.DataFrame(records)


def make_weekly(rows):
    """Small weekly frame with the attribute columns the engines read."""
    defaults = {"week": 1, "year": 2025, "account": "A", "industry": "Retail", "area": "NCR", "agent": "Cruz", "status": "Won", "revenue": 0.0, "volume": 0.0}
    return pd.DataFrame([{**defaults, **row} for row in rows])


@pytest.fixture
def accounts_factory():
    return make_accounts


@pytest.fixture
def weekly_factory():
    return make_weekly
