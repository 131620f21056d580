import numpy as np
import pytest

from scenario_lab.config import ModelConstants
from scenario_lab.temporal_expander import expand_accounts, seasonal_factor, week_to_month


def test_week_to_month_bounds():
    months = week_to_month(np.arange(1, 53))
    assert months.min() == 1 and months.max() == 12
    assert set(months.tolist()) == set(range(1, 13))
    assert week_to_month(1) == 1
    assert week_to_month(26) == 6
    assert week_to_month(27) == 7
    assert week_to_month(52) == 12


def test_seasonal_factor_peaks_and_troughs():
    assert seasonal_factor(13) == pytest.approx(1.12)
    assert seasonal_factor(39) == pytest.approx(0.88)
    assert seasonal_factor(52) == pytest.approx(1.0)


def test_full_year_account_contributes_every_week(accounts_factory):
    accounts = accounts_factory([{"monthly_revenue": 434_500.0, "monthly_volume": 434.5}])
    result = expand_accounts(accounts, 2025)
    weekly = result.weekly
    assert len(weekly) == 52
    assert list(weekly["week"]) == list(range(1, 53))
    assert (weekly["revenue"] > 0).all()
    # seasonality sums to zero over a full cycle, leaving 52 flat weeks
    assert weekly["revenue"].sum() == pytest.approx(52 * 434_500.0 / 4.345)
    assert weekly["volume"].sum() == pytest.approx(52 * 434.5 / 4.345)
    assert weekly.loc[weekly["week"] == 13, "revenue"].iloc[0] == pytest.approx(100_000 * 1.12)


def test_mid_year_start_gates_earlier_weeks(accounts_factory):
    accounts = accounts_factory([{"start_month": 7}])
    weekly = expand_accounts(accounts, 2025).weekly
    active = weekly.loc[weekly["revenue"] > 0, "week"]
    assert active.min() == 27
    assert len(active) == 26
    assert (weekly.loc[weekly["week"] < 27, ["revenue", "volume"]] == 0).all().all()


@pytest.mark.parametrize(
    "overrides,expect_active",
    [
        ({"start_year": 2026}, False),
        ({"start_year": 2023, "years_of_engagement": 2}, False),
        ({"start_year": 2023, "years_of_engagement": 3, "start_month": 12}, True),
        ({"start_year": 2024, "start_month": 11, "years_of_engagement": 2}, True),
    ],
)
def test_contribution_window(accounts_factory, overrides, expect_active):
    weekly = expand_accounts(accounts_factory([overrides]), 2025).weekly
    if expect_active:
        assert (weekly["revenue"] > 0).all()
    else:
        assert (weekly["revenue"] == 0).all()
        assert (weekly["volume"] == 0).all()


def test_base_totals_reconcile_with_weekly(accounts_factory):
    accounts = accounts_factory(
        [
            {"account": "A", "monthly_revenue": 1_000_000.0},
            {"account": "B", "start_month": 5, "monthly_revenue": 250_000.0},
            {"account": "C", "start_year": 2030},
        ]
    )
    result = expand_accounts(accounts, 2025)
    assert len(result.weekly) == 3 * 52
    assert np.isclose(result.weekly["revenue"].sum(), result.accounts["base_revenue"].sum(), rtol=1e-9)
    assert np.isclose(result.weekly["volume"].sum(), result.accounts["base_volume"].sum(), rtol=1e-9)
    per_account = result.weekly.groupby("account")["revenue"].sum()
    for row in result.accounts.itertuples():
        assert np.isclose(per_account[row.account], row.base_revenue)
    assert result.accounts.set_index("account").loc["C", "base_revenue"] == 0
    # input frame is not touched
    assert "base_revenue" not in accounts.columns


def test_weekly_records_carry_window_and_attributes(accounts_factory):
    weekly = expand_accounts(accounts_factory([{"start_year": 2024, "years_of_engagement": 3}]), 2025).weekly
    assert list(weekly.columns[:4]) == ["week", "year", "account", "industry"]
    assert set(weekly["end_year"]) == {2026}
    assert set(weekly["year"]) == {2025}
    assert weekly["week"].between(1, 52).all()


def test_constants_are_overridable(accounts_factory):
    flat = ModelConstants(seasonal_amplitude=0.0, weeks_per_month=4.0)
    weekly = expand_accounts(accounts_factory([{"monthly_revenue": 400.0}]), 2025, flat).weekly
    assert np.allclose(weekly["revenue"], 100.0)
