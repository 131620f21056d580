import numpy as np
import pandas as pd
import pytest

from scenario_lab.errors import EmptyResult
from scenario_lab.ingestion.row_normalizer import normalize_rows


def _row(**overrides):
    row = {
        "Account Name": "Acme Foods",
        "Industry": "FMCG",
        "Sales Category": "New",
        "City": "Makati",
        "Area": "NCR",
        "Territory Code": "T01",
        "Sales Rep": "Cruz",
        "Sales Stage": "Negotiation",
        "Forecasted TXN Start (Month)": "August",
        "Forecasted TXN Start (Year)": "2025",
        "Years of Engagement": "2",
        "Committed Monthly Vol": "1,200",
        "Monthly Sales Forecast": "₱1,500,000.00",
    }
    row.update(overrides)
    return row


def test_complete_row_is_parsed(extended_config, today):
    result = normalize_rows(pd.DataFrame([_row()]), extended_config, today=today)
    acct = result.accounts.iloc[0]
    assert acct["account"] == "Acme Foods"
    assert acct["sales_category"] == "New"
    assert acct["territory_code"] == "T01"
    assert acct["start_month"] == 8
    assert acct["start_year"] == 2025
    assert acct["years_of_engagement"] == 2
    assert acct["end_year"] == 2026
    assert acct["monthly_revenue"] == 1_500_000.0
    assert acct["monthly_volume"] == 1200.0
    assert acct["imputed_fields"] == ""
    assert result.imputed == {}


def test_missing_revenue_column_uses_bounded_fallback(extended_config, today):
    row = _row()
    del row["Monthly Sales Forecast"]
    result = normalize_rows(pd.DataFrame([row]), extended_config, today=today)
    revenue = result.accounts.iloc[0]["monthly_revenue"]
    assert not np.isnan(revenue)
    assert 500_000 <= revenue <= 2_500_000
    assert "monthly_revenue" in result.accounts.iloc[0]["imputed_fields"]
    assert result.imputed["monthly_revenue"] == 1


def test_secondary_revenue_header_is_used(extended_config, today):
    row = _row(**{"Monthly Sales Report Prep": "900,000"})
    del row["Monthly Sales Forecast"]
    result = normalize_rows(pd.DataFrame([row]), extended_config, today=today)
    assert result.accounts.iloc[0]["monthly_revenue"] == 900_000.0


@pytest.mark.parametrize("bad", ["-500", "0", "n/a", ""])
def test_non_positive_volume_falls_back(extended_config, today, bad):
    result = normalize_rows(pd.DataFrame([_row(**{"Committed Monthly Vol": bad})]), extended_config, today=today)
    volume = result.accounts.iloc[0]["monthly_volume"]
    assert 50 <= volume <= 550


def test_unparseable_month_defaults_to_current_month(extended_config, today):
    result = normalize_rows(pd.DataFrame([_row(**{"Forecasted TXN Start (Month)": "soon"})]), extended_config, today=today)
    assert result.accounts.iloc[0]["start_month"] == today.month
    assert "start_month" in result.accounts.iloc[0]["imputed_fields"]


def test_missing_text_fields_get_defaults(extended_config, today):
    row = {"Committed Monthly Vol": "100", "Monthly Sales Forecast": "600000"}
    result = normalize_rows([_row(), row], extended_config, today=today)
    second = result.accounts.iloc[1]
    assert second["account"] == "Account-2"
    assert second["industry"] == "Unknown"
    assert second["city"] == "Unknown"
    assert second["status"] == "Prospect"
    # start year and years of engagement fall back to today's year and 1
    assert second["start_year"] == today.year
    assert second["years_of_engagement"] == 1
    assert second["end_year"] == today.year


def test_unmapped_columns_are_not_emitted(standard_config, today):
    row = {"Account Name": "A", "Industry": "Retail", "Sales Stage": "Won", "Monthly Sales Report Prep": "1000"}
    result = normalize_rows([row], standard_config, today=today)
    assert "city" not in result.accounts.columns
    assert "territory_code" not in result.accounts.columns
    assert "sales_category" not in result.accounts.columns


def test_duplicate_account_names_keep_first(extended_config, today):
    rows = [_row(), _row(**{"Industry": "Retail"}), _row(**{"Account Name": "Other"})]
    result = normalize_rows(rows, extended_config, today=today)
    assert list(result.accounts["account"]) == ["Acme Foods", "Other"]
    assert result.accounts.iloc[0]["industry"] == "FMCG"
    assert result.duplicate_positions == [2]


def test_failing_row_is_skipped_with_position(extended_config, today):
    result = normalize_rows([_row(), None, _row(**{"Account Name": "B"})], extended_config, today=today)
    assert list(result.accounts["account"]) == ["Acme Foods", "B"]
    assert result.skipped_positions == [2]
    assert any("row 2" in d for d in result.diagnostics)


def test_all_rows_failing_raises_empty_result(extended_config, today):
    with pytest.raises(EmptyResult) as excinfo:
        normalize_rows([None, 5, "text"], extended_config, today=today)
    assert len(excinfo.value.diagnostics) == 3


def test_fallbacks_are_reproducible_for_a_seed(extended_config, today):
    rows = [{"Account Name": f"A{i}", "Industry": "Retail"} for i in range(5)]
    first = normalize_rows(rows, extended_config, today=today).accounts
    second = normalize_rows(rows, extended_config, today=today).accounts
    pd.testing.assert_frame_equal(first, second)

    other = normalize_rows(rows, extended_config, rng=np.random.default_rng(7), today=today).accounts
    assert not np.allclose(first["monthly_revenue"], other["monthly_revenue"])


def test_output_preserves_input_order(extended_config, today):
    rows = [_row(**{"Account Name": name}) for name in ["Zeta", "Alpha", "Mid"]]
    result = normalize_rows(rows, extended_config, today=today)
    assert list(result.accounts["account"]) == ["Zeta", "Alpha", "Mid"]


@pytest.mark.parametrize(
    "overrides,field",
    [
        ({"Years of Engagement": "1e20"}, "years_of_engagement"),
        ({"Years of Engagement": "500"}, "years_of_engagement"),
        ({"Forecasted TXN Start (Year)": "1e20"}, "start_year"),
        ({"Forecasted TXN Start (Year)": "25"}, "start_year"),
    ],
)
def test_out_of_range_integer_cells_fall_back(extended_config, today, overrides, field):
    rows = [_row(), _row(**{"Account Name": "B", **overrides})]
    result = normalize_rows(rows, extended_config, today=today)
    assert list(result.accounts["account"]) == ["Acme Foods", "B"]
    second = result.accounts.iloc[1]
    assert field in second["imputed_fields"]
    assert second["years_of_engagement"] in (1, 2)
    assert second["start_year"] in (2025, today.year)
    assert result.accounts["end_year"].dtype == "int64"
