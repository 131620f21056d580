"""End-to-end: workbook on disk → weekly dataset → scenario view → forecast."""

import numpy as np
import pandas as pd
import pytest

from scenario_lab.aggregation import group_by_key, group_by_time
from scenario_lab.errors import EmptyInput, EmptyResult, InsufficientColumns, ReadFailure
from scenario_lab.forecast import compare_periods
from scenario_lab.pipeline import ingest_workbook, scenario_view
from scenario_lab.scenario import ScenarioParameters


@pytest.fixture
def pipeline_rows():
    return [
        {
            "Account Name": "Acme Foods",
            "Industry": "FMCG",
            "Sales Category": "New",
            "City": "Makati",
            "Area": "NCR",
            "Territory Code": "T01",
            "Sales Rep": "Cruz",
            "Sales Stage": "Won",
            "Forecasted TXN Start (Month)": "January",
            "Forecasted TXN Start (Year)": 2025,
            "Years of Engagement": 1,
            "Committed Monthly Vol": 400,
            "Monthly Sales Forecast": "₱1,000,000",
        },
        {
            "Account Name": "Beta Retail",
            "Industry": "Retail",
            "Sales Category": "Upsell",
            "City": "Cebu",
            "Area": "Visayas",
            "Territory Code": "T02",
            "Sales Rep": "Flores",
            "Sales Stage": "Negotiation",
            "Forecasted TXN Start (Month)": "Jul",
            "Forecasted TXN Start (Year)": 2025,
            "Years of Engagement": 2,
            "Committed Monthly Vol": "",
            "Monthly Sales Forecast": 750000,
        },
        {
            "Account Name": "Acme Foods",
            "Industry": "Retail",
            "Sales Category": "New",
            "City": "Makati",
            "Area": "NCR",
            "Territory Code": "T03",
            "Sales Rep": "Cruz",
            "Sales Stage": "Won",
            "Forecasted TXN Start (Month)": "March",
            "Forecasted TXN Start (Year)": 2025,
            "Years of Engagement": 1,
            "Committed Monthly Vol": 10,
            "Monthly Sales Forecast": 10,
        },
    ]


@pytest.fixture
def workbook(tmp_path, pipeline_rows):
    path = tmp_path / "pipeline.xlsx"
    pd.DataFrame(pipeline_rows).to_excel(path, index=False, sheet_name="Sales Pipeline Data")
    return path


def test_workbook_to_weekly_dataset(workbook, extended_config, today):
    ds = ingest_workbook(workbook, extended_config, year=2025, today=today)

    assert ds.info["total_rows"] == 3
    assert ds.info["processed_rows"] == 2
    assert ds.info["duplicate_rows"] == 1
    assert ds.info["imputed"] == {"monthly_volume": 1}
    assert ds.info["layout"] == "extended"
    assert "Territory Code" in ds.info["matched_headers"]

    weekly = ds.weekly
    assert len(weekly) == 2 * 52
    assert weekly["week"].between(1, 52).all()
    assert np.isclose(weekly["revenue"].sum(), ds.accounts["base_revenue"].sum())
    assert ds.meta["cities"] == ["Cebu", "Makati"]
    assert ds.meta["year"] == 2025

    beta = weekly[weekly["account"] == "Beta Retail"]
    assert beta.loc[beta["revenue"] > 0, "week"].min() == 27
    assert set(beta["end_year"]) == {2026}


def test_scenario_and_forecast_over_ingested_data(workbook, extended_config, today):
    ds = ingest_workbook(workbook, extended_config, year=2025, today=today)
    base = scenario_view(ds.weekly)
    shifted = scenario_view(ds.weekly, ScenarioParameters(mix_shift_industry="Retail", mix_shift_percent=20), {"area": "Visayas"})

    retail_base = base.loc[base["industry"] == "Retail", "revenue"].sum()
    assert shifted["revenue"].sum() == pytest.approx(retail_base * 1.2)
    assert list(group_by_key(shifted, "industry")["industry"]) == ["Retail"]

    monthly = group_by_time(base, "monthly")
    assert len(monthly) == 12
    cmp = compare_periods(monthly, monthly, 12, 0)
    assert cmp.forecast_revenue_current == pytest.approx(base["revenue"].sum())
    assert cmp.ytd_revenue_current == pytest.approx(cmp.ytd_revenue_prior)


def test_bytes_source(workbook, extended_config, today):
    ds = ingest_workbook(workbook.read_bytes(), extended_config, year=2025, today=today)
    assert ds.info["processed_rows"] == 2


def test_csv_source(tmp_path, pipeline_rows, extended_config, today):
    path = tmp_path / "pipeline.csv"
    pd.DataFrame(pipeline_rows).to_csv(path, index=False)
    ds = ingest_workbook(path, extended_config, year=2025, today=today)
    assert ds.info["processed_rows"] == 2


def test_header_only_workbook_is_empty(tmp_path, extended_config):
    path = tmp_path / "empty.xlsx"
    pd.DataFrame(columns=["Account Name", "Industry"]).to_excel(path, index=False)
    with pytest.raises(EmptyInput, match="Excel file is empty"):
        ingest_workbook(path, extended_config)


def test_unrecognized_headers(tmp_path, extended_config):
    path = tmp_path / "other.xlsx"
    pd.DataFrame([{"Foo": 1, "Bar": 2}]).to_excel(path, index=False)
    with pytest.raises(InsufficientColumns) as excinfo:
        ingest_workbook(path, extended_config)
    assert excinfo.value.available == ["Foo", "Bar"]


def test_rows_outside_report_year_leave_no_weeks(workbook, extended_config, today):
    # accounts exist but none overlaps the report year
    ds = ingest_workbook(workbook, extended_config, year=2030, today=today)
    assert (ds.weekly["revenue"] == 0).all()


def test_unreadable_sources(tmp_path, extended_config):
    garbage = tmp_path / "garbage.xlsx"
    garbage.write_bytes(b"this is not a workbook")
    with pytest.raises(ReadFailure):
        ingest_workbook(garbage, extended_config)
    with pytest.raises(ReadFailure):
        ingest_workbook(tmp_path / "missing.xlsx", extended_config)
    with pytest.raises(ReadFailure):
        ingest_workbook(b"\x00\x01\x02", extended_config)


def test_all_errors_share_a_base():
    from scenario_lab.errors import ScenarioLabError

    for exc in (EmptyInput, EmptyResult, InsufficientColumns, ReadFailure):
        assert issubclass(exc, ScenarioLabError)
        assert issubclass(exc, ValueError)
