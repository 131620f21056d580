"""Exports derived from the weekly series.

- ``export_csv``: delimited table of weekly records, revenue/volume rounded
- ``write_sample_workbook``: an .xlsx in the standard upload layout so users
  can see which headers the ingestion expects

Neither export feeds back into ingestion or scenario state.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter


LOGGER = logging.getLogger("scenario_lab.export")

# (record column, export header); optional columns are emitted when present
EXPORT_COLUMNS = [
    ("week", "week"),
    ("year", "year"),
    ("account", "account"),
    ("industry", "industry"),
    ("sales_category", "salesCategory"),
    ("city", "city"),
    ("area", "area"),
    ("territory_code", "territoryCode"),
    ("agent", "agent"),
    ("status", "status"),
    ("revenue", "revenue"),
    ("volume", "volume"),
    ("start_month", "startMonth"),
    ("start_year", "startYear"),
    ("years_of_engagement", "yearsOfEngagement"),
    ("end_year", "endYear"),
]
REQUIRED_EXPORT_COLUMNS = {"week", "year", "account", "industry", "area", "agent", "status", "revenue", "volume"}

SAMPLE_SHEET_NAME = "Sales Pipeline Data"
SAMPLE_HEADERS = [
    "Account Name",
    "Industry",
    "Existing Account",
    "Sales Category",
    "Sales Stage",
    "Area",
    "Expected/Forecasted TXN Start",
    "Year of Engagement",
    "Committed Monthly Vol",
    "Committed FY Vol",
    "Monthly Sales Report Prep",
    "Territory Code",
    "Sales Rep",
    "Sales Remarks / Contact History",
]


def to_export_frame(records: pd.DataFrame) -> pd.DataFrame:
    """Select and rename export columns; revenue/volume rounded half-up to integers."""
    missing = REQUIRED_EXPORT_COLUMNS - set(records.columns)
    if missing:
        raise ValueError(f"Records missing export columns: {sorted(missing)}")
    cols = [(src, dst) for src, dst in EXPORT_COLUMNS if src in records.columns]
    out = records[[src for src, _ in cols]].copy()
    for measure in ("revenue", "volume"):
        out[measure] = np.floor(out[measure].astype(float) + 0.5).astype("int64")
    return out.rename(columns=dict(cols))


def export_csv(records: pd.DataFrame, path: Optional[str | Path] = None, sep: str = ",") -> str:
    """Render records as delimited text; also write to ``path`` when given."""
    text = to_export_frame(records).to_csv(index=False, sep=sep, lineterminator="\n")
    if path is not None:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")
        LOGGER.info("Wrote %d export rows to %s", len(records), p)
    return text


def write_sample_workbook(records: pd.DataFrame, path: str | Path, limit: int = 20) -> Path:
    """Write the first ``limit`` weekly records as an upload template workbook."""
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)

    wb = Workbook()
    ws = wb.active
    ws.title = SAMPLE_SHEET_NAME
    ws.append(SAMPLE_HEADERS)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    for idx, row in enumerate(records.head(int(limit)).itertuples(index=False), start=1):
        volume = int(np.floor(float(row.volume) + 0.5))
        ws.append(
            [
                row.account,
                row.industry,
                "YES",
                "New",
                row.status,
                row.area,
                "August",
                int(row.year),
                volume,
                volume * 12,
                int(np.floor(float(row.revenue) + 0.5)),
                f"T{idx:02d}",
                row.agent,
                "Sample data entry",
            ]
        )

    for col_idx in range(1, len(SAMPLE_HEADERS) + 1):
        ws.column_dimensions[get_column_letter(col_idx)].width = 20

    wb.save(out_path)
    LOGGER.info("Wrote sample template with %d rows to %s", min(len(records), int(limit)), out_path)
    return out_path
