from __future__ import annotations

import io
from pathlib import Path
from typing import BinaryIO, Union

import pandas as pd

from ..errors import ReadFailure


WorkbookSource = Union[str, Path, bytes, bytearray, BinaryIO]

EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}
TEXT_SUFFIXES = {".csv", ".tsv", ".txt"}


def _source_suffix(source: WorkbookSource) -> str:
    if isinstance(source, (str, Path)):
        return Path(source).suffix.lower()
    name = getattr(source, "name", None)
    if isinstance(name, str):
        return Path(name).suffix.lower()
    return ""


def read_workbook(source: WorkbookSource) -> pd.DataFrame:
    """Read the first worksheet of an uploaded workbook as text cells.

    Accepts a path, raw bytes, or a binary file-like object. All cells are read
    with ``dtype=str`` so numbers keep their original text and are parsed later
    by the row normalizer. Fully blank rows are dropped; headers are stripped.

    Raises ReadFailure if the file is missing or cannot be parsed. No retries.
    """

    if isinstance(source, (str, Path)) and not Path(source).exists():
        raise ReadFailure(f"Failed to read file: {source} not found")

    suffix = _source_suffix(source)
    payload = io.BytesIO(bytes(source)) if isinstance(source, (bytes, bytearray)) else source
    try:
        if suffix in TEXT_SUFFIXES:
            df = pd.read_csv(payload, dtype=str, sep=None, engine="python")
        else:
            df = pd.read_excel(payload, sheet_name=0, dtype=str)
    except Exception as exc:
        raise ReadFailure(f"Failed to parse Excel file: {exc}") from exc

    df.columns = [str(c).strip() for c in df.columns]
    df = df.dropna(how="all").reset_index(drop=True)
    return df
