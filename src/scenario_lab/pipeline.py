"""Workbook → weekly dataset pipeline and the scenario view over it.

Stages (each pure, each logged with counts in/out):

    read_workbook → resolve_columns → normalize_rows → expand_accounts
    dataset.weekly → apply_scenario → apply_filters → group_by_* → forecast

Ingestion is atomic: callers get one complete PipelineDataset or an exception,
never a partially built result.
"""
from __future__ import annotations

from datetime import date
from typing import Dict, Mapping, Optional

import numpy as np
import pandas as pd

from .config import IngestConfig, ModelConstants, get_preset
from .dataset import PipelineDataset, build_date_range, build_meta
from .errors import EmptyInput, EmptyResult
from .filters import apply_filters
from .ingestion import normalize_rows, read_workbook, resolve_columns
from .ingestion.reader import WorkbookSource
from .logging_utils import end_stage_timer, get_logger, start_stage_timer
from .scenario import ScenarioParameters, apply_scenario
from .temporal_expander import expand_accounts


def ingest_frame(
    raw: pd.DataFrame,
    config: Optional[IngestConfig] = None,
    constants: Optional[ModelConstants] = None,
    year: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
    today: Optional[date] = None,
    timings: Optional[Dict[str, float]] = None,
) -> PipelineDataset:
    """Run resolve → normalize → expand over already-read raw rows."""

    config = config or get_preset("extended")
    today = today or date.today()
    report_year = int(year) if year is not None else today.year
    timings = timings if timings is not None else {}
    logger = get_logger("pipeline")

    if raw is None or raw.shape[0] == 0:
        raise EmptyInput()

    t0 = start_stage_timer()
    resolution = resolve_columns(raw.columns, config)
    end_stage_timer("resolve", t0, timings)

    t0 = start_stage_timer()
    normalized = normalize_rows(raw, config, rng=rng, today=today)
    end_stage_timer("normalize", t0, timings)

    t0 = start_stage_timer()
    expanded = expand_accounts(normalized.accounts, report_year, constants)
    end_stage_timer("expand", t0, timings)
    if expanded.weekly.empty:
        raise EmptyResult(diagnostics=normalized.diagnostics)

    info = {
        "total_rows": int(raw.shape[0]),
        "processed_rows": normalized.rows_out,
        "skipped_rows": len(normalized.skipped_positions),
        "duplicate_rows": len(normalized.duplicate_positions),
        "original_columns": [str(c) for c in raw.columns],
        "matched_headers": resolution.matched,
        "layout": config.name,
        "imputed": dict(normalized.imputed),
        "diagnostics": list(normalized.diagnostics),
        "date_range": build_date_range(expanded.weekly),
    }
    logger.info(
        "Ingested %d accounts (%d weekly records) from %d rows; %d skipped, %d duplicates",
        normalized.rows_out,
        len(expanded.weekly),
        info["total_rows"],
        info["skipped_rows"],
        info["duplicate_rows"],
    )
    return PipelineDataset(
        weekly=expanded.weekly,
        accounts=expanded.accounts,
        meta=build_meta(expanded.weekly),
        info=info,
    )


def ingest_workbook(
    source: WorkbookSource,
    config: Optional[IngestConfig] = None,
    constants: Optional[ModelConstants] = None,
    year: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
    today: Optional[date] = None,
    timings: Optional[Dict[str, float]] = None,
) -> PipelineDataset:
    """Read the first sheet of ``source`` and build the weekly dataset.

    Raises ReadFailure, EmptyInput, InsufficientColumns or EmptyResult.
    """
    timings = timings if timings is not None else {}
    t0 = start_stage_timer()
    raw = read_workbook(source)
    end_stage_timer("read", t0, timings)
    return ingest_frame(raw, config, constants, year=year, rng=rng, today=today, timings=timings)


def scenario_view(
    weekly: pd.DataFrame,
    params: Optional[ScenarioParameters] = None,
    filters: Optional[Mapping[str, Optional[str]]] = None,
    constants: Optional[ModelConstants] = None,
) -> pd.DataFrame:
    """Scenario-adjust, then filter.

    The order is fixed: filtering sees already-adjusted figures.
    """
    adjusted = apply_scenario(weekly, params or ScenarioParameters(), constants)
    return apply_filters(adjusted, filters)
