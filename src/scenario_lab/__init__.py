"""
Sales pipeline scenario lab: turns a pipeline workbook into a per-account,
per-week revenue/volume series and supports what-if analysis over it.
"""

from .aggregation import group_by_key, group_by_time, status_by_agent, top_accounts
from .config import IngestConfig, ModelConstants, get_preset, load_config
from .dataset import PipelineDataset
from .errors import (
    EmptyInput,
    EmptyResult,
    InsufficientColumns,
    ReadFailure,
    RowProcessingError,
    ScenarioLabError,
)
from .filters import apply_filters
from .forecast import compare_periods, run_rate_forecast, summarize_kpis
from .pipeline import ingest_frame, ingest_workbook, scenario_view
from .scenario import ScenarioParameters, apply_scenario

__version__ = "0.1.0"

__all__ = [
    "EmptyInput",
    "EmptyResult",
    "IngestConfig",
    "InsufficientColumns",
    "ModelConstants",
    "PipelineDataset",
    "ReadFailure",
    "RowProcessingError",
    "ScenarioLabError",
    "ScenarioParameters",
    "apply_filters",
    "apply_scenario",
    "compare_periods",
    "get_preset",
    "group_by_key",
    "group_by_time",
    "ingest_frame",
    "ingest_workbook",
    "load_config",
    "run_rate_forecast",
    "scenario_view",
    "status_by_agent",
    "summarize_kpis",
    "top_accounts",
]
