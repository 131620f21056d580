"""Configuration models for ingestion and the weekly revenue model.

Two workbook layouts are supported through presets of the same
:class:`IngestConfig`:

- ``standard``: the legacy pipeline export (7 recognized headers, 3 must match)
- ``extended``: the richer export with city, territory, sales category and an
  explicit engagement window (2 headers must match)

Both presets run through one pipeline; only the mapping table, the match
threshold, the numeric fallback rules and the text defaults differ.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


TEXT_FIELDS = (
    "account",
    "industry",
    "sales_category",
    "city",
    "area",
    "territory_code",
    "agent",
    "status",
)
NUMERIC_FIELDS = ("monthly_revenue", "monthly_volume", "years_of_engagement", "start_year")
INTEGER_FIELDS = ("years_of_engagement", "start_year")
# Plausible (low, high) per integer field; values outside fall back like unparseable cells
INTEGER_BOUNDS = {"years_of_engagement": (1, 100), "start_year": (1900, 2200)}
CANONICAL_FIELDS = TEXT_FIELDS + NUMERIC_FIELDS + ("start_month",)

CanonicalField = Literal[
    "account",
    "industry",
    "sales_category",
    "city",
    "area",
    "territory_code",
    "agent",
    "status",
    "monthly_revenue",
    "monthly_volume",
    "years_of_engagement",
    "start_year",
    "start_month",
]


class ColumnSpec(BaseModel):
    """One (canonical field, accepted header) pair of the mapping table."""

    field: CanonicalField
    header: str = Field(..., min_length=1)
    primary: bool = Field(
        True,
        description="Counted by the column resolver; secondary headers are lookup fallbacks only",
    )


class FallbackRule(BaseModel):
    """How to fill a numeric field that is missing or not a finite positive number."""

    kind: Literal["uniform", "current_year", "constant"]
    low: Optional[float] = None
    high: Optional[float] = None
    value: Optional[float] = None

    @model_validator(mode="after")
    def validate_parameters(self):
        if self.kind == "uniform":
            if self.low is None or self.high is None:
                raise ValueError("uniform fallback requires low and high")
            if not (0 < self.low <= self.high):
                raise ValueError("uniform fallback requires 0 < low <= high")
        if self.kind == "constant":
            if self.value is None or self.value <= 0:
                raise ValueError("constant fallback requires a positive value")
        return self


class IngestConfig(BaseModel):
    """Parameters of the resolve → normalize stages for one workbook layout."""

    name: str = "custom"
    columns: List[ColumnSpec] = Field(..., min_length=1)
    min_matched_columns: int = Field(3, ge=1)
    fallbacks: Dict[str, FallbackRule] = Field(default_factory=dict)
    text_defaults: Dict[str, str] = Field(default_factory=lambda: {"status": "Prospect"})
    default_text: str = "Unknown"
    account_placeholder: str = "Account-{index}"
    seed: Optional[int] = 42

    @field_validator("fallbacks")
    @classmethod
    def validate_fallback_fields(cls, v):
        unknown = [k for k in v if k not in NUMERIC_FIELDS]
        if unknown:
            raise ValueError(f"fallbacks defined for non-numeric fields: {unknown}")
        missing = [k for k in NUMERIC_FIELDS if k not in v]
        if missing:
            raise ValueError(f"fallbacks missing for numeric fields: {missing}")
        for fld, (low, high) in INTEGER_BOUNDS.items():
            rule = v[fld]
            if rule.kind == "constant" and not low <= rule.value <= high:
                raise ValueError(f"constant fallback for {fld} must lie in [{low}, {high}]")
        return v

    @field_validator("account_placeholder")
    @classmethod
    def validate_placeholder(cls, v):
        if "{index}" not in v:
            raise ValueError("account_placeholder must contain '{index}'")
        return v

    def headers_for(self, field: str) -> List[str]:
        """Accepted headers for ``field`` in priority order."""
        return [c.header for c in self.columns if c.field == field]

    def primary_headers(self) -> List[str]:
        seen: List[str] = []
        for c in self.columns:
            if c.primary and c.header not in seen:
                seen.append(c.header)
        return seen

    def mapped_fields(self) -> List[str]:
        return [f for f in CANONICAL_FIELDS if self.headers_for(f)]

    def text_default(self, field: str) -> str:
        return self.text_defaults.get(field, self.default_text)


class ModelConstants(BaseModel):
    """Constants of the weekly revenue model."""

    weeks_per_month: float = Field(4.345, gt=0)
    weeks_per_year: int = Field(52, ge=1)
    seasonal_amplitude: float = Field(0.12, ge=0, lt=1)
    mix_shift_volume_factor: float = Field(0.6, ge=0)


class ReportConfig(BaseModel):
    year: Optional[int] = Field(None, ge=1900, le=2200)
    month_cutoff: Optional[int] = Field(None, ge=0, le=12)
    forecast_adjustment_pct: float = 0.0
    top_n: int = Field(10, ge=1)


class LoggingConfig(BaseModel):
    level: str = "INFO"
    logs_dir: Optional[str] = None
    file_name: str = "scenario_lab.log"


class LabConfig(BaseModel):
    ingest: IngestConfig
    model: ModelConstants = Field(default_factory=ModelConstants)
    report: ReportConfig = Field(default_factory=ReportConfig)
    scenario: Dict[str, Any] = Field(default_factory=dict)
    filters: Dict[str, Optional[str]] = Field(default_factory=dict)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _standard_preset() -> IngestConfig:
    return IngestConfig(
        name="standard",
        columns=[
            ColumnSpec(field="account", header="Account Name"),
            ColumnSpec(field="industry", header="Industry"),
            ColumnSpec(field="status", header="Sales Stage"),
            ColumnSpec(field="area", header="Area"),
            ColumnSpec(field="agent", header="Sales Rep"),
            ColumnSpec(field="monthly_volume", header="Committed Monthly Vol"),
            ColumnSpec(field="monthly_revenue", header="Monthly Sales Report Prep"),
            ColumnSpec(field="monthly_revenue", header="Committed FY Volu", primary=False),
            ColumnSpec(field="start_year", header="Year of Engagement", primary=False),
            ColumnSpec(field="start_month", header="Expected/Forecasted TXN Start", primary=False),
        ],
        min_matched_columns=3,
        fallbacks={
            "monthly_revenue": FallbackRule(kind="uniform", low=100_000, high=1_100_000),
            "monthly_volume": FallbackRule(kind="uniform", low=50, high=550),
            "years_of_engagement": FallbackRule(kind="constant", value=1),
            "start_year": FallbackRule(kind="current_year"),
        },
    )


def _extended_preset() -> IngestConfig:
    return IngestConfig(
        name="extended",
        columns=[
            ColumnSpec(field="account", header="Account Name"),
            ColumnSpec(field="industry", header="Industry"),
            ColumnSpec(field="sales_category", header="Sales Category"),
            ColumnSpec(field="city", header="City"),
            ColumnSpec(field="area", header="Area"),
            ColumnSpec(field="area", header="Team", primary=False),
            ColumnSpec(field="territory_code", header="Territory Code"),
            ColumnSpec(field="agent", header="Sales Rep"),
            ColumnSpec(field="status", header="Sales Stage"),
            ColumnSpec(field="start_month", header="Forecasted TXN Start (Month)"),
            ColumnSpec(field="start_year", header="Forecasted TXN Start (Year)"),
            ColumnSpec(field="years_of_engagement", header="Years of Engagement"),
            ColumnSpec(field="monthly_volume", header="Committed Monthly Vol"),
            ColumnSpec(field="monthly_revenue", header="Monthly Sales Forecast"),
            ColumnSpec(field="monthly_revenue", header="Monthly Sales Report Prep", primary=False),
        ],
        min_matched_columns=2,
        fallbacks={
            "monthly_revenue": FallbackRule(kind="uniform", low=500_000, high=2_500_000),
            "monthly_volume": FallbackRule(kind="uniform", low=50, high=550),
            "years_of_engagement": FallbackRule(kind="constant", value=1),
            "start_year": FallbackRule(kind="current_year"),
        },
    )


PRESETS = {
    "standard": _standard_preset,
    "extended": _extended_preset,
}


def get_preset(name: str) -> IngestConfig:
    """Return a fresh copy of a named ingestion preset."""
    try:
        factory = PRESETS[str(name).strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown ingest preset '{name}'. Available: {sorted(PRESETS)}")
    return factory()


def build_ingest_config(section: Optional[Dict[str, Any]]) -> IngestConfig:
    """Build an IngestConfig from a config section.

    ``preset`` selects the base layout (default ``extended``); any other keys
    override the preset's values. A section carrying ``columns`` replaces the
    mapping table wholesale.
    """
    section = dict(section or {})
    preset = section.pop("preset", "extended")
    base = get_preset(preset).model_dump()
    # fallback rules merge per field so a config can override just one of them
    fallbacks = section.pop("fallbacks", None) or {}
    base.update(section)
    base["fallbacks"] = {**base["fallbacks"], **fallbacks}
    return IngestConfig.model_validate(base)


def load_config(path: str | Path | None = None, preset: Optional[str] = None) -> LabConfig:
    """Load ``config.yaml``-style settings; a missing file yields defaults.

    ``preset`` replaces the file's ``ingest.preset`` while keeping its other
    ingest overrides (seed, fallbacks, threshold).
    """

    raw: Dict[str, Any] = {}
    if path is not None and Path(path).exists():
        with open(path, "r", encoding="utf-8") as stream:
            raw = yaml.safe_load(stream) or {}
    raw = dict(raw)
    section = dict(raw.get("ingest") or {})
    if preset:
        section["preset"] = preset
    raw["ingest"] = build_ingest_config(section)
    return LabConfig.model_validate(raw)
