"""Command-line runner: ingest a workbook, apply a scenario, print the outlook.

Example:

    scenario-lab pipeline.xlsx --preset standard --mix-shift-industry Retail \
        --mix-shift-percent 20 --filter area=NCR --export-csv out/scenario.csv
"""
from __future__ import annotations

import argparse
import sys
from datetime import date
from typing import Dict, List, Optional

from .aggregation import group_by_key, group_by_time
from .config import load_config
from .errors import ScenarioLabError
from .export_utils import export_csv, write_sample_workbook
from .forecast import compare_periods, summarize_kpis
from .formatters import currency_millions, integer, percent, volume_hundreds
from .logging_utils import format_timing_report, setup_logging
from .pipeline import ingest_workbook, scenario_view
from .sample_data import generate_sample
from .scenario import ScenarioParameters


def _parse_filters(values: Optional[List[str]]) -> Dict[str, str]:
    filters: Dict[str, str] = {}
    for item in values or []:
        if "=" not in item:
            raise ValueError(f"Filter must look like dimension=value, got '{item}'")
        dim, value = item.split("=", 1)
        filters[dim.strip()] = value.strip()
    return filters


def _change_pct(current: float, prior: float) -> Optional[float]:
    """Percent change of ``current`` over ``prior``; None when there is no prior."""
    if not prior:
        return None
    return (current / prior - 1.0) * 100.0


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sales pipeline scenario lab")
    parser.add_argument("workbook", nargs="?", help="Pipeline workbook (first sheet is read); sample data when omitted")
    parser.add_argument("--config", default="config.yaml", help="Path to the configuration file")
    parser.add_argument("--preset", choices=["standard", "extended"], help="Workbook layout preset")
    parser.add_argument("--prior-workbook", help="Workbook for the prior-year reference period")
    parser.add_argument("--year", type=int, help="Report year (defaults to the current year)")
    parser.add_argument("--seed", type=int, help="Seed for fallback values and sample data")
    parser.add_argument("--revenue-multiplier", type=float)
    parser.add_argument("--volume-multiplier", type=float)
    parser.add_argument("--mix-shift-industry")
    parser.add_argument("--mix-shift-percent", type=float)
    parser.add_argument("--filter", action="append", help="dimension=value; repeatable")
    parser.add_argument("--period", choices=["weekly", "monthly", "yearly"], default="monthly")
    parser.add_argument("--month-cutoff", type=int, help="YTD/MTD month cutoff (defaults to the current month)")
    parser.add_argument("--forecast-adjustment", type=float, help="Forecast adjustment in percent")
    parser.add_argument("--export-csv", help="Write the scenario-adjusted weekly records to this CSV")
    parser.add_argument("--sample-template", help="Write a sample upload workbook to this path")
    parser.add_argument("--timings", action="store_true", help="Print stage timings")
    return parser


def run(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    cfg = load_config(args.config, preset=args.preset)
    logger = setup_logging(cfg.logging.model_dump())

    ingest = cfg.ingest
    if args.seed is not None:
        ingest = ingest.model_copy(update={"seed": args.seed})

    today = date.today()
    year = args.year or cfg.report.year or today.year
    seed = args.seed if args.seed is not None else (ingest.seed if ingest.seed is not None else 42)
    timings: Dict[str, float] = {}

    try:
        if args.workbook:
            current = ingest_workbook(args.workbook, ingest, cfg.model, year=year, today=today, timings=timings)
        else:
            logger.info("No workbook given; using sample data (seed=%d)", seed)
            current = generate_sample(seed=seed, year=year, uplift=1.06, constants=cfg.model)
        if args.prior_workbook:
            prior = ingest_workbook(args.prior_workbook, ingest, cfg.model, year=year - 1, today=today)
        else:
            prior = generate_sample(seed=seed ^ 1337, year=year - 1, constants=cfg.model)
    except ScenarioLabError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    scenario = dict(cfg.scenario)
    for key in ("revenue_multiplier", "volume_multiplier", "mix_shift_industry", "mix_shift_percent"):
        value = getattr(args, key)
        if value is not None:
            scenario[key] = value
    params = ScenarioParameters.from_mapping(scenario)
    filters = dict(cfg.filters)

    try:
        filters.update(_parse_filters(args.filter))
        view = scenario_view(current.weekly, params, filters, cfg.model)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    prior_view = scenario_view(prior.weekly, None, filters, cfg.model)

    cutoff = next(c for c in (args.month_cutoff, cfg.report.month_cutoff, today.month) if c is not None)
    adj = args.forecast_adjustment if args.forecast_adjustment is not None else cfg.report.forecast_adjustment_pct
    comparison = compare_periods(
        group_by_time(view, "monthly", cfg.model),
        group_by_time(prior_view, "monthly", cfg.model),
        cutoff,
        adj,
    )
    kpis = summarize_kpis(view, cfg.report.top_n, cfg.model)

    info = current.info
    print(f"Layout: {info.get('layout')} | rows: {info.get('total_rows')} | accounts: {info.get('processed_rows')} | skipped: {info.get('skipped_rows')}")
    if info.get("imputed"):
        print("Imputed values: " + ", ".join(f"{k}={v}" for k, v in sorted(info["imputed"].items())))
    print(f"Overall pipeline revenue: {currency_millions(kpis.overall_revenue, 1)} ({args.period} view)")
    print(f"Overall pipeline volume:  {volume_hundreds(kpis.overall_volume, 1)}")
    print(f"Average monthly revenue:  {currency_millions(kpis.avg_monthly_revenue, 1)}")
    print(f"Average monthly volume:   {volume_hundreds(kpis.avg_monthly_volume, 1)}")
    print(f"YTD revenue (M1-M{comparison.month_cutoff}): TY {currency_millions(comparison.ytd_revenue_current)} vs LY {currency_millions(comparison.ytd_revenue_prior)}")
    ytd_change = _change_pct(comparison.ytd_revenue_current, comparison.ytd_revenue_prior)
    print(f"YTD revenue change vs LY: {percent(ytd_change)}")
    print(f"MTD revenue (M{comparison.month_cutoff}): TY {currency_millions(comparison.mtd_revenue_current)} vs LY {currency_millions(comparison.mtd_revenue_prior)}")
    print(f"Forecast revenue ({adj:+.0f}%): {currency_millions(comparison.forecast_revenue_current)}")
    print(f"Forecast volume ({adj:+.0f}%):  {volume_hundreds(comparison.forecast_volume_current)}")

    series = group_by_time(view, args.period, cfg.model)
    print(f"\n{args.period.title()} series:")
    print(series.to_string(index=False))
    print("\nRevenue by industry:")
    for row in group_by_key(view, "industry").itertuples(index=False):
        print(f"  {row.industry}: {currency_millions(row.revenue)} / {integer(row.volume)} units")
    print("\nTop accounts by revenue:")
    for row in kpis.top_accounts_by_revenue.itertuples(index=False):
        print(f"  {row.account}: {currency_millions(row.revenue)}")

    if args.export_csv:
        export_csv(view, args.export_csv)
    if args.sample_template:
        write_sample_workbook(current.weekly, args.sample_template)
    if args.timings and timings:
        print(format_timing_report(timings))
    return 0


def main() -> None:
    """CLI entry point."""
    sys.exit(run())


if __name__ == "__main__":
    main()
