"""Logging setup and stage observability helpers.

Every pipeline stage emits one INFO record with its row counts in and out, so a
run can be followed from the log alone:

    resolve → normalize → expand → scenario → filter → aggregate

This module imports nothing from the pipeline. A file handler that cannot be
attached leaves console logging in place.
"""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Dict, Optional


LOGGER_NAME = "scenario_lab"
SYSTEM_FMT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DATE_FMT = "%Y-%m-%d %H:%M:%S"


def _safe_add_file_handler(logger: logging.Logger, path: Path, level: int) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(path, encoding="utf-8")
        fh.setLevel(level)
        fh.setFormatter(logging.Formatter(SYSTEM_FMT, datefmt=DATE_FMT))
        logger.addHandler(fh)
    except OSError as exc:
        logger.warning("Failed to attach file handler %s (%s)", str(path), exc)


def setup_logging(config: Optional[Dict[str, Any]] = None) -> logging.Logger:
    """Configure the ``scenario_lab`` logger with console + optional file output.

    ``config`` is the ``logging`` section: ``level``, ``logs_dir``, ``file_name``.
    Handlers are reset so repeated calls do not duplicate output.
    """
    cfg = config or {}
    level = getattr(logging, str(cfg.get("level") or "INFO").upper(), logging.INFO)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers = []

    sh = logging.StreamHandler()
    sh.setLevel(level)
    sh.setFormatter(logging.Formatter(SYSTEM_FMT, datefmt=DATE_FMT))
    logger.addHandler(sh)

    logs_dir = cfg.get("logs_dir")
    if logs_dir:
        log_path = Path(logs_dir).expanduser().resolve() / str(cfg.get("file_name") or "scenario_lab.log")
        _safe_add_file_handler(logger, log_path, level)
        logger.debug("Logging initialised. Logs will be written to %s", log_path)
    return logger


def get_logger(stage: str) -> logging.Logger:
    """Return the child logger for a pipeline stage, e.g. ``scenario_lab.normalize``."""
    return logging.getLogger(f"{LOGGER_NAME}.{stage}")


def log_stage(logger: logging.Logger, stage: str, rows_in: int, rows_out: int, **extra: Any) -> Dict[str, Any]:
    """Emit the per-stage counts record and return it as a dict."""
    entry: Dict[str, Any] = {"stage": stage, "rows_in": int(rows_in), "rows_out": int(rows_out)}
    entry.update(extra)
    details = " ".join(f"{k}={v}" for k, v in extra.items())
    logger.info("[%s] rows_in=%d rows_out=%d%s", stage, rows_in, rows_out, f" {details}" if details else "")
    return entry


def log_skipped_row(logger: logging.Logger, position: int, reason: str) -> str:
    message = f"Skipping row {position}: {reason}"
    logger.warning(message)
    return message


def start_stage_timer() -> float:
    return time.perf_counter()


def end_stage_timer(stage: str, start_time: float, timing_dict: Dict[str, float]) -> float:
    """Record the elapsed seconds for ``stage`` into ``timing_dict``."""
    elapsed = time.perf_counter() - float(start_time)
    timing_dict[stage] = timing_dict.get(stage, 0.0) + elapsed
    return elapsed


def format_timing_report(timing_dict: Dict[str, float]) -> str:
    lines = ["---- SCENARIO LAB TIMING REPORT ----"]
    total = 0.0
    for stage, seconds in timing_dict.items():
        total += float(seconds)
        lines.append(f"{stage}: {float(seconds):.3f} seconds")
    lines.append(f"Total Duration: {total:.3f} seconds")
    return "\n".join(lines)
