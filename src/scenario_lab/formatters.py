from __future__ import annotations

import math
from typing import Any


def round_half_up(x: float) -> int:
    return int(math.floor(float(x) + 0.5))


def currency_millions(n: Any, dp: int = 2, symbol: str = "₱") -> str:
    try:
        return f"{symbol}{float(n) / 1_000_000:.{dp}f}M"
    except (TypeError, ValueError):
        return "n/a"


def volume_hundreds(n: Any, dp: int = 2) -> str:
    try:
        return f"{float(n) / 100:.{dp}f}H"
    except (TypeError, ValueError):
        return "n/a"


def integer(n: Any) -> str:
    try:
        return f"{round_half_up(n):,}"
    except (TypeError, ValueError):
        return "n/a"


def percent(x: Any, dp: int = 1) -> str:
    try:
        return f"{float(x):.{dp}f}%"
    except (TypeError, ValueError):
        return "n/a"
