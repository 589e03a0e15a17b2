from __future__ import annotations

import math
from datetime import UTC, date, datetime
from fractions import Fraction


def utc_now_iso() -> str:
    return datetime.now(UTC).replace(microsecond=0).isoformat()


def today_iso() -> str:
    return date.today().isoformat()


def round_half_up(value: Fraction | int) -> int:
    # Board metrics are never negative.
    return math.floor(Fraction(value) + Fraction(1, 2))


def format_money(value: Fraction | int, symbol: str = "$") -> str:
    return f"{symbol}{round_half_up(value):,}"


def format_score(value: Fraction | None) -> str:
    if value is None:
        return "-"
    return str(round_half_up(value))
