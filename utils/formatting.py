# nota/utils/formatting.py

import logging
import math
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Union

logger = logging.getLogger(__name__)

INDONESIAN_MONTHS = [
    "Januari",
    "Februari",
    "Maret",
    "April",
    "Mei",
    "Juni",
    "Juli",
    "Agustus",
    "September",
    "Oktober",
    "November",
    "Desember",
]


def safe_number(value: Any) -> float:
    """
    Coerce `value` to a finite float. None, NaN, inf and unparsable input
    become 0.0 so nothing malformed ever reaches a printed page.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning("Non-numeric value %r replaced by 0", value)
        return 0.0
    if not math.isfinite(number):
        logger.warning("Non-finite value %r replaced by 0", value)
        return 0.0
    return number


def round_half_up(value: Any) -> int:
    """Round to a whole number with halves away from zero (2.5 -> 3)."""
    return int(Decimal(str(safe_number(value))).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_rupiah(n: Union[int, float, None]) -> str:
    """
    Format a number Indonesian-style with '.' as thousands separator
    and no decimals.
    Example: 1234567 -> "1.234.567"
    """
    return f"{round_half_up(n):,}".replace(",", ".")


def format_currency(n: Union[int, float, None]) -> str:
    """Example: 1234567 -> "Rp 1.234.567" """
    return f"Rp {format_rupiah(n)}"


def format_weight(grams: Union[int, float, None], decimals: int = 2) -> str:
    return f"{safe_number(grams):.{decimals}f}"


def format_percent(fraction: Union[int, float, None]) -> str:
    # 0.916 -> "92%"
    if fraction is None:
        return ""
    return f"{round_half_up(safe_number(fraction) * 100)}%"


def format_date_long(value: Union[date, datetime]) -> str:
    """
    Long-form Indonesian date.
    Example: date(2026, 10, 19) -> "19 Oktober 2026"
    """
    return f"{value.day} {INDONESIAN_MONTHS[value.month - 1]} {value.year}"
