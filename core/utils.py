"""Assorted utility helpers."""
import math


def nz(x, default=0.0):
    """Return a float for ``x`` or a fallback value.

    Form fields arrive as ``None``, empty strings, ``NaN`` or text with
    thousands separators.  This mirrors the spreadsheet ``NZ()`` function so
    later math never breaks on a blank value.
    """

    v = parse_number(x)
    return default if v is None else v


def parse_number(value):
    """Parse ``value`` to a finite float or ``None``.

    Accepts ``"350,000"`` and ``"£350000"`` as well as plain numbers.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.replace(",", "").replace("£", "").strip()
        if not value:
            return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    return num if math.isfinite(num) else None


def parse_percentage(text):
    """Parse ``"5.89%"`` or ``"5.89"`` to the decimal ``0.0589``."""
    if text is None or text == "":
        return None
    num = parse_number(str(text).replace("%", ""))
    return None if num is None else num / 100


def format_currency(amount, decimals: int = 0) -> str:
    """Format a number as GBP, ``"—"`` for missing values."""
    if amount is None:
        return "—"
    amount = float(amount)
    sign = "-" if amount < 0 else ""
    return f"{sign}£{abs(amount):,.{decimals}f}"


def format_percentage(decimal, decimals: int = 2) -> str:
    """Format a decimal fraction as a percentage string."""
    if decimal is None:
        return "—"
    return f"{float(decimal) * 100:.{decimals}f}%"
