"""Display formatting for amounts"""
import math

from config import CURRENCY_SYMBOL


def format_amount(value) -> str:
    """
    Two decimals with thousands separators.
    Example: 1234567.5 -> "1,234,567.50"
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = 0.0
    if not math.isfinite(number):
        number = 0.0
    # avoid "-0.00"
    if round(number, 2) == 0:
        number = 0.0
    return f"{number:,.2f}"


def format_currency(value) -> str:
    """Example: -250 -> "-₹250.00" """
    text = format_amount(value)
    if text.startswith('-'):
        return f"-{CURRENCY_SYMBOL}{text[1:]}"
    return f"{CURRENCY_SYMBOL}{text}"
