"""
Display formatting for money, counts, percentages and identifiers.
"""

from datetime import datetime
from typing import Any

from .utils import parse_timestamp


CURRENCY_SYMBOLS = {
    "GHS": "₵",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}


def format_currency(amount: float, currency: str = "GHS") -> str:
    """
    Format an amount with its currency symbol and thousands separators.
    Trailing zero decimals are dropped: 1234.5 -> "₵1,234.5", 1200 -> "₵1,200".
    """
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    text = f"{float(amount or 0):,.2f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{symbol}{text}"


def format_number(num: float) -> str:
    return f"{num:,}"


def format_percentage(num: float) -> str:
    """Signed percentage with one decimal, e.g. "+12.5%" or "-3.0%"."""
    sign = "+" if num >= 0 else ""
    return f"{sign}{num:.1f}%"


def format_transaction_id(doc_id: str) -> str:
    """Short display reference for a transaction document id."""
    return f"TXN{doc_id[-6:].upper()}"


def format_date(value: Any, with_time: bool = True) -> str:
    """Format a stored timestamp as "May 3, 2026, 02:15 PM" (UTC)."""
    parsed = parse_timestamp(value)
    if parsed is None:
        return "-"
    date_part = f"{parsed:%b} {parsed.day}, {parsed.year}"
    if not with_time:
        return date_part
    return f"{date_part}, {parsed:%I:%M %p}"


def format_month(value: datetime) -> str:
    """Month label used on revenue charts, e.g. "Jan 2026"."""
    return value.strftime('%b %Y')
