"""
Formatting utilities for settlement reports.

Functions that render money, rates and counts for tables and CLI output.
Values are formatted from Decimal directly so large amounts keep every
digit.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from commission.core.models import CommissionBreakdown


def _to_decimal(value: Union[int, float, Decimal]) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _swap_separators(formatted: str, thousands_separator: str, decimal_separator: str) -> str:
    if thousands_separator == "," and decimal_separator == ".":
        return formatted
    return (
        formatted.replace(",", "\0")
        .replace(".", decimal_separator)
        .replace("\0", thousands_separator)
    )


def format_currency(
    amount: Union[int, float, Decimal],
    currency: str = "KRW",
    decimals: int = 2,
    thousands_separator: str = ",",
    decimal_separator: str = ".",
) -> str:
    """
    Format an amount as currency.

    Args:
        amount: Amount to format
        currency: Currency code or symbol (default "KRW")
        decimals: Fraction digits
        thousands_separator: Thousands separator
        decimal_separator: Decimal separator

    Returns:
        Formatted string with currency

    Example:
        >>> format_currency(Decimal("1234.5"))
        '1,234.50 KRW'
        >>> format_currency(1000, currency="₩", decimals=0)
        '₩1,000'
    """
    formatted = f"{_to_decimal(amount):,.{decimals}f}"
    formatted = _swap_separators(formatted, thousands_separator, decimal_separator)

    if currency[:1] in ("$", "€", "₩"):
        if formatted.startswith("-"):
            return f"-{currency}{formatted[1:]}"
        return f"{currency}{formatted}"
    return f"{formatted} {currency}"


def format_percentage(
    value: Union[int, float, Decimal],
    decimals: int = 2,
    show_sign: bool = False,
) -> str:
    """
    Format a value that is already a percentage.

    Example:
        >>> format_percentage(Decimal("1.2"))
        '1.20%'
        >>> format_percentage(5, decimals=0, show_sign=True)
        '+5%'
    """
    number = _to_decimal(value)
    sign = "+" if show_sign and number > 0 else ""
    return f"{sign}{number:.{decimals}f}%"


def format_number(
    value: Union[int, float, Decimal],
    decimals: Optional[int] = None,
    thousands_separator: str = ",",
    decimal_separator: str = ".",
) -> str:
    """
    Format a number with thousands grouping.

    Args:
        value: Number to format
        decimals: Fraction digits (None keeps the value's own precision)
        thousands_separator: Thousands separator
        decimal_separator: Decimal separator

    Example:
        >>> format_number(Decimal("1234567.89"))
        '1,234,567.89'
        >>> format_number(1000, decimals=0)
        '1,000'
    """
    number = _to_decimal(value)
    if decimals is None:
        formatted = f"{number:,}"
    else:
        formatted = f"{number:,.{decimals}f}"
    return _swap_separators(formatted, thousands_separator, decimal_separator)


def format_commission_breakdown(
    breakdown: "CommissionBreakdown",
    currency: str = "KRW",
) -> str:
    """
    Format a commission breakdown as a short text block.

    Returns:
        Multi-line report with per-category and total figures
    """
    lines = [
        "Commission:",
        f"  Casino rolling: {format_currency(breakdown.casino.rolling, currency)}",
        f"  Casino losing:  {format_currency(breakdown.casino.losing, currency)}",
        f"  Slot rolling:   {format_currency(breakdown.slot.rolling, currency)}",
        f"  Slot losing:    {format_currency(breakdown.slot.losing, currency)}",
        "",
        f"Total rolling: {format_currency(breakdown.total_rolling, currency)}",
        f"Total losing:  {format_currency(breakdown.total_losing, currency)}",
    ]
    return "\n".join(lines)
