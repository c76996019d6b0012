"""Display helpers for commission figures."""

from commission.utils.formatters import (
    format_commission_breakdown,
    format_currency,
    format_number,
    format_percentage,
)

__all__ = [
    "format_commission_breakdown",
    "format_currency",
    "format_number",
    "format_percentage",
]
