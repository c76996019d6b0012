"""
Partner commission arithmetic.

Standalone package for rolling/losing commission and padding-bet cuts.
It has no database or settlement-engine dependencies.

Example:
    >>> from decimal import Decimal
    >>> from commission import CommissionCalculator, CommissionRates, WagerTotals
    >>>
    >>> calc = CommissionCalculator()
    >>> rates = CommissionRates(casino_rolling_pct=Decimal("1"), casino_losing_pct=Decimal("10"))
    >>> wagers = WagerTotals(casino_bet=Decimal("10000000"), casino_win=Decimal("9000000"))
    >>> result = calc.calculate(wagers, rates)
    >>> print(result.casino.rolling, result.casino.losing)
    100000 90000
"""

from commission.constants import (
    CASINO,
    DEFAULT_PADDING_CUT_LEVELS,
    GAME_CATEGORIES,
    PARTNER_LEVELS,
    SLOT,
    is_partner_level,
)
from commission.core.calculator import CommissionCalculator
from commission.core.models import (
    CategoryCommission,
    CommissionBreakdown,
    CommissionRates,
    WagerTotals,
)
from commission.core.padding_cut import PaddingCutConfig, PaddingCutPolicy
from commission.utils import (
    format_commission_breakdown,
    format_currency,
    format_number,
    format_percentage,
)


__version__ = "1.0.0"
__all__ = [
    # Core
    "CommissionCalculator",
    "PaddingCutPolicy",
    # Models
    "CommissionRates",
    "WagerTotals",
    "CategoryCommission",
    "CommissionBreakdown",
    "PaddingCutConfig",
    # Constants
    "CASINO",
    "SLOT",
    "GAME_CATEGORIES",
    "PARTNER_LEVELS",
    "DEFAULT_PADDING_CUT_LEVELS",
    "is_partner_level",
    # Formatters
    "format_currency",
    "format_percentage",
    "format_number",
    "format_commission_breakdown",
]
