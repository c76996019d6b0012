"""Core commission arithmetic and models."""

from commission.core.calculator import CommissionCalculator
from commission.core.models import (
    CategoryCommission,
    CommissionBreakdown,
    CommissionRates,
    WagerTotals,
)
from commission.core.padding_cut import PaddingCutConfig, PaddingCutPolicy

__all__ = [
    "CategoryCommission",
    "CommissionBreakdown",
    "CommissionCalculator",
    "CommissionRates",
    "PaddingCutConfig",
    "PaddingCutPolicy",
    "WagerTotals",
]
