"""Pydantic models for commission calculations."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from commission.constants import CASINO, GAME_CATEGORIES, SLOT, ZERO


def _non_negative(value: Any) -> Decimal:
    """Coerce a stored rate to a non-negative Decimal (missing -> 0)."""
    if value is None:
        return ZERO
    rate = value if isinstance(value, Decimal) else Decimal(str(value))
    if rate.is_nan() or rate < 0:
        return ZERO
    return rate


class CommissionRates(BaseModel):
    """Commission percentages of one node, per game category.

    All rates are percentages (1.2 means 1.2%).
    """

    model_config = ConfigDict(frozen=True)

    casino_rolling_pct: Decimal = Field(default=ZERO, ge=0, description="Casino rolling %")
    casino_losing_pct: Decimal = Field(default=ZERO, ge=0, description="Casino losing %")
    slot_rolling_pct: Decimal = Field(default=ZERO, ge=0, description="Slot rolling %")
    slot_losing_pct: Decimal = Field(default=ZERO, ge=0, description="Slot losing %")

    @classmethod
    def from_stored(
        cls,
        casino_rolling_pct: Any = None,
        casino_losing_pct: Any = None,
        slot_rolling_pct: Any = None,
        slot_losing_pct: Any = None,
    ) -> "CommissionRates":
        """
        Build rates from stored values.

        Missing or negative values become 0 instead of failing validation,
        since stored hierarchy data is settled as-is.
        """
        return cls(
            casino_rolling_pct=_non_negative(casino_rolling_pct),
            casino_losing_pct=_non_negative(casino_losing_pct),
            slot_rolling_pct=_non_negative(slot_rolling_pct),
            slot_losing_pct=_non_negative(slot_losing_pct),
        )

    def rolling_pct(self, category: str) -> Decimal:
        """Rolling rate for a game category."""
        return self.slot_rolling_pct if category == SLOT else self.casino_rolling_pct

    def losing_pct(self, category: str) -> Decimal:
        """Losing rate for a game category."""
        return self.slot_losing_pct if category == SLOT else self.casino_losing_pct


class WagerTotals(BaseModel):
    """Summed bet/win amounts split by game category."""

    model_config = ConfigDict(frozen=True)

    casino_bet: Decimal = ZERO
    casino_win: Decimal = ZERO
    slot_bet: Decimal = ZERO
    slot_win: Decimal = ZERO

    def __add__(self, other: "WagerTotals") -> "WagerTotals":
        return WagerTotals(
            casino_bet=self.casino_bet + other.casino_bet,
            casino_win=self.casino_win + other.casino_win,
            slot_bet=self.slot_bet + other.slot_bet,
            slot_win=self.slot_win + other.slot_win,
        )

    def bet(self, category: str) -> Decimal:
        return self.slot_bet if category == SLOT else self.casino_bet

    def win(self, category: str) -> Decimal:
        return self.slot_win if category == SLOT else self.casino_win

    @property
    def total_bet(self) -> Decimal:
        return self.casino_bet + self.slot_bet

    @property
    def total_win(self) -> Decimal:
        return self.casino_win + self.slot_win


class CategoryCommission(BaseModel):
    """Rolling and losing commission for a single game category."""

    model_config = ConfigDict(frozen=True)

    rolling: Decimal = Field(default=ZERO, ge=0)
    losing: Decimal = Field(default=ZERO, ge=0)


class CommissionBreakdown(BaseModel):
    """Commission of one node, per category and in total."""

    model_config = ConfigDict(frozen=True)

    casino: CategoryCommission = CategoryCommission()
    slot: CategoryCommission = CategoryCommission()

    def for_category(self, category: str) -> CategoryCommission:
        return self.slot if category == SLOT else self.casino

    @property
    def total_rolling(self) -> Decimal:
        return self.casino.rolling + self.slot.rolling

    @property
    def total_losing(self) -> Decimal:
        return self.casino.losing + self.slot.losing

    def rolling_by_category(self) -> dict[str, Decimal]:
        return {category: self.for_category(category).rolling for category in GAME_CATEGORIES}


__all__ = [
    "CategoryCommission",
    "CommissionBreakdown",
    "CommissionRates",
    "WagerTotals",
]
