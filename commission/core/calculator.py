"""
Pure commission calculator.

Turns aggregated wager figures and a node's rates into rolling and
losing commission. No database, ORM or settlement-engine dependencies.
"""

from decimal import Decimal

from commission.constants import CASINO, GAME_CATEGORIES, HUNDRED, SLOT, ZERO
from commission.core.models import (
    CategoryCommission,
    CommissionBreakdown,
    CommissionRates,
    WagerTotals,
)


class CommissionCalculator:
    """
    Rolling/losing commission arithmetic.

    Every method works on Decimal values only. Rates are percentages.
    Categories are computed independently and summed afterwards, so a
    negative losing margin in one category never offsets another.
    """

    def rolling_commission(self, bet: Decimal, rate_pct: Decimal) -> Decimal:
        """
        Calculate rolling commission on wagered volume.

        Formula: bet * rate_pct / 100

        Args:
            bet: Wagered volume
            rate_pct: Rolling rate as percentage (e.g., 1.2 = 1.2%)

        Returns:
            Rolling commission amount

        Example:
            >>> calc = CommissionCalculator()
            >>> calc.rolling_commission(Decimal("10000000"), Decimal("1"))
            Decimal('100000')
        """
        if bet <= 0:
            return ZERO

        if rate_pct <= 0:
            return ZERO

        return bet * rate_pct / HUNDRED

    def losing_commission(
        self,
        bet: Decimal,
        win: Decimal,
        rolling_amount: Decimal,
        rate_pct: Decimal,
    ) -> Decimal:
        """
        Calculate losing commission on the house margin left after rolling.

        Formula: max(0, (bet - win) - rolling_amount) * rate_pct / 100

        Args:
            bet: Wagered volume
            win: Amount paid back to players
            rolling_amount: Rolling commission already paid on the same volume
            rate_pct: Losing rate as percentage

        Returns:
            Losing commission amount, never negative

        Example:
            >>> calc = CommissionCalculator()
            >>> calc.losing_commission(
            ...     Decimal("10000000"), Decimal("9000000"), Decimal("100000"), Decimal("10")
            ... )
            Decimal('90000')
        """
        if rate_pct <= 0:
            return ZERO

        base = (bet - win) - rolling_amount
        if base <= 0:
            return ZERO

        return base * rate_pct / HUNDRED

    def category_commission(
        self,
        bet: Decimal,
        win: Decimal,
        rolling_pct: Decimal,
        losing_pct: Decimal,
    ) -> CategoryCommission:
        """Rolling and losing commission for one game category."""
        rolling = self.rolling_commission(bet, rolling_pct)
        losing = self.losing_commission(bet, win, rolling, losing_pct)
        return CategoryCommission(rolling=rolling, losing=losing)

    def calculate(self, wagers: WagerTotals, rates: CommissionRates) -> CommissionBreakdown:
        """
        Calculate commission for every game category.

        Args:
            wagers: Pooled bet/win totals the rates are applied to
            rates: Rates of the node being settled

        Returns:
            Per-category and total commission
        """
        per_category = {
            category: self.category_commission(
                wagers.bet(category),
                wagers.win(category),
                rates.rolling_pct(category),
                rates.losing_pct(category),
            )
            for category in GAME_CATEGORIES
        }
        return CommissionBreakdown(
            casino=per_category.get(CASINO, CategoryCommission()),
            slot=per_category.get(SLOT, CategoryCommission()),
        )

    def ggr(self, bet: Decimal, win: Decimal) -> Decimal:
        """Gross gaming revenue (bet - win); may be negative."""
        return bet - win


# Module-level instance for callers that do not need their own
calculator = CommissionCalculator()

__all__ = ["CommissionCalculator", "calculator"]
