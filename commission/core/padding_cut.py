"""
Padding-bet cut policy.

A padding-bet cut shaves a configured percentage off rolling commission
for selected partner levels. The cut is always reported next to the
gross rolling figure and is never subtracted from it here; whether a
screen shows "rolling minus cut" is decided by the display toggles.
"""

from collections.abc import Mapping
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from commission.constants import (
    DEFAULT_PADDING_CUT_LEVELS,
    GAME_CATEGORIES,
    HUNDRED,
    SLOT,
    ZERO,
    is_partner_level,
)


class PaddingCutConfig(BaseModel):
    """
    Immutable, versioned padding-cut configuration snapshot.

    A computation pins one snapshot at its start; writers publish a new
    snapshot with a higher version instead of mutating this one.
    """

    model_config = ConfigDict(frozen=True)

    global_enabled: bool = Field(default=False, description="Master switch")
    level_flags: dict[int, bool] = Field(
        default_factory=lambda: {level: False for level in DEFAULT_PADDING_CUT_LEVELS},
        description="Per-level enabled flags",
    )
    cut_percentage: Decimal = Field(default=ZERO, ge=0, le=100, description="Cut % of rolling")
    casino_cut: bool = Field(default=True, description="Show casino cut in rolling display")
    slot_cut: bool = Field(default=True, description="Show slot cut in rolling display")
    rolling_cut_display: bool = Field(
        default=False, description="Display rolling as gross minus cut"
    )
    version: int = Field(default=0, ge=0)
    updated_at: datetime | None = None

    @field_validator("level_flags")
    @classmethod
    def validate_levels(cls, v: dict[int, bool]) -> dict[int, bool]:
        """Only partner levels 1-6 may carry a flag."""
        for level in v:
            if not is_partner_level(level):
                raise ValueError(f"level {level} is not a partner level (1-6)")
        return v

    @property
    def enabled_levels(self) -> frozenset[int]:
        return frozenset(level for level, on in self.level_flags.items() if on)

    def category_display_enabled(self, category: str) -> bool:
        """Whether the display toggle for a category is on."""
        if category == SLOT:
            return self.slot_cut
        return self.casino_cut


class PaddingCutPolicy:
    """
    Applies a pinned PaddingCutConfig to rolling commission.

    Args:
        config: Configuration snapshot used for the whole computation
    """

    def __init__(self, config: PaddingCutConfig | None = None):
        self.config = config or PaddingCutConfig()

    def applies_to(self, level: int) -> bool:
        """Check whether nodes of this level are cut at all."""
        if not self.config.global_enabled:
            return False
        return level in self.config.enabled_levels

    def cut_rolling(self, aggregate_rolling: Decimal, level: int) -> Decimal:
        """
        Calculate the cut amount for an aggregate rolling figure.

        Formula: aggregate_rolling * cut_percentage / 100

        Example:
            >>> config = PaddingCutConfig(
            ...     global_enabled=True, level_flags={3: True}, cut_percentage=Decimal("5")
            ... )
            >>> PaddingCutPolicy(config).cut_rolling(Decimal("100000"), 3)
            Decimal('5000')
        """
        if not self.applies_to(level):
            return ZERO

        if aggregate_rolling <= 0 or self.config.cut_percentage <= 0:
            return ZERO

        return aggregate_rolling * self.config.cut_percentage / HUNDRED

    def cut_by_category(
        self, rolling_by_category: Mapping[str, Decimal], level: int
    ) -> dict[str, Decimal]:
        """Cut amount per game category."""
        return {
            category: self.cut_rolling(rolling_by_category.get(category, ZERO), level)
            for category in GAME_CATEGORIES
        }

    def displayed_rolling(
        self,
        rolling_by_category: Mapping[str, Decimal],
        cut_by_category: Mapping[str, Decimal],
    ) -> Decimal:
        """
        Rolling figure a presentation layer should show.

        Gross rolling unless rolling_cut_display is on; then the cut of
        every category whose display toggle is on is subtracted.
        """
        gross = sum(
            (rolling_by_category.get(category, ZERO) for category in GAME_CATEGORIES), ZERO
        )
        if not self.config.rolling_cut_display:
            return gross

        shown_cut = sum(
            (
                cut_by_category.get(category, ZERO)
                for category in GAME_CATEGORIES
                if self.config.category_display_enabled(category)
            ),
            ZERO,
        )
        return gross - shown_cut


__all__ = ["PaddingCutConfig", "PaddingCutPolicy"]
