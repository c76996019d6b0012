"""
Tests for the padding-cut policy.
"""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from commission import PaddingCutConfig, PaddingCutPolicy


def enabled_config(**overrides) -> PaddingCutConfig:
    values = {
        "global_enabled": True,
        "level_flags": {3: True, 4: False, 5: False, 6: False},
        "cut_percentage": Decimal("5"),
    }
    values.update(overrides)
    return PaddingCutConfig(**values)


class TestCutRolling:
    """Test cut amount calculation."""

    def test_enabled_level(self):
        """5% of 100,000 at an enabled level 3 is 5,000."""
        policy = PaddingCutPolicy(enabled_config())
        assert policy.cut_rolling(Decimal("100000"), 3) == Decimal("5000")

    def test_disabled_level(self):
        """Levels without a flag are not cut."""
        policy = PaddingCutPolicy(enabled_config())
        assert policy.cut_rolling(Decimal("100000"), 4) == Decimal("0")

    def test_global_switch_overrides_levels(self):
        """Global switch off means no cut even with levels enabled."""
        policy = PaddingCutPolicy(enabled_config(global_enabled=False))

        assert not policy.applies_to(3)
        assert policy.cut_rolling(Decimal("100000"), 3) == Decimal("0")

    def test_member_level_never_cut(self):
        """Level 0 carries no flag."""
        policy = PaddingCutPolicy(enabled_config())
        assert policy.cut_rolling(Decimal("100000"), 0) == Decimal("0")

    def test_default_config_is_disabled(self):
        policy = PaddingCutPolicy()
        assert policy.cut_rolling(Decimal("100000"), 3) == Decimal("0")

    def test_cut_by_category(self):
        policy = PaddingCutPolicy(enabled_config())

        cut = policy.cut_by_category({"casino": Decimal("120000"), "slot": Decimal("40000")}, 3)

        assert cut == {"casino": Decimal("6000"), "slot": Decimal("2000")}


class TestDisplayedRolling:
    """Test the display toggles."""

    ROLLING = {"casino": Decimal("120000"), "slot": Decimal("40000")}
    CUT = {"casino": Decimal("6000"), "slot": Decimal("2000")}

    def test_gross_by_default(self):
        """Without rolling_cut_display the gross figure is shown."""
        policy = PaddingCutPolicy(enabled_config())
        assert policy.displayed_rolling(self.ROLLING, self.CUT) == Decimal("160000")

    def test_net_when_display_enabled(self):
        policy = PaddingCutPolicy(enabled_config(rolling_cut_display=True))
        assert policy.displayed_rolling(self.ROLLING, self.CUT) == Decimal("152000")

    def test_category_toggle(self):
        """Only categories with their toggle on are subtracted."""
        policy = PaddingCutPolicy(enabled_config(rolling_cut_display=True, slot_cut=False))
        assert policy.displayed_rolling(self.ROLLING, self.CUT) == Decimal("154000")


class TestPaddingCutConfig:
    """Test configuration validation."""

    @pytest.mark.parametrize("percentage", ["-1", "100.01"])
    def test_percentage_bounds(self, percentage):
        with pytest.raises(ValidationError):
            PaddingCutConfig(cut_percentage=Decimal(percentage))

    @pytest.mark.parametrize("level", [0, 7])
    def test_level_bounds(self, level):
        with pytest.raises(ValidationError):
            PaddingCutConfig(level_flags={level: True})

    def test_enabled_levels(self):
        config = enabled_config(level_flags={3: True, 5: True, 6: False})
        assert config.enabled_levels == frozenset({3, 5})

    def test_snapshot_is_frozen(self):
        config = enabled_config()
        with pytest.raises(ValidationError):
            config.cut_percentage = Decimal("10")
