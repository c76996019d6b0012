"""
Constants for the commission package.

Game categories, partner level bounds and the default padding-cut tiers
shared by the calculator and the padding-cut policy.
"""

from decimal import Decimal

ZERO = Decimal("0")
HUNDRED = Decimal("100")

# Game categories settled independently of each other
CASINO = "casino"
SLOT = "slot"
GAME_CATEGORIES: tuple[str, ...] = (CASINO, SLOT)

# Partner tiers: 1 = system operator ... 6 = store (leaf-tier operator)
MIN_PARTNER_LEVEL = 1
MAX_PARTNER_LEVEL = 6
PARTNER_LEVELS: tuple[int, ...] = tuple(
    range(MIN_PARTNER_LEVEL, MAX_PARTNER_LEVEL + 1)
)

# Tiers that may carry a padding-bet cut in the reference deployment
DEFAULT_PADDING_CUT_LEVELS: tuple[int, ...] = (3, 4, 5, 6)


def is_partner_level(level: int) -> bool:
    """Check whether level is a valid partner tier (1-6)."""
    return MIN_PARTNER_LEVEL <= level <= MAX_PARTNER_LEVEL
