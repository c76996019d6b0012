"""
Settlement constants.

Hierarchy level bounds, display names and engine defaults.
"""

from commission.constants import DEFAULT_PADDING_CUT_LEVELS, MAX_PARTNER_LEVEL, MIN_PARTNER_LEVEL

# Hierarchy levels
ROOT_LEVEL = MIN_PARTNER_LEVEL
LEAF_PARTNER_LEVEL = MAX_PARTNER_LEVEL
MEMBER_LEVEL = 0  # member rows are reported at level 0 and are never cut

LEVEL_NAMES: dict[int, str] = {
    MEMBER_LEVEL: "member",
    1: "system operator",
    2: "operator",
    3: "head office",
    4: "sub head office",
    5: "distributor",
    6: "store",
}

# Engine defaults
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_CONCURRENCY = 10
DEFAULT_CHUNK_SIZE = 100
PADDING_CUT_LEVELS = DEFAULT_PADDING_CUT_LEVELS

# Collaborator names used in error context and logs
DIRECTORY_COLLABORATOR = "partner_directory"
WAGER_COLLABORATOR = "wager_source"
CASH_COLLABORATOR = "cash_event_source"
POINT_COLLABORATOR = "point_event_source"
PADDING_STORE_COLLABORATOR = "padding_cut_store"
RECORD_STORE_COLLABORATOR = "settlement_record_store"


def get_level_name(level: int) -> str:
    """Human readable name for a hierarchy level."""
    return LEVEL_NAMES.get(level, "operator")
