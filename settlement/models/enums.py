"""
Enumerations used by settlement models and services.
"""

from enum import Enum


class GameCategory(str, Enum):
    """Game category of a wager record."""

    CASINO = "casino"
    SLOT = "slot"


class CashEventKind(str, Enum):
    """
    Kind of a cash movement, seen from the event's subject.

    Online flows are player-initiated; manual flows are issued by an
    operator; partner funding is a transfer between partners.
    """

    ONLINE_DEPOSIT = "online_deposit"
    ONLINE_WITHDRAWAL = "online_withdrawal"
    MANUAL_DEPOSIT = "manual_deposit"
    MANUAL_WITHDRAWAL = "manual_withdrawal"
    PARTNER_FUNDING_IN = "partner_funding_in"
    PARTNER_FUNDING_OUT = "partner_funding_out"

    @property
    def is_inflow(self) -> bool:
        return self in (
            CashEventKind.ONLINE_DEPOSIT,
            CashEventKind.MANUAL_DEPOSIT,
            CashEventKind.PARTNER_FUNDING_IN,
        )

    @property
    def is_online(self) -> bool:
        return self in (CashEventKind.ONLINE_DEPOSIT, CashEventKind.ONLINE_WITHDRAWAL)


class CashEventStatus(str, Enum):
    """Cash event status; only completed events are settled."""

    COMPLETED = "completed"
    REJECTED = "rejected"
    PENDING = "pending"


class PointEventKind(str, Enum):
    """Point adjustment kind."""

    GRANT = "grant"
    RECLAIM = "reclaim"


class NodeType(str, Enum):
    """Kind of node a settlement row describes."""

    PARTNER = "partner"
    MEMBER = "member"


class SettlementPeriod(str, Enum):
    """Label of the period a settlement was executed for."""

    TODAY = "today"
    YESTERDAY = "yesterday"
    WEEK = "week"
    MONTH = "month"
    CUSTOM = "custom"
