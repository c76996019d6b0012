"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from settlement.models.base import Base

# Hierarchy
from settlement.models.partner import Partner
from settlement.models.member_account import MemberAccount

# Activity and cash
from settlement.models.wager_record import WagerRecord
from settlement.models.cash_event import CashEvent
from settlement.models.point_event import PointEvent

# Configuration and history
from settlement.models.padding_cut_setting import PaddingCutSetting
from settlement.models.settlement_record import SettlementRecord

from settlement.models.enums import (
    CashEventKind,
    CashEventStatus,
    GameCategory,
    NodeType,
    PointEventKind,
    SettlementPeriod,
)

__all__ = [
    "Base",
    "Partner",
    "MemberAccount",
    "WagerRecord",
    "CashEvent",
    "PointEvent",
    "PaddingCutSetting",
    "SettlementRecord",
    # Enums
    "CashEventKind",
    "CashEventStatus",
    "GameCategory",
    "NodeType",
    "PointEventKind",
    "SettlementPeriod",
]
