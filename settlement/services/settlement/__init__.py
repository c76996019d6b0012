"""
Settlement engine package.

Components, in dependency order:
- hierarchy: validated in-memory partner tree (HierarchyIndex)
- activity: wager sums by category (ActivityAggregator)
- cash_flow: cash and point sums of a direct scope (CashFlowAggregator)
- tree_walker: post-order fold producing SettlementRow values
- visibility: caller scope resolution (VisibilityScope)
- summary: filter-then-sum reduction (SummaryReducer, RowFilter)
- padding_config: versioned padding-cut snapshots per operator
- executor: settlement record creation
"""

from settlement.services.settlement.activity import ActivityAggregator
from settlement.services.settlement.cash_flow import CashFlowAggregator
from settlement.services.settlement.dto import (
    CashEntry,
    CashTotals,
    CategoryFigures,
    DateRange,
    MemberNode,
    PartnerNode,
    PointEntry,
    PointTotals,
    SettlementRecordData,
    SettlementRow,
    SummaryStats,
    WagerEntry,
)
from settlement.services.settlement.executor import SettlementExecutor
from settlement.services.settlement.hierarchy import HierarchyIndex
from settlement.services.settlement.padding_config import PaddingCutConfigService
from settlement.services.settlement.summary import RowFilter, SummaryReducer, displayed_rolling
from settlement.services.settlement.tree_walker import SettlementTreeWalker
from settlement.services.settlement.visibility import VisibilityScope, VisibleScope


__all__ = [
    # Components
    "ActivityAggregator",
    "CashFlowAggregator",
    "HierarchyIndex",
    "PaddingCutConfigService",
    "SettlementExecutor",
    "SettlementTreeWalker",
    "SummaryReducer",
    "VisibilityScope",
    # DTOs
    "CashEntry",
    "CashTotals",
    "CategoryFigures",
    "DateRange",
    "MemberNode",
    "PartnerNode",
    "PointEntry",
    "PointTotals",
    "RowFilter",
    "SettlementRecordData",
    "SettlementRow",
    "SummaryStats",
    "VisibleScope",
    "WagerEntry",
    # Presentation
    "displayed_rolling",
]
