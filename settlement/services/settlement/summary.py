"""
Summary reducer.

Filters settlement rows and sums their numeric fields. Filtering always
happens before summing, so a summary matches the rows listed next to it.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from decimal import Decimal

from commission import PaddingCutConfig, PaddingCutPolicy
from settlement.models.enums import NodeType
from settlement.services.settlement.dto import SettlementRow, SummaryStats

RowPredicate = Callable[[SettlementRow], bool]

# SummaryStats field -> row accessor
_ROW_FIELDS: dict[str, Callable[[SettlementRow], Decimal]] = {
    "casino_bet": lambda row: row.casino.bet,
    "casino_win": lambda row: row.casino.win,
    "slot_bet": lambda row: row.slot.bet,
    "slot_win": lambda row: row.slot.win,
    "total_bet": lambda row: row.total_bet,
    "total_win": lambda row: row.total_win,
    "ggr": lambda row: row.ggr,
    "aggregate_rolling": lambda row: row.aggregate_rolling,
    "aggregate_losing": lambda row: row.aggregate_losing,
    "individual_rolling": lambda row: row.individual_rolling,
    "individual_losing": lambda row: row.individual_losing,
    "cut_amount": lambda row: row.cut_amount,
    "online_deposit": lambda row: row.cash.online_deposit,
    "online_withdrawal": lambda row: row.cash.online_withdrawal,
    "manual_deposit": lambda row: row.cash.manual_deposit,
    "manual_withdrawal": lambda row: row.cash.manual_withdrawal,
    "partner_funding_in": lambda row: row.cash.partner_funding_in,
    "partner_funding_out": lambda row: row.cash.partner_funding_out,
    "net_cash_diff": lambda row: row.net_cash_diff,
    "points_granted": lambda row: row.points.granted,
    "points_reclaimed": lambda row: row.points.reclaimed,
    "balance": lambda row: row.balance,
    "point_balance": lambda row: row.point_balance,
}


@dataclass(frozen=True)
class RowFilter:
    """
    Row filter used by listings and summaries.

    Attributes:
        search: Case-insensitive substring matched against id and username
        levels: Keep only these levels (members are level 0)
        node_type: Keep only partners or only members
    """
    search: str | None = None
    levels: frozenset[int] | None = None
    node_type: NodeType | None = None

    def __call__(self, row: SettlementRow) -> bool:
        if self.search:
            needle = self.search.strip().lower()
            if needle and needle not in row.node_id.lower() and needle not in row.username.lower():
                return False
        if self.levels is not None and row.level not in self.levels:
            return False
        if self.node_type is not None and row.node_type != self.node_type:
            return False
        return True


class SummaryReducer:
    """Folds filtered rows into SummaryStats."""

    def filter_rows(
        self, rows: Iterable[SettlementRow], predicate: RowPredicate | None = None
    ) -> list[SettlementRow]:
        if predicate is None:
            return list(rows)
        return [row for row in rows if predicate(row)]

    def reduce(
        self, rows: Iterable[SettlementRow], predicate: RowPredicate | None = None
    ) -> SummaryStats:
        """
        Filter rows, then sum every numeric field.

        Args:
            rows: Settlement rows
            predicate: Row filter (RowFilter or any callable); None keeps all

        Returns:
            Summary over the visible rows
        """
        visible = self.filter_rows(rows, predicate)
        stats = SummaryStats(
            row_count=len(visible),
            partner_count=sum(1 for row in visible if row.node_type == NodeType.PARTNER),
            member_count=sum(1 for row in visible if row.node_type == NodeType.MEMBER),
        )
        for field_name, accessor in _ROW_FIELDS.items():
            setattr(stats, field_name, sum((accessor(row) for row in visible), Decimal("0")))
        return stats


def displayed_rolling(row: SettlementRow, config: PaddingCutConfig) -> Decimal:
    """
    Rolling figure the presentation layer should show for a row.

    Gross aggregate rolling unless the config's rolling-cut display is on.
    The row itself is never changed.
    """
    policy = PaddingCutPolicy(config)
    return policy.displayed_rolling(
        {"casino": row.casino.aggregate_rolling, "slot": row.slot.aggregate_rolling},
        {"casino": row.casino.cut_amount, "slot": row.slot.cut_amount},
    )
