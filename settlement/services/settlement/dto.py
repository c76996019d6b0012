"""
Settlement data transfer objects.

Plain dataclasses exchanged between the data sources, the engine
components and the presentation layer. Rows and totals are frozen:
recomputation always replaces a row wholesale.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from commission import CASINO, SLOT, CommissionRates
from settlement.config.constants import MEMBER_LEVEL, get_level_name
from settlement.models.enums import (
    CashEventKind,
    CashEventStatus,
    NodeType,
    PointEventKind,
)
from settlement.utils.datetime_utils import ensure_utc
from settlement.utils.exceptions import ValidationError

ZERO = Decimal("0")


@dataclass(frozen=True)
class DateRange:
    """Inclusive [start, end] range in UTC."""
    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if not isinstance(self.start, datetime) or not isinstance(self.end, datetime):
            raise ValidationError(
                "Date range bounds must be datetimes",
                context={"start": self.start, "end": self.end},
            )
        object.__setattr__(self, "start", ensure_utc(self.start))
        object.__setattr__(self, "end", ensure_utc(self.end))
        if self.start > self.end:
            raise ValidationError(
                "Date range start is after its end",
                context={"start": self.start.isoformat(), "end": self.end.isoformat()},
            )

    @classmethod
    def create(cls, start: date | datetime, end: date | datetime) -> DateRange:
        """
        Build a range from dates or datetimes.

        A plain date start means 00:00:00 of that day, a plain date end
        means the last microsecond of that day.
        """
        if not isinstance(start, date) or not isinstance(end, date):
            raise ValidationError(
                "Malformed date range",
                context={"start": repr(start), "end": repr(end)},
            )
        if not isinstance(start, datetime):
            start = datetime.combine(start, time.min)
        if not isinstance(end, datetime):
            end = datetime.combine(end, time.max)
        return cls(start=start, end=end)

    @property
    def period_start(self) -> date:
        return self.start.date()

    @property
    def period_end(self) -> date:
        return self.end.date()

    def as_context(self) -> dict[str, str]:
        """Log/error context representation."""
        return {"date_from": self.start.isoformat(), "date_to": self.end.isoformat()}


@dataclass(frozen=True)
class PartnerNode:
    """Partner as seen by the engine."""
    id: str
    username: str
    level: int
    parent_id: str | None
    rates: CommissionRates = field(default_factory=CommissionRates)
    balance: Decimal = ZERO
    point_balance: Decimal = ZERO


@dataclass(frozen=True)
class MemberNode:
    """Member account as seen by the engine. Rate overrides are optional."""
    id: str
    username: str
    referrer_id: str
    casino_rolling_pct: Decimal | None = None
    casino_losing_pct: Decimal | None = None
    slot_rolling_pct: Decimal | None = None
    slot_losing_pct: Decimal | None = None
    balance: Decimal = ZERO
    point_balance: Decimal = ZERO

    def effective_rates(self, referrer_rates: CommissionRates) -> CommissionRates:
        """Overrides where present, the referrer's rate for every missing field."""
        def pick(override: Decimal | None, inherited: Decimal) -> Decimal:
            return inherited if override is None else override

        return CommissionRates.from_stored(
            casino_rolling_pct=pick(self.casino_rolling_pct, referrer_rates.casino_rolling_pct),
            casino_losing_pct=pick(self.casino_losing_pct, referrer_rates.casino_losing_pct),
            slot_rolling_pct=pick(self.slot_rolling_pct, referrer_rates.slot_rolling_pct),
            slot_losing_pct=pick(self.slot_losing_pct, referrer_rates.slot_losing_pct),
        )


@dataclass(frozen=True)
class WagerEntry:
    """
    Wager amounts of one account and category.

    Either a single record or an already grouped partial sum; summing
    entries gives the same totals either way.
    """
    account_id: str
    category: str
    bet: Decimal
    win: Decimal
    vendor: str | None = None
    occurred_at: datetime | None = None


@dataclass(frozen=True)
class CashEntry:
    """Cash movement (or grouped movements) of one subject."""
    kind: CashEventKind
    amount: Decimal
    status: CashEventStatus = CashEventStatus.COMPLETED
    account_id: str | None = None
    partner_id: str | None = None
    counterparty_partner_id: str | None = None
    occurred_at: datetime | None = None

    def __post_init__(self) -> None:
        if (self.account_id is None) == (self.partner_id is None):
            raise ValueError("CashEntry needs exactly one of account_id or partner_id")

    @property
    def subject_id(self) -> str:
        return self.account_id if self.account_id is not None else self.partner_id


@dataclass(frozen=True)
class PointEntry:
    """Point grant or reclaim on one account."""
    account_id: str
    kind: PointEventKind
    amount: Decimal
    occurred_at: datetime | None = None


@dataclass(frozen=True)
class CashTotals:
    """Completed cash flow sums by kind."""
    online_deposit: Decimal = ZERO
    online_withdrawal: Decimal = ZERO
    manual_deposit: Decimal = ZERO
    manual_withdrawal: Decimal = ZERO
    partner_funding_in: Decimal = ZERO
    partner_funding_out: Decimal = ZERO

    def __add__(self, other: CashTotals) -> CashTotals:
        return CashTotals(
            online_deposit=self.online_deposit + other.online_deposit,
            online_withdrawal=self.online_withdrawal + other.online_withdrawal,
            manual_deposit=self.manual_deposit + other.manual_deposit,
            manual_withdrawal=self.manual_withdrawal + other.manual_withdrawal,
            partner_funding_in=self.partner_funding_in + other.partner_funding_in,
            partner_funding_out=self.partner_funding_out + other.partner_funding_out,
        )

    @property
    def inflow(self) -> Decimal:
        return self.online_deposit + self.manual_deposit + self.partner_funding_in

    @property
    def outflow(self) -> Decimal:
        return self.online_withdrawal + self.manual_withdrawal + self.partner_funding_out

    @property
    def net_cash_diff(self) -> Decimal:
        return self.inflow - self.outflow


@dataclass(frozen=True)
class PointTotals:
    """Point grants and reclaims."""
    granted: Decimal = ZERO
    reclaimed: Decimal = ZERO

    def __add__(self, other: PointTotals) -> PointTotals:
        return PointTotals(
            granted=self.granted + other.granted,
            reclaimed=self.reclaimed + other.reclaimed,
        )

    @property
    def net(self) -> Decimal:
        return self.granted - self.reclaimed


@dataclass(frozen=True)
class CategoryFigures:
    """Settlement figures of one game category."""
    bet: Decimal = ZERO
    win: Decimal = ZERO
    aggregate_rolling: Decimal = ZERO
    aggregate_losing: Decimal = ZERO
    individual_rolling: Decimal = ZERO
    individual_losing: Decimal = ZERO
    cut_amount: Decimal = ZERO

    @property
    def ggr(self) -> Decimal:
        return self.bet - self.win


@dataclass(frozen=True)
class SettlementRow:
    """
    Settlement figures of one node for one date range.

    Keyed by (node_id, date range). Bet and win are pooled over the node
    and all its descendants; cash totals cover direct scope only.
    """
    node_id: str
    node_type: NodeType
    username: str
    level: int
    parent_id: str | None
    depth: int
    date_range: DateRange
    rates: CommissionRates
    has_children: bool
    casino: CategoryFigures
    slot: CategoryFigures
    cash: CashTotals
    pooled_online_deposit: Decimal
    pooled_online_withdrawal: Decimal
    points: PointTotals
    balance: Decimal = ZERO
    point_balance: Decimal = ZERO
    padding_config_version: int = 0
    data_complete: bool = True

    @property
    def key(self) -> tuple[str, datetime, datetime]:
        return (self.node_id, self.date_range.start, self.date_range.end)

    @property
    def is_member(self) -> bool:
        return self.node_type == NodeType.MEMBER

    @property
    def level_name(self) -> str:
        return get_level_name(MEMBER_LEVEL if self.is_member else self.level)

    def category(self, category: str) -> CategoryFigures:
        if category == SLOT:
            return self.slot
        if category == CASINO:
            return self.casino
        raise KeyError(category)

    @property
    def total_bet(self) -> Decimal:
        return self.casino.bet + self.slot.bet

    @property
    def total_win(self) -> Decimal:
        return self.casino.win + self.slot.win

    @property
    def ggr(self) -> Decimal:
        return self.total_bet - self.total_win

    @property
    def aggregate_rolling(self) -> Decimal:
        return self.casino.aggregate_rolling + self.slot.aggregate_rolling

    @property
    def aggregate_losing(self) -> Decimal:
        return self.casino.aggregate_losing + self.slot.aggregate_losing

    @property
    def individual_rolling(self) -> Decimal:
        return self.casino.individual_rolling + self.slot.individual_rolling

    @property
    def individual_losing(self) -> Decimal:
        return self.casino.individual_losing + self.slot.individual_losing

    @property
    def individual_commission(self) -> Decimal:
        """Own-share commission (individual rolling + individual losing)."""
        return self.individual_rolling + self.individual_losing

    @property
    def cut_amount(self) -> Decimal:
        return self.casino.cut_amount + self.slot.cut_amount

    @property
    def net_cash_diff(self) -> Decimal:
        return self.cash.net_cash_diff

    def to_detail(self) -> dict[str, Any]:
        """JSON-ready summary used in settlement record details."""
        return {
            "node_id": self.node_id,
            "node_type": self.node_type.value,
            "username": self.username,
            "level": self.level,
            "casino_bet": str(self.casino.bet),
            "casino_win": str(self.casino.win),
            "slot_bet": str(self.slot.bet),
            "slot_win": str(self.slot.win),
            "casino_rolling_commission": str(self.casino.aggregate_rolling),
            "casino_losing_commission": str(self.casino.aggregate_losing),
            "slot_rolling_commission": str(self.slot.aggregate_rolling),
            "slot_losing_commission": str(self.slot.aggregate_losing),
            "rolling_commission": str(self.aggregate_rolling),
            "losing_commission": str(self.aggregate_losing),
            "cut_amount": str(self.cut_amount),
        }


@dataclass
class SummaryStats:
    """Sums over a filtered list of settlement rows."""
    row_count: int = 0
    partner_count: int = 0
    member_count: int = 0
    casino_bet: Decimal = ZERO
    casino_win: Decimal = ZERO
    slot_bet: Decimal = ZERO
    slot_win: Decimal = ZERO
    total_bet: Decimal = ZERO
    total_win: Decimal = ZERO
    ggr: Decimal = ZERO
    aggregate_rolling: Decimal = ZERO
    aggregate_losing: Decimal = ZERO
    individual_rolling: Decimal = ZERO
    individual_losing: Decimal = ZERO
    cut_amount: Decimal = ZERO
    online_deposit: Decimal = ZERO
    online_withdrawal: Decimal = ZERO
    manual_deposit: Decimal = ZERO
    manual_withdrawal: Decimal = ZERO
    partner_funding_in: Decimal = ZERO
    partner_funding_out: Decimal = ZERO
    net_cash_diff: Decimal = ZERO
    points_granted: Decimal = ZERO
    points_reclaimed: Decimal = ZERO
    balance: Decimal = ZERO
    point_balance: Decimal = ZERO


@dataclass
class SettlementRecordData:
    """Executed settlement snapshot, independent of the storage layer."""
    partner_id: str
    settlement_period: str
    vendor_filter: str
    period_start: date
    period_end: date
    date_from: datetime
    date_to: datetime
    total_bet_amount: Decimal
    total_win_amount: Decimal
    casino_rolling_commission: Decimal
    casino_losing_commission: Decimal
    slot_rolling_commission: Decimal
    slot_losing_commission: Decimal
    rolling_commission: Decimal
    losing_commission: Decimal
    padding_cut_amount: Decimal
    commission_amount: Decimal
    padding_config_version: int
    details: list[dict[str, Any]]
    executed_by: str
    id: int | None = None
    created_at: datetime | None = None
