"""
Cash flow aggregator.

Sums completed cash movements and point adjustments of a direct scope.
Every cash kind goes through one reducer keyed by CashEventKind.
"""

from collections.abc import Collection, Iterable
from decimal import Decimal

from settlement.config.constants import DEFAULT_CHUNK_SIZE
from settlement.models.enums import CashEventKind, CashEventStatus, PointEventKind
from settlement.services.settlement.dto import (
    CashEntry,
    CashTotals,
    DateRange,
    PointEntry,
    PointTotals,
)
from settlement.services.settlement.sources import CashEventSource, PointEventSource
from settlement.utils.batching import chunked

ZERO = Decimal("0")

SETTLED_STATUSES = (CashEventStatus.COMPLETED,)

_KIND_FIELDS: dict[CashEventKind, str] = {
    CashEventKind.ONLINE_DEPOSIT: "online_deposit",
    CashEventKind.ONLINE_WITHDRAWAL: "online_withdrawal",
    CashEventKind.MANUAL_DEPOSIT: "manual_deposit",
    CashEventKind.MANUAL_WITHDRAWAL: "manual_withdrawal",
    CashEventKind.PARTNER_FUNDING_IN: "partner_funding_in",
    CashEventKind.PARTNER_FUNDING_OUT: "partner_funding_out",
}


def reduce_cash(entries: Iterable[CashEntry]) -> dict[str, CashTotals]:
    """Fold completed cash entries into per-subject totals."""
    sums: dict[str, dict[str, Decimal]] = {}
    for entry in entries:
        if CashEventStatus(entry.status) not in SETTLED_STATUSES:
            continue
        subject = sums.setdefault(entry.subject_id, dict.fromkeys(_KIND_FIELDS.values(), ZERO))
        subject[_KIND_FIELDS[CashEventKind(entry.kind)]] += entry.amount
    return {subject_id: CashTotals(**values) for subject_id, values in sums.items()}


def reduce_points(entries: Iterable[PointEntry]) -> dict[str, PointTotals]:
    """Fold point entries into per-account totals."""
    sums: dict[str, PointTotals] = {}
    for entry in entries:
        if PointEventKind(entry.kind) == PointEventKind.GRANT:
            delta = PointTotals(granted=entry.amount)
        else:
            delta = PointTotals(reclaimed=entry.amount)
        sums[entry.account_id] = sums.get(entry.account_id, PointTotals()) + delta
    return sums


class CashFlowAggregator:
    """
    Cash and point sums over a direct scope.

    Manual and partner-funding flows are attributed only to the subject
    they were booked on; nothing here pools upward.
    """

    def __init__(
        self,
        cash_source: CashEventSource,
        point_source: PointEventSource,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.cash_source = cash_source
        self.point_source = point_source
        self.chunk_size = chunk_size

    async def sum_cash_by_subject(
        self,
        account_ids: Collection[str],
        partner_ids: Collection[str],
        date_range: DateRange,
    ) -> dict[str, CashTotals]:
        """Per-subject totals; subjects without events are all zero."""
        entries: list[CashEntry] = []
        for batch in chunked(sorted(set(account_ids)), self.chunk_size):
            entries.extend(
                await self.cash_source.fetch_cash_events(batch, [], date_range, SETTLED_STATUSES)
            )
        for batch in chunked(sorted(set(partner_ids)), self.chunk_size):
            entries.extend(
                await self.cash_source.fetch_cash_events([], batch, date_range, SETTLED_STATUSES)
            )

        totals = reduce_cash(entries)
        return {
            subject_id: totals.get(subject_id, CashTotals())
            for subject_id in [*account_ids, *partner_ids]
        }

    async def sum_cash(
        self,
        account_ids: Collection[str],
        partner_ids: Collection[str],
        date_range: DateRange,
    ) -> CashTotals:
        """Combined completed cash totals of the given subjects."""
        per_subject = await self.sum_cash_by_subject(account_ids, partner_ids, date_range)
        return sum(per_subject.values(), CashTotals())

    async def sum_points_by_account(
        self,
        account_ids: Collection[str],
        date_range: DateRange,
    ) -> dict[str, PointTotals]:
        """Per-account point grants and reclaims."""
        entries: list[PointEntry] = []
        for batch in chunked(sorted(set(account_ids)), self.chunk_size):
            entries.extend(await self.point_source.fetch_point_events(batch, date_range))

        totals = reduce_points(entries)
        return {account_id: totals.get(account_id, PointTotals()) for account_id in account_ids}

    async def sum_points(
        self,
        account_ids: Collection[str],
        date_range: DateRange,
    ) -> PointTotals:
        """Combined point totals of the given accounts."""
        per_account = await self.sum_points_by_account(account_ids, date_range)
        return sum(per_account.values(), PointTotals())
