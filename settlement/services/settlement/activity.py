"""
Activity aggregator.

Sums wager and win amounts of a set of accounts, split by game category.
"""

from collections.abc import Collection, Iterable
from decimal import Decimal

from commission import CASINO, GAME_CATEGORIES, WagerTotals
from settlement.config.constants import DEFAULT_CHUNK_SIZE
from settlement.services.settlement.dto import DateRange, WagerEntry
from settlement.services.settlement.sources import WagerSource
from settlement.utils.batching import chunked

ZERO = Decimal("0")


def normalize_category(category: str | None) -> str:
    """Unknown or missing categories settle as casino."""
    if category is None:
        return CASINO
    value = getattr(category, "value", category).lower()
    return value if value in GAME_CATEGORIES else CASINO


def reduce_wagers(entries: Iterable[WagerEntry], vendor: str | None = None) -> dict[str, WagerTotals]:
    """
    Fold wager entries into per-account totals.

    Bet and win amounts are taken as absolute values. With a vendor
    filter, only entries tagged with that vendor are counted.
    """
    sums: dict[str, dict[str, Decimal]] = {}
    for entry in entries:
        if vendor is not None and entry.vendor != vendor:
            continue
        category = normalize_category(entry.category)
        account = sums.setdefault(
            entry.account_id,
            {"casino_bet": ZERO, "casino_win": ZERO, "slot_bet": ZERO, "slot_win": ZERO},
        )
        account[f"{category}_bet"] += abs(entry.bet)
        account[f"{category}_win"] += abs(entry.win)
    return {account_id: WagerTotals(**values) for account_id, values in sums.items()}


class ActivityAggregator:
    """
    Wager sums over account sets.

    Account id lists are queried in chunks of chunk_size.
    """

    def __init__(self, source: WagerSource, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.source = source
        self.chunk_size = chunk_size

    async def sum_wagers_by_account(
        self,
        account_ids: Collection[str],
        date_range: DateRange,
        vendor: str | None = None,
    ) -> dict[str, WagerTotals]:
        """
        Per-account wager totals.

        Accounts without records are present with all-zero totals.
        """
        entries: list[WagerEntry] = []
        for batch in chunked(sorted(set(account_ids)), self.chunk_size):
            entries.extend(await self.source.fetch_wagers(batch, date_range, vendor))

        totals = reduce_wagers(entries, vendor)
        return {account_id: totals.get(account_id, WagerTotals()) for account_id in account_ids}

    async def sum_wagers(
        self,
        account_ids: Collection[str],
        date_range: DateRange,
        vendor: str | None = None,
    ) -> WagerTotals:
        """Combined totals of every account; all zero when nothing matches."""
        per_account = await self.sum_wagers_by_account(account_ids, date_range, vendor)
        return sum(per_account.values(), WagerTotals())
