"""
WagerRecord repository.

Data access layer for WagerRecord model.
"""

from collections.abc import Collection
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from settlement.models.types import MoneyType
from settlement.models.wager_record import WagerRecord
from settlement.repositories.base import BaseRepository


class WagerRecordRepository(BaseRepository[WagerRecord]):
    """WagerRecord repository with aggregate queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize wager record repository."""
        super().__init__(WagerRecord, session)

    async def sum_by_account_and_category(
        self,
        account_ids: Collection[str],
        date_from: datetime,
        date_to: datetime,
        vendor: str | None = None,
    ) -> list[tuple[str, str, Decimal, Decimal]]:
        """
        Sum bet/win amounts per account and game category.

        Amounts are summed as absolute values. Both range ends are
        inclusive.

        Args:
            account_ids: Member account IDs
            date_from: Range start
            date_to: Range end
            vendor: Optional vendor filter (None = all vendors)

        Returns:
            Rows of (account_id, game_category, bet_sum, win_sum)
        """
        if not account_ids:
            return []

        stmt = (
            select(
                WagerRecord.account_id,
                WagerRecord.game_category,
                func.coalesce(func.sum(func.abs(WagerRecord.bet_amount, type_=MoneyType)), 0),
                func.coalesce(func.sum(func.abs(WagerRecord.win_amount, type_=MoneyType)), 0),
            )
            .where(
                WagerRecord.account_id.in_(list(account_ids)),
                WagerRecord.occurred_at >= date_from,
                WagerRecord.occurred_at <= date_to,
            )
            .group_by(WagerRecord.account_id, WagerRecord.game_category)
        )
        if vendor is not None:
            stmt = stmt.where(WagerRecord.vendor == vendor)

        result = await self.session.execute(stmt)
        return [
            (account_id, category, Decimal(str(bet)), Decimal(str(win)))
            for account_id, category, bet, win in result.all()
        ]
