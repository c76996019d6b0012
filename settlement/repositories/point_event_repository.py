"""
PointEvent repository.

Data access layer for PointEvent model.
"""

from collections.abc import Collection
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from settlement.models.point_event import PointEvent
from settlement.repositories.base import BaseRepository


class PointEventRepository(BaseRepository[PointEvent]):
    """PointEvent repository with aggregate queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize point event repository."""
        super().__init__(PointEvent, session)

    async def sum_by_account_and_kind(
        self,
        account_ids: Collection[str],
        date_from: datetime,
        date_to: datetime,
    ) -> list[tuple[str, str, Decimal]]:
        """Sum point amounts per account and kind within an inclusive range."""
        if not account_ids:
            return []

        stmt = (
            select(
                PointEvent.account_id,
                PointEvent.kind,
                func.coalesce(func.sum(PointEvent.amount), 0),
            )
            .where(
                PointEvent.account_id.in_(list(account_ids)),
                PointEvent.occurred_at >= date_from,
                PointEvent.occurred_at <= date_to,
            )
            .group_by(PointEvent.account_id, PointEvent.kind)
        )
        result = await self.session.execute(stmt)
        return [
            (account_id, kind, Decimal(str(amount)))
            for account_id, kind, amount in result.all()
        ]
