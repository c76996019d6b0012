"""
CashEvent repository.

Data access layer for CashEvent model.
"""

from collections.abc import Collection
from datetime import datetime
from decimal import Decimal

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from settlement.models.cash_event import CashEvent
from settlement.repositories.base import BaseRepository


class CashEventRepository(BaseRepository[CashEvent]):
    """CashEvent repository with aggregate queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize cash event repository."""
        super().__init__(CashEvent, session)

    async def sum_by_subject(
        self,
        account_ids: Collection[str],
        partner_ids: Collection[str],
        date_from: datetime,
        date_to: datetime,
        statuses: Collection[str],
    ) -> list[tuple[str | None, str | None, str, str, Decimal]]:
        """
        Sum event amounts per subject, kind and status.

        Args:
            account_ids: Member account subjects
            partner_ids: Partner subjects
            date_from: Range start (inclusive)
            date_to: Range end (inclusive)
            statuses: Statuses to include

        Returns:
            Rows of (account_id, partner_id, kind, status, amount_sum)
        """
        subject_filters = []
        if account_ids:
            subject_filters.append(CashEvent.account_id.in_(list(account_ids)))
        if partner_ids:
            subject_filters.append(CashEvent.partner_id.in_(list(partner_ids)))
        if not subject_filters or not statuses:
            return []

        stmt = (
            select(
                CashEvent.account_id,
                CashEvent.partner_id,
                CashEvent.kind,
                CashEvent.status,
                func.coalesce(func.sum(CashEvent.amount), 0),
            )
            .where(
                or_(*subject_filters),
                CashEvent.status.in_(list(statuses)),
                CashEvent.occurred_at >= date_from,
                CashEvent.occurred_at <= date_to,
            )
            .group_by(
                CashEvent.account_id,
                CashEvent.partner_id,
                CashEvent.kind,
                CashEvent.status,
            )
        )
        result = await self.session.execute(stmt)
        return [
            (account_id, partner_id, kind, status, Decimal(str(amount)))
            for account_id, partner_id, kind, status, amount in result.all()
        ]
