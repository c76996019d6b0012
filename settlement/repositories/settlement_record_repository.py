"""
SettlementRecord repository.

Data access layer for SettlementRecord model.
"""

from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from settlement.models.settlement_record import SettlementRecord
from settlement.repositories.base import BaseRepository


class SettlementRecordRepository(BaseRepository[SettlementRecord]):
    """SettlementRecord repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize settlement record repository."""
        super().__init__(SettlementRecord, session)

    async def exists_for_period(
        self,
        partner_id: str,
        period_start: date,
        period_end: date,
        vendor_filter: str,
    ) -> bool:
        """Check whether this period was already settled for the partner."""
        return await self.exists(
            partner_id=partner_id,
            period_start=period_start,
            period_end=period_end,
            vendor_filter=vendor_filter,
        )

    async def get_by_partner(
        self, partner_id: str, limit: int | None = None
    ) -> list[SettlementRecord]:
        """
        Get settlement history of a partner, newest first.

        Args:
            partner_id: Partner ID
            limit: Optional max number of records

        Returns:
            List of settlement records
        """
        stmt = (
            select(SettlementRecord)
            .where(SettlementRecord.partner_id == partner_id)
            .order_by(SettlementRecord.created_at.desc(), SettlementRecord.id.desc())
        )
        if limit:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
