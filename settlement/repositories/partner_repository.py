"""
Partner repository.

Data access layer for Partner model.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from settlement.models.partner import Partner
from settlement.repositories.base import BaseRepository


class PartnerRepository(BaseRepository[Partner]):
    """Partner repository with hierarchy queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize partner repository."""
        super().__init__(Partner, session)

    async def get_all(self) -> list[Partner]:
        """Load every partner ordered by level, then id."""
        stmt = select(Partner).order_by(Partner.level, Partner.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
