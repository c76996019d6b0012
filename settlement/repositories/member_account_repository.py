"""
MemberAccount repository.

Data access layer for MemberAccount model.
"""

from collections.abc import Collection

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from settlement.models.member_account import MemberAccount
from settlement.repositories.base import BaseRepository


class MemberAccountRepository(BaseRepository[MemberAccount]):
    """MemberAccount repository with referrer queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize member account repository."""
        super().__init__(MemberAccount, session)

    async def get_all(self) -> list[MemberAccount]:
        """Load every member account."""
        stmt = select(MemberAccount).order_by(MemberAccount.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_referrers(
        self, referrer_ids: Collection[str]
    ) -> list[MemberAccount]:
        """
        Get member accounts referred by any of the given partners.

        Args:
            referrer_ids: Referrer partner IDs

        Returns:
            List of member accounts
        """
        if not referrer_ids:
            return []
        stmt = (
            select(MemberAccount)
            .where(MemberAccount.referrer_partner_id.in_(list(referrer_ids)))
            .order_by(MemberAccount.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
