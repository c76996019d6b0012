"""
PaddingCutSetting repository.

Data access layer for PaddingCutSetting model.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from settlement.models.padding_cut_setting import PaddingCutSetting
from settlement.repositories.base import BaseRepository
from settlement.utils.datetime_utils import utc_now


class PaddingCutSettingRepository(BaseRepository[PaddingCutSetting]):
    """PaddingCutSetting repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize padding cut setting repository."""
        super().__init__(PaddingCutSetting, session)

    async def get_by_owner(self, owner_id: str) -> PaddingCutSetting | None:
        """Get the configuration row of an operator."""
        return await self.get_by(owner_id=owner_id)

    async def upsert(
        self, owner_id: str, config: dict[str, Any], version: int
    ) -> PaddingCutSetting:
        """
        Create or replace the configuration of an operator.

        Args:
            owner_id: Operator ID
            config: JSON-ready configuration document
            version: New configuration version

        Returns:
            Stored setting
        """
        existing = await self.get_by_owner(owner_id)
        if existing is None:
            return await self.create(owner_id=owner_id, config=config, version=version)
        return await self.update(
            existing.id, config=config, version=version, updated_at=utc_now()
        )
