"""
Padding-cut configuration service.

Keeps one immutable PaddingCutConfig snapshot per operator in the store.
Reads always go to the store, so a change saved by any service instance
is seen by the next computation. Writes are serialized and publish a new
snapshot with a bumped version; a computation that pinned an older
snapshot keeps using it unchanged.
"""

import asyncio
from collections.abc import Collection, Mapping
from typing import Any

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from commission import PaddingCutConfig
from settlement.config.constants import PADDING_CUT_LEVELS, PADDING_STORE_COLLABORATOR
from settlement.services.settlement.sources import PaddingCutStore
from settlement.utils.datetime_utils import utc_now
from settlement.utils.exceptions import ValidationError


class PaddingCutConfigService:
    """
    Versioned padding-cut configuration per operator.

    Args:
        store: Persistent configuration store
        allowed_levels: Levels that may be enabled for a cut
    """

    def __init__(
        self,
        store: PaddingCutStore,
        allowed_levels: Collection[int] = PADDING_CUT_LEVELS,
    ) -> None:
        self.store = store
        self.allowed_levels = frozenset(allowed_levels)
        self._write_lock = asyncio.Lock()

    def default_config(self) -> PaddingCutConfig:
        """Disabled configuration covering every allowed level."""
        return PaddingCutConfig(level_flags={level: False for level in sorted(self.allowed_levels)})

    async def get(self, owner_id: str) -> PaddingCutConfig:
        """
        Current snapshot for an operator.

        Read from the store on every call; a missing row yields the
        disabled default at version 0.
        """
        stored = await self.store.load(owner_id)
        return stored if stored is not None else self.default_config()

    async def set(
        self,
        owner_id: str,
        config: PaddingCutConfig | Mapping[str, Any],
    ) -> PaddingCutConfig:
        """
        Replace the configuration of an operator.

        Args:
            owner_id: Operator ID
            config: New configuration (model or plain mapping); version and
                updated_at are assigned here

        Returns:
            Published snapshot

        Raises:
            ValidationError: percentage outside 0..100 or a level that may
                not carry a cut
        """
        values = config.model_dump() if isinstance(config, PaddingCutConfig) else dict(config)

        async with self._write_lock:
            current = await self.get(owner_id)
            values["version"] = current.version + 1
            values["updated_at"] = utc_now()
            try:
                candidate = PaddingCutConfig.model_validate(values)
            except PydanticValidationError as e:
                raise ValidationError(
                    "Invalid padding cut configuration",
                    context={"owner_id": owner_id, "errors": e.error_count()},
                ) from e

            disallowed = sorted(
                level for level, on in candidate.level_flags.items()
                if on and level not in self.allowed_levels
            )
            if disallowed:
                raise ValidationError(
                    "Padding cut is not available for these levels",
                    context={"owner_id": owner_id, "levels": disallowed},
                )

            stored = await self.store.save(owner_id, candidate)

        logger.bind(
            owner_id=owner_id,
            version=stored.version,
            global_enabled=stored.global_enabled,
            collaborator=PADDING_STORE_COLLABORATOR,
        ).info(f"Padding cut config saved for {owner_id}")
        return stored
