"""
Collaborator protocols consumed by the settlement engine.

The engine depends only on these protocols. SQL-backed implementations
live in sql_sources; tests use in-memory ones.
"""

from collections.abc import Collection, Sequence
from datetime import date
from typing import Protocol, runtime_checkable

from commission import PaddingCutConfig
from settlement.models.enums import CashEventStatus
from settlement.services.settlement.dto import (
    CashEntry,
    DateRange,
    MemberNode,
    PartnerNode,
    PointEntry,
    SettlementRecordData,
    WagerEntry,
)


@runtime_checkable
class PartnerDirectory(Protocol):
    """Partner and member lookup."""

    async def list_partners(self) -> Sequence[PartnerNode]:
        """Every partner, including its rates."""
        ...

    async def list_members(self, referrer_ids: Collection[str]) -> Sequence[MemberNode]:
        """Member accounts whose referrer is one of referrer_ids."""
        ...


@runtime_checkable
class WagerSource(Protocol):
    """Game activity lookup."""

    async def fetch_wagers(
        self,
        account_ids: Collection[str],
        date_range: DateRange,
        vendor: str | None = None,
    ) -> Sequence[WagerEntry]:
        """
        Wager entries of the given accounts in the inclusive range.

        Entries carry their vendor; sums grouped under a vendor filter are
        tagged with that vendor.
        """
        ...


@runtime_checkable
class CashEventSource(Protocol):
    """Cash movement lookup."""

    async def fetch_cash_events(
        self,
        account_ids: Collection[str],
        partner_ids: Collection[str],
        date_range: DateRange,
        statuses: Collection[CashEventStatus],
    ) -> Sequence[CashEntry]:
        """Cash entries whose subject is one of the accounts or partners."""
        ...


@runtime_checkable
class PointEventSource(Protocol):
    """Point adjustment lookup."""

    async def fetch_point_events(
        self,
        account_ids: Collection[str],
        date_range: DateRange,
    ) -> Sequence[PointEntry]:
        """Point entries of the given accounts in the inclusive range."""
        ...


@runtime_checkable
class PaddingCutStore(Protocol):
    """Persistent padding-cut configuration, keyed by operator."""

    async def load(self, owner_id: str) -> PaddingCutConfig | None:
        ...

    async def save(self, owner_id: str, config: PaddingCutConfig) -> PaddingCutConfig:
        """Persist config and return the stored snapshot."""
        ...


@runtime_checkable
class SettlementRecordStore(Protocol):
    """Executed settlement history."""

    async def exists(
        self,
        partner_id: str,
        period_start: date,
        period_end: date,
        vendor_filter: str,
    ) -> bool:
        ...

    async def save(self, record: SettlementRecordData) -> SettlementRecordData:
        """Persist a record and return it with id and created_at set."""
        ...

    async def list_for_partner(self, partner_id: str) -> Sequence[SettlementRecordData]:
        """History of a partner, newest first."""
        ...
