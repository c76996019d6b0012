"""Pytest configuration and shared fixtures for all tests."""

import asyncio
import os
import sys
from collections.abc import Collection
from datetime import UTC, date, datetime
from decimal import Decimal
from pathlib import Path

# Minimal environment for Settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest

from commission import CommissionRates, PaddingCutConfig
from settlement.models.enums import CashEventKind, CashEventStatus, PointEventKind
from settlement.services.settlement.dto import (
    CashEntry,
    DateRange,
    MemberNode,
    PartnerNode,
    PointEntry,
    SettlementRecordData,
    WagerEntry,
)
from settlement.services.settlement_service import SettlementService
from settlement.utils.datetime_utils import utc_now
from settlement.utils.exceptions import DataUnavailableError

MID_JANUARY = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


def _in_range(occurred_at: datetime | None, date_range: DateRange) -> bool:
    return occurred_at is None or date_range.start <= occurred_at <= date_range.end


# === In-memory collaborators ===


class InMemoryDirectory:
    """Partner directory over plain lists."""

    def __init__(self, partners: list[PartnerNode], members: list[MemberNode]):
        self.partners = partners
        self.members = members
        self.error: Exception | None = None

    async def list_partners(self):
        if self.error:
            raise self.error
        return list(self.partners)

    async def list_members(self, referrer_ids: Collection[str]):
        ids = set(referrer_ids)
        return [m for m in self.members if m.referrer_id in ids]


class InMemoryWagerSource:
    """Wager source with optional failures, delay and concurrency tracking."""

    def __init__(self):
        self.entries: list[WagerEntry] = []
        self.calls: list[list[str]] = []
        self.failing_accounts: set[str] = set()
        self.broken_accounts: set[str] = set()
        self.cancelled = 0
        self.delay: float = 0
        self.gate: asyncio.Event | None = None
        self.entered: asyncio.Event | None = None
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_wagers(self, account_ids, date_range, vendor=None):
        ids = set(account_ids)
        self.calls.append(sorted(ids))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if ids & self.broken_accounts:
                raise RuntimeError("malformed wager feed response")
            if self.entered is not None:
                self.entered.set()
            if self.gate is not None:
                await self.gate.wait()
            if self.delay:
                await asyncio.sleep(self.delay)
            if ids & self.failing_accounts:
                raise DataUnavailableError("wager feed down", collaborator="wager_source")
            return [
                e for e in self.entries
                if e.account_id in ids
                and _in_range(e.occurred_at, date_range)
                and (vendor is None or e.vendor == vendor)
            ]
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        finally:
            self.in_flight -= 1


class InMemoryCashSource:
    """Cash event source over CashEntry values."""

    def __init__(self):
        self.entries: list[CashEntry] = []
        self.calls = 0

    async def fetch_cash_events(self, account_ids, partner_ids, date_range, statuses):
        self.calls += 1
        accounts, partners = set(account_ids), set(partner_ids)
        allowed = {CashEventStatus(s) for s in statuses}
        return [
            e for e in self.entries
            if (e.account_id in accounts or e.partner_id in partners)
            and e.status in allowed
            and _in_range(e.occurred_at, date_range)
        ]


class InMemoryPointSource:
    """Point event source over PointEntry values."""

    def __init__(self):
        self.entries: list[PointEntry] = []

    async def fetch_point_events(self, account_ids, date_range):
        ids = set(account_ids)
        return [
            e for e in self.entries
            if e.account_id in ids and _in_range(e.occurred_at, date_range)
        ]


class InMemoryPaddingCutStore:
    """PaddingCutStore over a dict."""

    def __init__(self):
        self.configs: dict[str, PaddingCutConfig] = {}
        self.saves = 0

    async def load(self, owner_id):
        return self.configs.get(owner_id)

    async def save(self, owner_id, config):
        # Yield so concurrent writers interleave if they are not serialized
        await asyncio.sleep(0)
        self.saves += 1
        self.configs[owner_id] = config
        return config


class InMemoryRecordStore:
    """SettlementRecordStore over a list."""

    def __init__(self):
        self.records: list[SettlementRecordData] = []

    async def exists(self, partner_id, period_start, period_end, vendor_filter):
        return any(
            r.partner_id == partner_id
            and r.period_start == period_start
            and r.period_end == period_end
            and r.vendor_filter == vendor_filter
            for r in self.records
        )

    async def save(self, record):
        record.id = len(self.records) + 1
        record.created_at = utc_now()
        self.records.append(record)
        return record

    async def list_for_partner(self, partner_id):
        own = [r for r in self.records if r.partner_id == partner_id]
        return sorted(own, key=lambda r: (r.created_at, r.id), reverse=True)


# === Network builder ===


class Network:
    """Builds a partner network and the in-memory sources behind it."""

    def __init__(self):
        self.partners: list[PartnerNode] = []
        self.members: list[MemberNode] = []
        self.directory = InMemoryDirectory(self.partners, self.members)
        self.wagers = InMemoryWagerSource()
        self.cash_events = InMemoryCashSource()
        self.point_events = InMemoryPointSource()
        self.padding_store = InMemoryPaddingCutStore()
        self.record_store = InMemoryRecordStore()

    def partner(
        self,
        node_id: str,
        level: int,
        parent_id: str | None = None,
        casino_rolling: str = "0",
        casino_losing: str = "0",
        slot_rolling: str = "0",
        slot_losing: str = "0",
        username: str | None = None,
        balance: str = "0",
    ) -> PartnerNode:
        node = PartnerNode(
            id=node_id,
            username=username or node_id,
            level=level,
            parent_id=parent_id,
            rates=CommissionRates.from_stored(
                Decimal(casino_rolling),
                Decimal(casino_losing),
                Decimal(slot_rolling),
                Decimal(slot_losing),
            ),
            balance=Decimal(balance),
        )
        self.partners.append(node)
        return node

    def member(
        self,
        node_id: str,
        referrer_id: str,
        username: str | None = None,
        casino_rolling: str | None = None,
        casino_losing: str | None = None,
        slot_rolling: str | None = None,
        slot_losing: str | None = None,
    ) -> MemberNode:
        def dec(value):
            return None if value is None else Decimal(value)

        node = MemberNode(
            id=node_id,
            username=username or node_id,
            referrer_id=referrer_id,
            casino_rolling_pct=dec(casino_rolling),
            casino_losing_pct=dec(casino_losing),
            slot_rolling_pct=dec(slot_rolling),
            slot_losing_pct=dec(slot_losing),
        )
        self.members.append(node)
        return node

    def wager(
        self,
        account_id: str,
        bet: str,
        win: str = "0",
        category: str = "casino",
        vendor: str | None = None,
        occurred_at: datetime = MID_JANUARY,
    ) -> None:
        self.wagers.entries.append(
            WagerEntry(
                account_id=account_id,
                category=category,
                bet=Decimal(bet),
                win=Decimal(win),
                vendor=vendor,
                occurred_at=occurred_at,
            )
        )

    def cash(
        self,
        kind: CashEventKind,
        amount: str,
        account_id: str | None = None,
        partner_id: str | None = None,
        status: CashEventStatus = CashEventStatus.COMPLETED,
        counterparty: str | None = None,
        occurred_at: datetime = MID_JANUARY,
    ) -> None:
        self.cash_events.entries.append(
            CashEntry(
                kind=kind,
                amount=Decimal(amount),
                status=status,
                account_id=account_id,
                partner_id=partner_id,
                counterparty_partner_id=counterparty,
                occurred_at=occurred_at,
            )
        )

    def points(
        self,
        account_id: str,
        kind: PointEventKind,
        amount: str,
        occurred_at: datetime = MID_JANUARY,
    ) -> None:
        self.point_events.entries.append(
            PointEntry(
                account_id=account_id, kind=kind, amount=Decimal(amount), occurred_at=occurred_at
            )
        )

    def service(self, **kwargs) -> SettlementService:
        return SettlementService(
            directory=self.directory,
            wager_source=self.wagers,
            cash_source=self.cash_events,
            point_source=self.point_events,
            padding_store=self.padding_store,
            record_store=self.record_store,
            **kwargs,
        )


# === Fixtures ===


@pytest.fixture
def network() -> Network:
    """Empty network with in-memory sources."""
    return Network()


@pytest.fixture
def january() -> DateRange:
    """The whole of January 2026."""
    return DateRange.create(date(2026, 1, 1), date(2026, 1, 31))


@pytest.fixture
def reference_network(network) -> Network:
    """
    Five-tier network used across engine tests.

        sys (L1) -> op (L2) -> hq (L3) -> sub (L4) -> member m1
                            -> hq2 (L3) -> member m2

    m1 overrides its casino rates (1% / 10%) and inherits slot rates.
    """
    network.partner("sys", 1, None, "2.0", "20", "3.0", "25", username="system")
    network.partner("op", 2, "sys", "1.5", "15", "2.5", "20", username="operator")
    network.partner("hq", 3, "op", "1.2", "10", "2.0", "15", username="kim_hq")
    network.partner("sub", 4, "hq", "1.0", "10", "1.5", "10", username="kim_sub")
    network.partner("hq2", 3, "op", "1.1", "10", "1.0", "10", username="lee_hq")
    network.member("m1", "sub", username="player_one", casino_rolling="1", casino_losing="10")
    network.member("m2", "hq2", username="player_two")

    network.wager("m1", "10000000", "9000000", "casino")
    network.wager("m1", "2000000", "2500000", "slot")
    network.wager("m2", "1000000", "0", "casino")
    return network
