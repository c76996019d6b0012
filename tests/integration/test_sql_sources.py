"""
Integration tests for the SQL data sources.

Runs the whole engine against a temporary SQLite database.
"""

from datetime import UTC, date, datetime
from decimal import Decimal

import pytest
import pytest_asyncio

from commission import PaddingCutConfig
from settlement.config.settings import Settings
from settlement.models import (
    Base,
    CashEvent,
    MemberAccount,
    Partner,
    PointEvent,
    WagerRecord,
)
from settlement.models.enums import CashEventKind, CashEventStatus, PointEventKind
from settlement.services.settlement.dto import DateRange
from settlement.services.settlement.sql_sources import (
    SqlPaddingCutStore,
    SqlSettlementRecordStore,
)
from settlement.services.settlement_service import SettlementService
from settlement.utils.database import create_session_maker, create_settlement_engine
from settlement.utils.exceptions import DuplicateSettlementError

pytestmark = pytest.mark.integration

MID_JANUARY = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'settlement.db'}",
        settlement_max_concurrency=1,
        source_chunk_size=2,
    )


@pytest_asyncio.fixture
async def session_maker(settings):
    """Session maker over a fresh schema."""
    engine = create_settlement_engine(settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield create_session_maker(engine)
    await engine.dispose()


@pytest_asyncio.fixture
async def seeded(session_maker):
    """sys -> op -> hq (1.2%) -> sub (1.0%) -> m1, plus m2 on hq."""
    async with session_maker() as session:
        session.add_all(
            [
                Partner(id="sys", username="system", level=1, parent_id=None),
                Partner(id="op", username="operator", level=2, parent_id="sys"),
                Partner(
                    id="hq",
                    username="kim_hq",
                    level=3,
                    parent_id="op",
                    casino_rolling_pct=Decimal("1.2"),
                    casino_losing_pct=Decimal("10"),
                ),
                Partner(
                    id="sub",
                    username="kim_sub",
                    level=4,
                    parent_id="hq",
                    casino_rolling_pct=Decimal("1.0"),
                    casino_losing_pct=Decimal("-5"),
                ),
            ]
        )
        await session.flush()
        session.add_all(
            [
                MemberAccount(
                    id="m1",
                    username="player_one",
                    referrer_partner_id="sub",
                    casino_losing_pct=Decimal("10"),
                ),
                MemberAccount(id="m2", username="player_two", referrer_partner_id="hq"),
            ]
        )
        await session.flush()
        session.add_all(
            [
                WagerRecord(
                    account_id="m1",
                    game_category="casino",
                    vendor="evolution",
                    bet_amount=Decimal("6000000"),
                    win_amount=Decimal("5000000"),
                    occurred_at=MID_JANUARY,
                ),
                WagerRecord(
                    account_id="m1",
                    game_category="casino",
                    vendor="pragmatic",
                    bet_amount=Decimal("-4000000"),
                    win_amount=Decimal("-4000000"),
                    occurred_at=MID_JANUARY,
                ),
                WagerRecord(
                    account_id="m1",
                    game_category="casino",
                    bet_amount=Decimal("9000000"),
                    win_amount=Decimal("0"),
                    occurred_at=datetime(2026, 2, 3, tzinfo=UTC),
                ),
                CashEvent(
                    account_id="m1",
                    kind=CashEventKind.ONLINE_DEPOSIT.value,
                    amount=Decimal("100000"),
                    status=CashEventStatus.COMPLETED.value,
                    occurred_at=MID_JANUARY,
                ),
                CashEvent(
                    account_id="m1",
                    kind=CashEventKind.ONLINE_WITHDRAWAL.value,
                    amount=Decimal("50000"),
                    status=CashEventStatus.REJECTED.value,
                    occurred_at=MID_JANUARY,
                ),
                CashEvent(
                    partner_id="sub",
                    counterparty_partner_id="hq",
                    kind=CashEventKind.PARTNER_FUNDING_IN.value,
                    amount=Decimal("200000"),
                    status=CashEventStatus.COMPLETED.value,
                    occurred_at=MID_JANUARY,
                ),
                PointEvent(
                    account_id="m1",
                    kind=PointEventKind.GRANT.value,
                    amount=Decimal("500"),
                    occurred_at=MID_JANUARY,
                ),
            ]
        )
        await session.commit()
    return session_maker


@pytest.fixture
def january() -> DateRange:
    return DateRange.create(date(2026, 1, 1), date(2026, 1, 31))


class TestSqlSettlement:
    """Test full computations over SQL sources."""

    @pytest.mark.asyncio
    async def test_compute(self, seeded, settings, january):
        service = SettlementService.from_session_maker(seeded, settings)

        rows = {r.node_id: r for r in await service.compute_settlement("sys", january)}

        assert list(rows) == ["sys", "op", "hq", "sub", "m1", "m2"]
        assert rows["m1"].casino.bet == Decimal("10000000")
        assert rows["m1"].casino.win == Decimal("9000000")
        assert rows["sub"].casino.aggregate_rolling == Decimal("100000")
        assert rows["sub"].casino.aggregate_losing == Decimal("0")  # stored -5% settles as 0
        assert rows["hq"].casino.aggregate_rolling == Decimal("120000")
        assert rows["hq"].casino.individual_rolling == Decimal("20000")
        assert rows["m1"].casino.aggregate_losing == Decimal("90000")
        assert rows["m1"].net_cash_diff == Decimal("100000")
        assert rows["sub"].net_cash_diff == Decimal("100000")
        assert rows["hq"].net_cash_diff == Decimal("200000")
        assert rows["sub"].points.granted == Decimal("500")
        assert all(row.data_complete for row in rows.values())

    @pytest.mark.asyncio
    async def test_vendor_filter(self, seeded, settings, january):
        service = SettlementService.from_session_maker(seeded, settings)

        rows = {
            r.node_id: r
            for r in await service.compute_settlement("hq", january, vendor="evolution")
        }

        assert list(rows) == ["hq", "sub", "m1", "m2"]
        assert rows["hq"].casino.bet == Decimal("6000000")

    @pytest.mark.asyncio
    async def test_execute_and_history(self, seeded, settings, january):
        service = SettlementService.from_session_maker(seeded, settings)

        result = await service.execute_settlement("hq", january, "month")
        duplicate = await service.execute_settlement("hq", january, "month")
        records = await service.list_settlement_records("hq")

        assert result.success
        assert result.data.id is not None
        assert result.data.commission_amount == Decimal("20000") + result.data.losing_commission
        assert duplicate.error_code == "DUPLICATE_SETTLEMENT"
        assert len(records) == 1
        assert records[0].details[0]["node_id"] == "sub"

    @pytest.mark.asyncio
    async def test_unique_constraint_maps_to_duplicate(self, seeded, settings, january):
        service = SettlementService.from_session_maker(seeded, settings)
        stored = (await service.execute_settlement("hq", january, "month")).data
        stored.id = None

        with pytest.raises(DuplicateSettlementError):
            await SqlSettlementRecordStore(seeded).save(stored)


class TestSqlPaddingCutStore:
    """Test padding-cut persistence."""

    @pytest.mark.asyncio
    async def test_missing_owner(self, session_maker):
        assert await SqlPaddingCutStore(session_maker).load("sys") is None

    @pytest.mark.asyncio
    async def test_round_trip(self, session_maker):
        store = SqlPaddingCutStore(session_maker)
        config = PaddingCutConfig(
            global_enabled=True,
            level_flags={3: True, 4: False},
            cut_percentage=Decimal("5"),
            version=1,
        )

        await store.save("sys", config)
        loaded = await store.load("sys")

        assert loaded.global_enabled
        assert loaded.level_flags == {3: True, 4: False}
        assert loaded.cut_percentage == Decimal("5")
        assert loaded.version == 1

    @pytest.mark.asyncio
    async def test_service_reads_persisted_config(self, seeded, settings):
        writer = SettlementService.from_session_maker(seeded, settings)
        await writer.set_padding_cut_config(
            "sys", {"global_enabled": True, "level_flags": {3: True}, "cut_percentage": "5"}
        )

        reader = SettlementService.from_session_maker(seeded, settings)
        config = await reader.get_padding_cut_config("sys")

        assert config.version == 1
        assert config.enabled_levels == frozenset({3})
