"""
Tests for SettlementService: request validation, failures, summaries
and padding-cut configuration.
"""

import asyncio
from datetime import UTC, datetime
from decimal import Decimal

import pytest

from commission import PaddingCutConfig
from settlement.models.enums import NodeType
from settlement.services.settlement.dto import DateRange
from settlement.services.settlement.summary import RowFilter, displayed_rolling
from settlement.utils.exceptions import (
    ConfigurationError,
    DataUnavailableError,
    SettlementTimeoutError,
    ValidationError,
)

CUT_LEVEL_3 = {
    "global_enabled": True,
    "level_flags": {3: True, 4: False, 5: False, 6: False},
    "cut_percentage": Decimal("5"),
}


class TestRequestValidation:
    """Test rejected requests."""

    def test_inverted_date_range(self):
        with pytest.raises(ValidationError):
            DateRange(
                start=datetime(2026, 2, 1, tzinfo=UTC),
                end=datetime(2026, 1, 1, tzinfo=UTC),
            )

    def test_naive_datetimes_become_utc(self):
        date_range = DateRange(start=datetime(2026, 1, 1), end=datetime(2026, 1, 2))
        assert date_range.start.tzinfo is not None

    @pytest.mark.asyncio
    async def test_unknown_caller(self, reference_network, january):
        with pytest.raises(ValidationError):
            await reference_network.service().compute_settlement("ghost", january)

    @pytest.mark.asyncio
    async def test_member_caller(self, reference_network, january):
        with pytest.raises(ValidationError):
            await reference_network.service().compute_settlement("m1", january)

    @pytest.mark.asyncio
    async def test_malformed_range(self, reference_network):
        with pytest.raises(ValidationError):
            await reference_network.service().compute_settlement("sys", ("2026-01-01", "x"))

    @pytest.mark.asyncio
    async def test_blank_vendor(self, reference_network, january):
        with pytest.raises(ValidationError):
            await reference_network.service().compute_settlement("sys", january, vendor="  ")


class TestFailures:
    """Test fatal failures."""

    @pytest.mark.asyncio
    async def test_cycle_aborts(self, network, january):
        network.partner("A", 2, "B")
        network.partner("B", 3, "A")

        with pytest.raises(ConfigurationError):
            await network.service().compute_settlement("A", january)

    @pytest.mark.asyncio
    async def test_cycle_with_braces_in_ids(self, network, january):
        """The configuration error reaches the caller even when ids contain braces."""
        network.partner("a{x}", 2, "b")
        network.partner("b", 3, "a{x}")

        with pytest.raises(ConfigurationError) as exc_info:
            await network.service().compute_settlement("a{x}", january)

        assert "a{x}" in exc_info.value.context["cycle"]

    @pytest.mark.asyncio
    async def test_directory_failure_propagates(self, reference_network, january):
        reference_network.directory.error = DataUnavailableError(
            "directory down", collaborator="partner_directory"
        )

        with pytest.raises(DataUnavailableError) as exc_info:
            await reference_network.service().compute_settlement("sys", january)

        assert exc_info.value.retryable

    @pytest.mark.asyncio
    async def test_timeout(self, reference_network, january):
        reference_network.wagers.delay = 1

        with pytest.raises(SettlementTimeoutError) as exc_info:
            await reference_network.service(timeout_seconds=0.05).compute_settlement(
                "sys", january
            )

        assert exc_info.value.retryable
        assert exc_info.value.context["node_id"] == "sys"


class TestSummary:
    """Test filtering and summing rows."""

    @pytest.mark.asyncio
    async def test_filter_then_sum(self, reference_network, january):
        service = reference_network.service()
        rows = await service.compute_settlement("sys", january)
        row_filter = RowFilter(search="KIM")

        visible = service.list_rows(rows, row_filter)
        summary = service.compute_summary(rows, row_filter)

        assert [r.node_id for r in visible] == ["hq", "sub"]
        assert summary.row_count == 2
        assert summary.total_bet == Decimal("24000000")
        assert summary.aggregate_rolling == sum((r.aggregate_rolling for r in visible), Decimal("0"))

    @pytest.mark.asyncio
    async def test_filter_by_type_and_level(self, reference_network, january):
        service = reference_network.service()
        rows = await service.compute_settlement("sys", january)

        members = service.compute_summary(rows, RowFilter(node_type=NodeType.MEMBER))
        level_three = service.list_rows(rows, RowFilter(levels=frozenset({3})))

        assert members.member_count == 2
        assert members.partner_count == 0
        assert members.total_bet == Decimal("13000000")
        assert [r.node_id for r in level_three] == ["hq", "hq2"]

    @pytest.mark.asyncio
    async def test_no_filter(self, reference_network, january):
        service = reference_network.service()
        rows = await service.compute_settlement("sys", january)

        summary = service.compute_summary(rows)

        assert summary.row_count == len(rows)
        assert summary.individual_rolling == sum(
            (r.individual_rolling for r in rows), Decimal("0")
        )


class TestPaddingCutConfig:
    """Test configuration snapshots."""

    @pytest.mark.asyncio
    async def test_default_disabled(self, reference_network):
        config = await reference_network.service().get_padding_cut_config("sys")

        assert not config.global_enabled
        assert config.version == 0

    @pytest.mark.asyncio
    async def test_set_bumps_version(self, reference_network):
        service = reference_network.service()

        first = await service.set_padding_cut_config("sys", CUT_LEVEL_3)
        second = await service.set_padding_cut_config("sys", first)

        assert first.version == 1
        assert second.version == 2
        assert second.updated_at is not None
        assert reference_network.padding_store.configs["sys"] == second

    @pytest.mark.asyncio
    async def test_invalid_percentage(self, reference_network):
        with pytest.raises(ValidationError):
            await reference_network.service().set_padding_cut_config(
                "sys", {**CUT_LEVEL_3, "cut_percentage": Decimal("150")}
            )

    @pytest.mark.asyncio
    async def test_level_not_allowed(self, reference_network):
        with pytest.raises(ValidationError):
            await reference_network.service().set_padding_cut_config(
                "sys", {**CUT_LEVEL_3, "level_flags": {2: True}}
            )

    @pytest.mark.asyncio
    async def test_concurrent_writes_are_serialized(self, reference_network):
        service = reference_network.service()

        results = await asyncio.gather(
            *(service.set_padding_cut_config("sys", CUT_LEVEL_3) for _ in range(5))
        )

        assert sorted(r.version for r in results) == [1, 2, 3, 4, 5]
        assert (await service.get_padding_cut_config("sys")).version == 5

    @pytest.mark.asyncio
    async def test_change_saved_by_another_service_is_seen(self, reference_network, january):
        reader = reference_network.service()
        writer = reference_network.service()
        assert (await reader.get_padding_cut_config("sys")).version == 0

        await writer.set_padding_cut_config("sys", CUT_LEVEL_3)
        rows = {r.node_id: r for r in await reader.compute_settlement("sys", january)}

        assert (await reader.get_padding_cut_config("sys")).version == 1
        assert rows["hq"].padding_config_version == 1
        assert rows["hq"].cut_amount == Decimal("8000")
        assert (await reader.set_padding_cut_config("sys", CUT_LEVEL_3)).version == 2

    @pytest.mark.asyncio
    async def test_new_config_applies_to_next_computation(self, reference_network, january):
        service = reference_network.service()
        before = {r.node_id: r for r in await service.compute_settlement("sys", january)}

        await service.set_padding_cut_config("sys", CUT_LEVEL_3)
        after = {r.node_id: r for r in await service.compute_settlement("sys", january)}

        assert before["hq"].cut_amount == Decimal("0")
        assert after["hq"].cut_amount == Decimal("8000")
        assert after["hq"].aggregate_rolling == before["hq"].aggregate_rolling
        assert after["hq"].padding_config_version == 1

    @pytest.mark.asyncio
    async def test_running_computation_keeps_pinned_snapshot(self, reference_network, january):
        service = reference_network.service()
        reference_network.wagers.gate = asyncio.Event()
        reference_network.wagers.entered = asyncio.Event()

        task = asyncio.create_task(service.compute_settlement("sys", january))
        await reference_network.wagers.entered.wait()
        await service.set_padding_cut_config("sys", CUT_LEVEL_3)
        reference_network.wagers.gate.set()
        rows = await task

        assert all(row.padding_config_version == 0 for row in rows)
        assert all(row.cut_amount == 0 for row in rows)

    @pytest.mark.asyncio
    async def test_displayed_rolling(self, reference_network, january):
        service = reference_network.service()
        await service.set_padding_cut_config("sys", {**CUT_LEVEL_3, "rolling_cut_display": True})
        rows = {r.node_id: r for r in await service.compute_settlement("sys", january)}

        shown = await service.displayed_rolling(rows["hq"], "sys")

        assert shown == Decimal("152000")
        assert rows["hq"].aggregate_rolling == Decimal("160000")
        assert displayed_rolling(rows["hq"], PaddingCutConfig()) == Decimal("160000")
