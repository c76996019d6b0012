"""
Tests for settlement execution and the record history.
"""

from datetime import date
from decimal import Decimal

import pytest

from settlement.services.settlement.dto import DateRange
from settlement.services.settlement.executor import ALL_VENDORS, parse_period, vendor_filter_key
from settlement.utils.exceptions import ValidationError


class TestExecuteSettlement:
    """Test execute_settlement results."""

    @pytest.mark.asyncio
    async def test_success_stores_snapshot(self, reference_network, january):
        service = reference_network.service()

        result = await service.execute_settlement("hq", january, "month")

        assert result.success
        record = result.data
        assert record.id == 1
        assert record.partner_id == "hq"
        assert record.vendor_filter == ALL_VENDORS
        assert record.period_start == date(2026, 1, 1)
        assert record.period_end == date(2026, 1, 31)
        assert record.rolling_commission == Decimal("30000")
        assert record.losing_commission == Decimal("-2000")
        assert record.commission_amount == Decimal("28000")
        assert record.total_bet_amount == Decimal("12000000")
        assert [detail["node_id"] for detail in record.details] == ["sub"]
        assert Decimal(record.details[0]["rolling_commission"]) == Decimal("130000")

    @pytest.mark.asyncio
    async def test_duplicate_refused(self, reference_network, january):
        service = reference_network.service()
        await service.execute_settlement("hq", january, "month")

        result = await service.execute_settlement("hq", january, "month")

        assert not result.success
        assert result.error_code == "DUPLICATE_SETTLEMENT"
        assert len(reference_network.record_store.records) == 1

    @pytest.mark.asyncio
    async def test_other_vendor_is_separate(self, reference_network, january):
        reference_network.wager("m1", "5000000", "4000000", vendor="evolution")
        service = reference_network.service()
        await service.execute_settlement("hq", january, "month")

        result = await service.execute_settlement("hq", january, "month", vendor="evolution")

        assert result.success
        assert result.data.vendor_filter == "evolution"

    @pytest.mark.asyncio
    async def test_nothing_to_settle(self, reference_network, january):
        """A leaf partner whose whole volume belongs to its members nets zero."""
        result = await reference_network.service().execute_settlement("sub", january, "month")

        assert not result.success
        assert result.error_code == "NOTHING_TO_SETTLE"
        assert reference_network.record_store.records == []

    @pytest.mark.asyncio
    async def test_unknown_period(self, reference_network, january):
        result = await reference_network.service().execute_settlement("hq", january, "fortnight")

        assert not result.success
        assert result.error_code == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_configuration_error_is_reported(self, network, january):
        network.partner("A", 2, "B")
        network.partner("B", 3, "A")

        result = await network.service().execute_settlement("A", january, "month")

        assert not result.success
        assert result.error_code == "CONFIGURATION_ERROR"

    @pytest.mark.asyncio
    async def test_balances_untouched(self, reference_network, january):
        before = list(reference_network.partners)

        await reference_network.service().execute_settlement("hq", january, "month")

        assert reference_network.partners == before

    @pytest.mark.asyncio
    async def test_history_newest_first(self, reference_network, january):
        service = reference_network.service()
        first_half = DateRange.create(date(2026, 1, 1), date(2026, 1, 15))
        await service.execute_settlement("hq", first_half, "custom")
        await service.execute_settlement("hq", january, "month")

        records = await service.list_settlement_records("hq")

        assert [r.period_end for r in records] == [date(2026, 1, 31), date(2026, 1, 15)]
        assert await service.list_settlement_records("hq2") == []


class TestHelpers:
    def test_vendor_filter_key(self):
        assert vendor_filter_key(None) == "all"
        assert vendor_filter_key("evolution") == "evolution"

    def test_parse_period(self):
        assert parse_period("week").value == "week"
        with pytest.raises(ValidationError):
            parse_period("fortnight")
