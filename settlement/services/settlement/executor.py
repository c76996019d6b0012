"""
Settlement executor.

Stores a permanent snapshot of a caller's settlement for a period.
Execution only writes the record; no balance is changed.
"""

from collections.abc import Awaitable, Callable, Sequence

from loguru import logger

from settlement.config.constants import RECORD_STORE_COLLABORATOR
from settlement.models.enums import SettlementPeriod
from settlement.services.base_service import ServiceResult
from settlement.services.settlement.dto import DateRange, SettlementRecordData, SettlementRow
from settlement.services.settlement.sources import SettlementRecordStore
from settlement.utils.exceptions import SettlementError, ValidationError

ALL_VENDORS = "all"

RowsProvider = Callable[[], Awaitable[tuple[list[SettlementRow], int]]]


def vendor_filter_key(vendor: str | None) -> str:
    """Storage key of a vendor filter (None means every vendor)."""
    return vendor or ALL_VENDORS


def parse_period(period: SettlementPeriod | str) -> SettlementPeriod:
    try:
        return SettlementPeriod(period)
    except ValueError:
        raise ValidationError(
            "Unknown settlement period",
            context={"period": period, "allowed": [p.value for p in SettlementPeriod]},
        ) from None


class SettlementExecutor:
    """Duplicate check, net check and record creation."""

    def __init__(self, record_store: SettlementRecordStore) -> None:
        self.record_store = record_store

    def build_record(
        self,
        caller_id: str,
        rows: Sequence[SettlementRow],
        date_range: DateRange,
        period: SettlementPeriod,
        vendor: str | None,
        config_version: int,
    ) -> SettlementRecordData:
        """Snapshot of the caller row and its direct children."""
        caller_row = next(row for row in rows if row.node_id == caller_id)
        children = [
            row for row in rows
            if row.parent_id == caller_id and row.depth == caller_row.depth + 1
        ]
        return SettlementRecordData(
            partner_id=caller_id,
            settlement_period=period.value,
            vendor_filter=vendor_filter_key(vendor),
            period_start=date_range.period_start,
            period_end=date_range.period_end,
            date_from=date_range.start,
            date_to=date_range.end,
            total_bet_amount=caller_row.total_bet,
            total_win_amount=caller_row.total_win,
            casino_rolling_commission=caller_row.casino.individual_rolling,
            casino_losing_commission=caller_row.casino.individual_losing,
            slot_rolling_commission=caller_row.slot.individual_rolling,
            slot_losing_commission=caller_row.slot.individual_losing,
            rolling_commission=caller_row.individual_rolling,
            losing_commission=caller_row.individual_losing,
            padding_cut_amount=caller_row.cut_amount,
            commission_amount=caller_row.individual_commission,
            padding_config_version=config_version,
            details=[row.to_detail() for row in children],
            executed_by=caller_id,
        )

    async def execute(
        self,
        caller_id: str,
        date_range: DateRange,
        period: SettlementPeriod | str,
        vendor: str | None,
        compute_rows: RowsProvider,
    ) -> ServiceResult:
        """
        Execute a settlement for the caller.

        Args:
            caller_id: Partner executing the settlement
            date_range: Settled range
            period: Period label (today, week, ...)
            vendor: Optional vendor filter
            compute_rows: Returns (rows, padding config version) for the caller

        Returns:
            ServiceResult with the stored record as data on success
        """
        try:
            settlement_period = parse_period(period)
            if await self.record_store.exists(
                caller_id,
                date_range.period_start,
                date_range.period_end,
                vendor_filter_key(vendor),
            ):
                return ServiceResult(
                    success=False,
                    error="This period has already been settled",
                    error_code="DUPLICATE_SETTLEMENT",
                )

            rows, config_version = await compute_rows()
            record = self.build_record(
                caller_id, rows, date_range, settlement_period, vendor, config_version
            )
            if record.commission_amount <= 0:
                return ServiceResult(
                    success=False,
                    error="Nothing to settle: net commission is not positive",
                    error_code="NOTHING_TO_SETTLE",
                )

            stored = await self.record_store.save(record)
        except SettlementError as e:
            logger.bind(
                **{"node_id": caller_id, **date_range.as_context(), **e.context}
            ).error(f"Settlement execution failed for {caller_id}")
            return ServiceResult(success=False, error=str(e), error_code=e.error_code)

        logger.bind(
            node_id=caller_id,
            commission_amount=str(stored.commission_amount),
            children=len(stored.details),
            collaborator=RECORD_STORE_COLLABORATOR,
            **date_range.as_context(),
        ).info(f"Settlement record {stored.id} created for {caller_id}")
        return ServiceResult(success=True, data=stored)
