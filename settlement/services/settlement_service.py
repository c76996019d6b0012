"""
Settlement service.

Entry point for the presentation layer: computes settlement rows for a
caller and date range, summarizes them, manages the padding-cut
configuration and executes settlements.
"""

import asyncio
from collections.abc import Collection, Mapping, Sequence
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from commission import CommissionCalculator, PaddingCutConfig, PaddingCutPolicy
from settlement.config.constants import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_TIMEOUT_SECONDS,
    PADDING_CUT_LEVELS,
)
from settlement.config.settings import Settings, get_settings
from settlement.models.enums import SettlementPeriod
from settlement.services.base_service import BaseService, ServiceResult, log_operation
from settlement.services.settlement.activity import ActivityAggregator
from settlement.services.settlement.cash_flow import CashFlowAggregator
from settlement.services.settlement.dto import (
    DateRange,
    SettlementRecordData,
    SettlementRow,
    SummaryStats,
)
from settlement.services.settlement.executor import SettlementExecutor
from settlement.services.settlement.hierarchy import HierarchyIndex
from settlement.services.settlement.padding_config import PaddingCutConfigService
from settlement.services.settlement.sources import (
    CashEventSource,
    PaddingCutStore,
    PartnerDirectory,
    PointEventSource,
    SettlementRecordStore,
    WagerSource,
)
from settlement.services.settlement.sql_sources import (
    SqlPaddingCutStore,
    SqlSettlementRecordStore,
    SqlSettlementSources,
)
from settlement.services.settlement.summary import RowPredicate, SummaryReducer, displayed_rolling
from settlement.services.settlement.tree_walker import SettlementTreeWalker
from settlement.services.settlement.visibility import VisibilityScope
from settlement.utils.exceptions import ConfigurationError, SettlementTimeoutError, ValidationError


class SettlementService(BaseService):
    """
    Hierarchical commission settlement.

    No rows are cached: every call recomputes from the sources with a
    single padding-cut snapshot pinned at its start, so a full retry of
    any call is always safe.
    """

    def __init__(
        self,
        directory: PartnerDirectory,
        wager_source: WagerSource,
        cash_source: CashEventSource,
        point_source: PointEventSource,
        padding_store: PaddingCutStore,
        record_store: SettlementRecordStore,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        padding_cut_levels: Collection[int] = PADDING_CUT_LEVELS,
        calculator: CommissionCalculator | None = None,
    ) -> None:
        super().__init__()
        self.directory = directory
        self.timeout_seconds = timeout_seconds
        self.walker = SettlementTreeWalker(
            ActivityAggregator(wager_source, chunk_size),
            CashFlowAggregator(cash_source, point_source, chunk_size),
            calculator=calculator,
            max_concurrency=max_concurrency,
        )
        self.padding_config = PaddingCutConfigService(padding_store, padding_cut_levels)
        self.executor = SettlementExecutor(record_store)
        self.record_store = record_store
        self.reducer = SummaryReducer()

    @classmethod
    def from_session_maker(
        cls,
        session_maker: async_sessionmaker[AsyncSession],
        settings: Settings | None = None,
    ) -> "SettlementService":
        """Build a service over the SQL data sources."""
        settings = settings or get_settings()
        sources = SqlSettlementSources(session_maker, settings.source_chunk_size)
        return cls(
            directory=sources,
            wager_source=sources,
            cash_source=sources,
            point_source=sources,
            padding_store=SqlPaddingCutStore(session_maker),
            record_store=SqlSettlementRecordStore(session_maker),
            timeout_seconds=settings.settlement_timeout_seconds,
            max_concurrency=settings.settlement_max_concurrency,
            chunk_size=settings.source_chunk_size,
            padding_cut_levels=settings.padding_cut_levels,
        )

    # === Computation ===

    @log_operation
    async def compute_settlement(
        self,
        caller_id: str,
        date_range: DateRange,
        vendor: str | None = None,
        config: PaddingCutConfig | None = None,
    ) -> list[SettlementRow]:
        """
        Compute settlement rows for everything the caller may see.

        Args:
            caller_id: Requesting partner
            date_range: Inclusive range
            vendor: Optional vendor filter (None = all vendors)
            config: Padding-cut snapshot to use instead of the caller's
                current one

        Returns:
            Rows in depth-first pre-order, the caller's own row included

        Raises:
            ValidationError: bad input or caller outside the hierarchy
            ConfigurationError: malformed hierarchy
            DataUnavailableError: hierarchy could not be loaded
            SettlementTimeoutError: computation exceeded the timeout
        """
        rows, _ = await self._compute(caller_id, date_range, vendor, config)
        return rows

    async def _compute(
        self,
        caller_id: str,
        date_range: DateRange,
        vendor: str | None,
        config: PaddingCutConfig | None,
    ) -> tuple[list[SettlementRow], int]:
        if not isinstance(date_range, DateRange):
            raise ValidationError("Malformed date range", context={"date_range": repr(date_range)})
        if vendor is not None and (not isinstance(vendor, str) or not vendor.strip()):
            raise ValidationError("Malformed vendor filter", context={"vendor": repr(vendor)})

        context = {"node_id": caller_id, **date_range.as_context()}
        try:
            async with asyncio.timeout(self.timeout_seconds):
                snapshot = config if config is not None else await self.padding_config.get(caller_id)
                index = await HierarchyIndex.load(self.directory)
                scope = VisibilityScope(index).resolve(caller_id)
                rows = await self.walker.walk(
                    index, scope, date_range, PaddingCutPolicy(snapshot), vendor
                )
        except TimeoutError:
            raise SettlementTimeoutError(
                "Settlement computation timed out",
                context={**context, "timeout_seconds": self.timeout_seconds},
            ) from None
        except ConfigurationError as e:
            self.logger.bind(**{**context, **e.context}).error(
                f"Hierarchy configuration error: {e}"
            )
            raise

        incomplete = sum(1 for row in rows if not row.data_complete)
        if incomplete:
            self.logger.bind(**context).warning(
                f"{incomplete} settlement rows computed from incomplete data"
            )
        return rows, snapshot.version

    def compute_summary(
        self,
        rows: Sequence[SettlementRow],
        row_filter: RowPredicate | None = None,
    ) -> SummaryStats:
        """Filter rows, then sum them."""
        return self.reducer.reduce(rows, row_filter)

    def list_rows(
        self,
        rows: Sequence[SettlementRow],
        row_filter: RowPredicate | None = None,
    ) -> list[SettlementRow]:
        """Rows visible under a filter, in their original order."""
        return self.reducer.filter_rows(rows, row_filter)

    # === Padding-cut configuration ===

    async def get_padding_cut_config(self, caller_id: str) -> PaddingCutConfig:
        return await self.padding_config.get(caller_id)

    async def set_padding_cut_config(
        self,
        caller_id: str,
        config: PaddingCutConfig | Mapping[str, Any],
    ) -> PaddingCutConfig:
        """Publish a new configuration; rows computed before it are stale."""
        return await self.padding_config.set(caller_id, config)

    async def displayed_rolling(self, row: SettlementRow, caller_id: str) -> Decimal:
        """Rolling figure to show for a row under the caller's current config."""
        return displayed_rolling(row, await self.padding_config.get(caller_id))

    # === Execution ===

    @log_operation
    async def execute_settlement(
        self,
        caller_id: str,
        date_range: DateRange,
        period: SettlementPeriod | str,
        vendor: str | None = None,
    ) -> ServiceResult:
        """
        Compute and store the caller's settlement for a period.

        Refused when the period was already settled for the same vendor
        filter or when the caller's own net commission is not positive.
        """
        return await self.executor.execute(
            caller_id,
            date_range,
            period,
            vendor,
            lambda: self._compute(caller_id, date_range, vendor, None),
        )

    async def list_settlement_records(self, caller_id: str) -> list[SettlementRecordData]:
        """Executed settlements of the caller, newest first."""
        return list(await self.record_store.list_for_partner(caller_id))
