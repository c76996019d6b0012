"""
SQLAlchemy-backed collaborators.

Each query opens its own short-lived session so sibling aggregations can
run concurrently. SQLAlchemy failures surface as DataUnavailableError.
"""

from collections.abc import AsyncIterator, Collection, Sequence
from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal
from typing import Any

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from commission import CommissionRates, PaddingCutConfig
from settlement.config.constants import (
    CASH_COLLABORATOR,
    DEFAULT_CHUNK_SIZE,
    DIRECTORY_COLLABORATOR,
    PADDING_STORE_COLLABORATOR,
    POINT_COLLABORATOR,
    RECORD_STORE_COLLABORATOR,
    WAGER_COLLABORATOR,
)
from settlement.models.enums import CashEventKind, CashEventStatus, PointEventKind
from settlement.models.member_account import MemberAccount
from settlement.models.partner import Partner
from settlement.models.settlement_record import SettlementRecord
from settlement.repositories.cash_event_repository import CashEventRepository
from settlement.repositories.member_account_repository import MemberAccountRepository
from settlement.repositories.padding_cut_setting_repository import PaddingCutSettingRepository
from settlement.repositories.partner_repository import PartnerRepository
from settlement.repositories.point_event_repository import PointEventRepository
from settlement.repositories.settlement_record_repository import SettlementRecordRepository
from settlement.repositories.wager_record_repository import WagerRecordRepository
from settlement.services.settlement.dto import (
    CashEntry,
    DateRange,
    MemberNode,
    PartnerNode,
    PointEntry,
    SettlementRecordData,
    WagerEntry,
)
from settlement.utils.batching import chunked
from settlement.utils.exceptions import DataUnavailableError, DuplicateSettlementError

_RATE_FIELDS = ("casino_rolling_pct", "casino_losing_pct", "slot_rolling_pct", "slot_losing_pct")


def _warn_negative_rates(node_id: str, values: dict[str, Decimal | None]) -> None:
    negative = {name: str(value) for name, value in values.items() if value is not None and value < 0}
    if negative:
        logger.bind(node_id=node_id, rates=negative).warning(
            f"Negative commission rates on {node_id} settle as 0"
        )


def partner_to_node(partner: Partner) -> PartnerNode:
    """Map a Partner row to the engine's PartnerNode."""
    raw = {name: getattr(partner, name) for name in _RATE_FIELDS}
    _warn_negative_rates(partner.id, raw)
    return PartnerNode(
        id=partner.id,
        username=partner.username,
        level=partner.level,
        parent_id=partner.parent_id,
        rates=CommissionRates.from_stored(**raw),
        balance=partner.balance,
        point_balance=partner.point_balance,
    )


def member_to_node(member: MemberAccount) -> MemberNode:
    """Map a MemberAccount row to the engine's MemberNode."""
    raw = {name: getattr(member, name) for name in _RATE_FIELDS}
    _warn_negative_rates(member.id, raw)
    return MemberNode(
        id=member.id,
        username=member.username,
        referrer_id=member.referrer_partner_id,
        balance=member.balance,
        point_balance=member.point_balance,
        **raw,
    )


def record_to_data(record: SettlementRecord) -> SettlementRecordData:
    """Map a SettlementRecord row to SettlementRecordData."""
    return SettlementRecordData(
        id=record.id,
        partner_id=record.partner_id,
        settlement_period=record.settlement_period,
        vendor_filter=record.vendor_filter,
        period_start=record.period_start,
        period_end=record.period_end,
        date_from=record.date_from,
        date_to=record.date_to,
        total_bet_amount=record.total_bet_amount,
        total_win_amount=record.total_win_amount,
        casino_rolling_commission=record.casino_rolling_commission,
        casino_losing_commission=record.casino_losing_commission,
        slot_rolling_commission=record.slot_rolling_commission,
        slot_losing_commission=record.slot_losing_commission,
        rolling_commission=record.rolling_commission,
        losing_commission=record.losing_commission,
        padding_cut_amount=record.padding_cut_amount,
        commission_amount=record.commission_amount,
        padding_config_version=record.padding_config_version,
        details=list(record.details or []),
        executed_by=record.executed_by,
        created_at=record.created_at,
    )


class _SessionScoped:
    """Opens one session per query and translates database failures."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self.session_maker = session_maker

    @asynccontextmanager
    async def _session(
        self, collaborator: str, **context: Any
    ) -> AsyncIterator[AsyncSession]:
        try:
            async with self.session_maker() as session:
                yield session
        except SQLAlchemyError as e:
            raise DataUnavailableError(
                f"{collaborator} query failed: {e.__class__.__name__}",
                collaborator=collaborator,
                context=context,
            ) from e


class SqlSettlementSources(_SessionScoped):
    """Directory, wager, cash and point sources over the settlement tables."""

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        super().__init__(session_maker)
        self.chunk_size = chunk_size

    async def list_partners(self) -> Sequence[PartnerNode]:
        async with self._session(DIRECTORY_COLLABORATOR) as session:
            partners = await PartnerRepository(session).get_all()
        return [partner_to_node(partner) for partner in partners]

    async def list_members(self, referrer_ids: Collection[str]) -> Sequence[MemberNode]:
        members: list[MemberNode] = []
        for batch in chunked(sorted(set(referrer_ids)), self.chunk_size):
            async with self._session(DIRECTORY_COLLABORATOR) as session:
                rows = await MemberAccountRepository(session).get_by_referrers(batch)
            members.extend(member_to_node(member) for member in rows)
        return members

    async def fetch_wagers(
        self,
        account_ids: Collection[str],
        date_range: DateRange,
        vendor: str | None = None,
    ) -> Sequence[WagerEntry]:
        async with self._session(WAGER_COLLABORATOR, **date_range.as_context()) as session:
            rows = await WagerRecordRepository(session).sum_by_account_and_category(
                account_ids, date_range.start, date_range.end, vendor
            )
        return [
            WagerEntry(account_id=account_id, category=category, bet=bet, win=win, vendor=vendor)
            for account_id, category, bet, win in rows
        ]

    async def fetch_cash_events(
        self,
        account_ids: Collection[str],
        partner_ids: Collection[str],
        date_range: DateRange,
        statuses: Collection[CashEventStatus],
    ) -> Sequence[CashEntry]:
        async with self._session(CASH_COLLABORATOR, **date_range.as_context()) as session:
            rows = await CashEventRepository(session).sum_by_subject(
                account_ids,
                partner_ids,
                date_range.start,
                date_range.end,
                [CashEventStatus(status).value for status in statuses],
            )

        entries: list[CashEntry] = []
        for account_id, partner_id, kind, status, amount in rows:
            try:
                event_kind = CashEventKind(kind)
            except ValueError:
                logger.bind(account_id=account_id, partner_id=partner_id).warning(
                    f"Skipping cash events of unknown kind {kind!r}"
                )
                continue
            entries.append(
                CashEntry(
                    kind=event_kind,
                    amount=amount,
                    status=CashEventStatus(status),
                    account_id=account_id,
                    partner_id=partner_id,
                )
            )
        return entries

    async def fetch_point_events(
        self,
        account_ids: Collection[str],
        date_range: DateRange,
    ) -> Sequence[PointEntry]:
        async with self._session(POINT_COLLABORATOR, **date_range.as_context()) as session:
            rows = await PointEventRepository(session).sum_by_account_and_kind(
                account_ids, date_range.start, date_range.end
            )
        return [
            PointEntry(account_id=account_id, kind=PointEventKind(kind), amount=amount)
            for account_id, kind, amount in rows
        ]


class SqlPaddingCutStore(_SessionScoped):
    """PaddingCutStore over the padding_cut_settings table."""

    async def load(self, owner_id: str) -> PaddingCutConfig | None:
        async with self._session(PADDING_STORE_COLLABORATOR, owner_id=owner_id) as session:
            setting = await PaddingCutSettingRepository(session).get_by_owner(owner_id)
        if setting is None:
            return None
        return PaddingCutConfig.model_validate(
            {**setting.config, "version": setting.version, "updated_at": setting.updated_at}
        )

    async def save(self, owner_id: str, config: PaddingCutConfig) -> PaddingCutConfig:
        document = config.model_dump(mode="json", exclude={"version", "updated_at"})
        async with self._session(PADDING_STORE_COLLABORATOR, owner_id=owner_id) as session:
            async with session.begin():
                await PaddingCutSettingRepository(session).upsert(
                    owner_id, document, config.version
                )
        return config


class SqlSettlementRecordStore(_SessionScoped):
    """SettlementRecordStore over the settlement_records table."""

    async def exists(
        self,
        partner_id: str,
        period_start: date,
        period_end: date,
        vendor_filter: str,
    ) -> bool:
        async with self._session(RECORD_STORE_COLLABORATOR, node_id=partner_id) as session:
            return await SettlementRecordRepository(session).exists_for_period(
                partner_id, period_start, period_end, vendor_filter
            )

    async def save(self, record: SettlementRecordData) -> SettlementRecordData:
        values = {
            key: value
            for key, value in vars(record).items()
            if key not in ("id", "created_at")
        }
        try:
            async with self._session(RECORD_STORE_COLLABORATOR, node_id=record.partner_id) as session:
                async with session.begin():
                    stored = await SettlementRecordRepository(session).create(**values)
                    saved = record_to_data(stored)
            return saved
        except DataUnavailableError as e:
            if isinstance(e.__cause__, IntegrityError):
                raise DuplicateSettlementError(
                    "This period has already been settled",
                    context={
                        "node_id": record.partner_id,
                        "period_start": record.period_start.isoformat(),
                        "period_end": record.period_end.isoformat(),
                    },
                ) from e
            raise

    async def list_for_partner(self, partner_id: str) -> Sequence[SettlementRecordData]:
        async with self._session(RECORD_STORE_COLLABORATOR, node_id=partner_id) as session:
            records = await SettlementRecordRepository(session).get_by_partner(partner_id)
        return [record_to_data(record) for record in records]
