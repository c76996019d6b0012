"""
SettlementRecord model.

Permanent snapshot of an executed settlement. Balances are never
touched by settlement execution; this row is the only write.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Date, DateTime, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from settlement.models.base import Base
from settlement.models.types import SettlementAmountType
from settlement.utils.datetime_utils import utc_now


class SettlementRecord(Base):
    """
    SettlementRecord entity.

    One record per (partner, period start, period end, vendor filter).
    """

    __tablename__ = "settlement_records"
    __table_args__ = (
        UniqueConstraint(
            "partner_id",
            "period_start",
            "period_end",
            "vendor_filter",
            name="uq_settlement_records_period",
        ),
        Index("idx_settlement_records_partner_created", "partner_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    partner_id: Mapped[str] = mapped_column(String(64), nullable=False)
    settlement_period: Mapped[str] = mapped_column(String(16), nullable=False)
    vendor_filter: Mapped[str] = mapped_column(String(32), nullable=False, default="all")
    period_start: Mapped[date] = mapped_column(Date, nullable=False)
    period_end: Mapped[date] = mapped_column(Date, nullable=False)
    date_from: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    date_to: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    total_bet_amount: Mapped[Decimal] = mapped_column(SettlementAmountType, nullable=False)
    total_win_amount: Mapped[Decimal] = mapped_column(SettlementAmountType, nullable=False)
    casino_rolling_commission: Mapped[Decimal] = mapped_column(SettlementAmountType, nullable=False)
    casino_losing_commission: Mapped[Decimal] = mapped_column(SettlementAmountType, nullable=False)
    slot_rolling_commission: Mapped[Decimal] = mapped_column(SettlementAmountType, nullable=False)
    slot_losing_commission: Mapped[Decimal] = mapped_column(SettlementAmountType, nullable=False)
    rolling_commission: Mapped[Decimal] = mapped_column(SettlementAmountType, nullable=False)
    losing_commission: Mapped[Decimal] = mapped_column(SettlementAmountType, nullable=False)
    padding_cut_amount: Mapped[Decimal] = mapped_column(SettlementAmountType, nullable=False)
    commission_amount: Mapped[Decimal] = mapped_column(SettlementAmountType, nullable=False)
    padding_config_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    details: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    executed_by: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
