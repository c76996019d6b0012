"""
CashEvent model.

Deposits, withdrawals, manual adjustments and partner funding transfers.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from settlement.models.base import Base
from settlement.models.enums import CashEventStatus
from settlement.models.types import MoneyType


class CashEvent(Base):
    """
    CashEvent entity.

    The subject is either a member account or a partner, never both.
    Partner funding rows additionally carry the counterparty partner
    (the other side of the transfer). The kind is always seen from the
    subject: a transfer from P to C is stored as partner_funding_in with
    subject C and counterparty P.
    """

    __tablename__ = "cash_events"
    __table_args__ = (
        CheckConstraint(
            "(account_id IS NULL) <> (partner_id IS NULL)",
            name="ck_cash_events_single_subject",
        ),
        CheckConstraint("amount >= 0", name="ck_cash_events_amount_non_negative"),
        Index("idx_cash_events_account_time", "account_id", "occurred_at"),
        Index("idx_cash_events_partner_time", "partner_id", "occurred_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("member_accounts.id", ondelete="CASCADE"), nullable=True
    )
    partner_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("partners.id", ondelete="CASCADE"), nullable=True
    )
    counterparty_partner_id: Mapped[str | None] = mapped_column(
        String(64), ForeignKey("partners.id", ondelete="SET NULL"), nullable=True
    )
    kind: Mapped[str] = mapped_column(String(32), nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    status: Mapped[str] = mapped_column(
        String(16), default=CashEventStatus.PENDING.value, nullable=False
    )
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
