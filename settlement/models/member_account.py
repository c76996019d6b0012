"""
MemberAccount model.

A player account referred by a partner. Always a leaf of the hierarchy.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from settlement.models.base import Base
from settlement.models.types import MoneyType, RatePercentType
from settlement.utils.datetime_utils import utc_now


class MemberAccount(Base):
    """
    MemberAccount entity.

    Rate overrides are optional; a None override falls back to the
    referrer's rate for that field.
    """

    __tablename__ = "member_accounts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    referrer_partner_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("partners.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    casino_rolling_pct: Mapped[Decimal | None] = mapped_column(RatePercentType, nullable=True)
    casino_losing_pct: Mapped[Decimal | None] = mapped_column(RatePercentType, nullable=True)
    slot_rolling_pct: Mapped[Decimal | None] = mapped_column(RatePercentType, nullable=True)
    slot_losing_pct: Mapped[Decimal | None] = mapped_column(RatePercentType, nullable=True)

    balance: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0"), nullable=False)
    point_balance: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    def __repr__(self) -> str:
        return f"<MemberAccount(id={self.id!r}, referrer={self.referrer_partner_id!r})>"
