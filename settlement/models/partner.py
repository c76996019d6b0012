"""
Partner model.

One node of the six-level partner hierarchy.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from settlement.models.base import Base
from settlement.models.types import MoneyType, RatePercentType
from settlement.utils.datetime_utils import utc_now


class Partner(Base):
    """
    Partner entity.

    Attributes:
        id: Partner identifier
        username: Login / display name
        level: Hierarchy level (1 = system operator ... 6 = store)
        parent_id: Parent partner (None for a root)
        casino_rolling_pct: Casino rolling commission rate, percent
        casino_losing_pct: Casino losing commission rate, percent
        slot_rolling_pct: Slot rolling commission rate, percent
        slot_losing_pct: Slot losing commission rate, percent
        balance: Cash balance
        point_balance: Point balance
        created_at: Creation timestamp
    """

    __tablename__ = "partners"
    __table_args__ = (Index("idx_partners_parent", "parent_id"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    level: Mapped[int] = mapped_column(Integer, nullable=False)
    parent_id: Mapped[str | None] = mapped_column(
        String(64),
        ForeignKey("partners.id", ondelete="RESTRICT"),
        nullable=True,
    )

    # Rates are nullable: missing values settle as 0
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
        return f"<Partner(id={self.id!r}, level={self.level}, parent_id={self.parent_id!r})>"
