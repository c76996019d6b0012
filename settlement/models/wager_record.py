"""
WagerRecord model.

Immutable game activity rows produced by the game-activity feed.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from settlement.models.base import Base
from settlement.models.enums import GameCategory
from settlement.models.types import MoneyType


class WagerRecord(Base):
    """
    WagerRecord entity.

    Attributes:
        id: Primary key
        account_id: Member account that placed the bet
        game_category: casino or slot
        vendor: Game vendor (API) the record came from
        bet_amount: Stake; sign is normalized when summed
        win_amount: Payout; sign is normalized when summed
        occurred_at: When the round was played
    """

    __tablename__ = "wager_records"
    __table_args__ = (
        Index("idx_wager_records_account_time", "account_id", "occurred_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("member_accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    game_category: Mapped[str] = mapped_column(
        String(16), default=GameCategory.CASINO.value, nullable=False
    )
    vendor: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)
    bet_amount: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0"), nullable=False)
    win_amount: Mapped[Decimal] = mapped_column(MoneyType, default=Decimal("0"), nullable=False)
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
