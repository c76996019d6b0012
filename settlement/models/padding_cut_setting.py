"""
PaddingCutSetting model.

Stores one padding-cut configuration per operator.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from settlement.models.base import Base
from settlement.utils.datetime_utils import utc_now


class PaddingCutSetting(Base):
    """
    PaddingCutSetting entity.

    Attributes:
        owner_id: Operator / caller the configuration belongs to
        config: JSON document with flags, levels and cut percentage
        version: Monotonic version, bumped on every save
        updated_at: Last save time
    """

    __tablename__ = "padding_cut_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    owner_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    config: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )
