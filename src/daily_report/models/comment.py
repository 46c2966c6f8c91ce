# src/daily_report/models/comment.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.daily_report.utils.database import Base
from src.daily_report.utils.timezone import now_naive


class Comment(Base):
    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    daily_report_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("daily_reports.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False,
        index=True,
    )
    commenter_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("sales_persons.id", ondelete="RESTRICT", onupdate="CASCADE"),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=now_naive)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), nullable=False, default=now_naive, onupdate=now_naive
    )

    commenter = relationship("SalesPerson", lazy="raise")
