# src/daily_report/models/daily_report.py
from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.daily_report.models.comment import Comment
from src.daily_report.models.enums import ReportStatus
from src.daily_report.utils.database import Base
from src.daily_report.utils.timezone import now_naive


class DailyReport(Base):
    __tablename__ = "daily_reports"
    __table_args__ = (
        # authoritative guard for one report per person per day
        UniqueConstraint("sales_person_id", "report_date", name="uq_daily_reports_owner_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    sales_person_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("sales_persons.id", ondelete="RESTRICT", onupdate="CASCADE"),
        nullable=False,
        index=True,
    )
    report_date: Mapped[date] = mapped_column(Date, nullable=False)
    problem: Mapped[str | None] = mapped_column(Text, nullable=True)
    plan: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[ReportStatus] = mapped_column(
        Enum(ReportStatus, name="report_status", native_enum=False, length=10),
        nullable=False,
        default=ReportStatus.draft,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=now_naive)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), nullable=False, default=now_naive, onupdate=now_naive
    )

    sales_person = relationship("SalesPerson", lazy="raise")
    visit_records: Mapped[list["VisitRecord"]] = relationship(
        "VisitRecord",
        order_by="VisitRecord.sort_order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="raise",
    )
    comments = relationship(
        "Comment",
        order_by=lambda: [Comment.created_at, Comment.id],
        passive_deletes=True,
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<DailyReport {self.id} owner={self.sales_person_id} {self.report_date}>"


class VisitRecord(Base):
    __tablename__ = "visit_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    daily_report_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("daily_reports.id", ondelete="CASCADE", onupdate="CASCADE"),
        nullable=False,
        index=True,
    )
    customer_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("customers.id", ondelete="RESTRICT", onupdate="CASCADE"),
        nullable=False,
    )
    visit_time: Mapped[str | None] = mapped_column(String(5), nullable=True)  # "HH:MM"
    content: Mapped[str] = mapped_column(Text, nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=now_naive)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), nullable=False, default=now_naive, onupdate=now_naive
    )

    customer = relationship("Customer", lazy="raise")
