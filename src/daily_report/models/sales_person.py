# src/daily_report/models/sales_person.py
from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.daily_report.models.enums import Role
from src.daily_report.utils.database import Base
from src.daily_report.utils.timezone import now_naive


class SalesPerson(Base):
    __tablename__ = "sales_persons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[Role] = mapped_column(
        Enum(Role, name="role", native_enum=False, length=10),
        nullable=False,
        default=Role.member,
    )
    # one level only: a manager's own manager_id is expected to be null
    manager_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("sales_persons.id", ondelete="SET NULL", onupdate="CASCADE"),
        nullable=True,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=now_naive)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), nullable=False, default=now_naive, onupdate=now_naive
    )

    manager = relationship(
        "SalesPerson",
        remote_side="SalesPerson.id",
        lazy="raise",
    )

    def __repr__(self) -> str:
        return f"<SalesPerson {self.id} {self.employee_code} {self.role}>"
