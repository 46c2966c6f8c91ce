# src/daily_report/models/__init__.py
from .enums import Role, ReportStatus
from .sales_person import SalesPerson
from .customer import Customer
from .daily_report import DailyReport, VisitRecord
from .comment import Comment

__all__ = [
    "Role",
    "ReportStatus",
    "SalesPerson",
    "Customer",
    "DailyReport",
    "VisitRecord",
    "Comment",
]
