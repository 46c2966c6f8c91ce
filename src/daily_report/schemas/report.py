# src/daily_report/schemas/report.py
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Optional, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.daily_report.models.enums import ReportStatus
from src.daily_report.schemas.common import PersonRef, CustomerRef
from src.daily_report.utils.timezone import today_local

TEXT_MAX = 2000
_VISIT_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


# -------------------------------------------------------------------
# Requests
# -------------------------------------------------------------------
class VisitRecordIn(BaseModel):
    # present -> update that row in place; absent -> insert a new row
    id: Optional[int] = Field(default=None, gt=0)
    customer_id: int = Field(gt=0)
    visit_time: Optional[str] = None
    content: str = Field(min_length=1, max_length=TEXT_MAX)

    @field_validator("visit_time")
    @classmethod
    def _visit_time(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "":
            return None
        if not _VISIT_TIME_RE.match(v):
            raise ValueError("visit_time must be in HH:MM format")
        return v


def _not_in_future(v: date) -> date:
    if v > today_local():
        raise ValueError("report_date must be today or earlier")
    return v


class ReportCreate(BaseModel):
    report_date: date
    problem: Optional[str] = Field(default=None, max_length=TEXT_MAX)
    plan: Optional[str] = Field(default=None, max_length=TEXT_MAX)
    status: ReportStatus = ReportStatus.draft
    visit_records: List[VisitRecordIn] = Field(min_length=1)

    @field_validator("report_date")
    @classmethod
    def _check_date(cls, v: date) -> date:
        return _not_in_future(v)


class ReportUpdate(BaseModel):
    """Only the fields actually sent are applied (see model_fields_set)."""

    report_date: Optional[date] = None
    problem: Optional[str] = Field(default=None, max_length=TEXT_MAX)
    plan: Optional[str] = Field(default=None, max_length=TEXT_MAX)
    status: Optional[ReportStatus] = None
    visit_records: Optional[List[VisitRecordIn]] = None

    @field_validator("report_date")
    @classmethod
    def _check_date(cls, v: Optional[date]) -> Optional[date]:
        return None if v is None else _not_in_future(v)

    @model_validator(mode="after")
    def _no_null_for_required(self) -> "ReportUpdate":
        for name in ("report_date", "status", "visit_records"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


# -------------------------------------------------------------------
# Responses
# -------------------------------------------------------------------
class VisitRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer: CustomerRef
    visit_time: Optional[str] = None
    content: str
    sort_order: int


class CommentInReportOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    commenter: PersonRef
    content: str
    created_at: datetime


class ReportDetailOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    report_date: date
    sales_person: PersonRef
    problem: Optional[str] = None
    plan: Optional[str] = None
    status: ReportStatus
    visit_records: List[VisitRecordOut]
    comments: List[CommentInReportOut] = []
    created_at: datetime
    updated_at: datetime


class ReportListItemOut(BaseModel):
    id: int
    report_date: date
    sales_person: PersonRef
    visit_count: int
    status: ReportStatus
    created_at: datetime
    updated_at: datetime
