# src/daily_report/models/enums.py
from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    member = "member"
    manager = "manager"
    admin = "admin"


class ReportStatus(str, Enum):
    draft = "draft"
    submitted = "submitted"
    reviewed = "reviewed"
