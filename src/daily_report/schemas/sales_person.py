# src/daily_report/schemas/sales_person.py
from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, SecretStr, field_validator

from src.daily_report.models.enums import Role
from src.daily_report.schemas.common import PersonRef

_CODE_RE = re.compile(r"^[a-zA-Z0-9]+$")


class SalesPersonCreate(BaseModel):
    employee_code: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr = Field(max_length=255)
    password: SecretStr = Field(min_length=8, max_length=100)  # hashed by the service
    role: Role = Role.member
    manager_id: Optional[int] = Field(default=None, gt=0)
    is_active: bool = True

    @field_validator("employee_code")
    @classmethod
    def _alnum(cls, v: str) -> str:
        if not _CODE_RE.match(v):
            raise ValueError("employee_code must be alphanumeric")
        return v

    @field_validator("email")
    @classmethod
    def _lower(cls, v: str) -> str:
        return v.lower()


class SalesPersonUpdate(BaseModel):
    # employee_code is immutable once created
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = Field(default=None, max_length=255)
    password: Optional[SecretStr] = None   # blank -> keep current password
    role: Optional[Role] = None
    manager_id: Optional[int] = Field(default=None, gt=0)
    is_active: Optional[bool] = None

    @field_validator("email")
    @classmethod
    def _lower(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v

    @field_validator("password")
    @classmethod
    def _password(cls, v: Optional[SecretStr]) -> Optional[SecretStr]:
        if v is None or v.get_secret_value() == "":
            return None
        if not 8 <= len(v.get_secret_value()) <= 100:
            raise ValueError("password must be between 8 and 100 characters")
        return v


class SalesPersonOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_code: str
    name: str
    email: str
    role: Role
    manager: Optional[PersonRef] = None
    is_active: bool
    created_at: datetime
