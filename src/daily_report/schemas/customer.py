# src/daily_report/schemas/customer.py
from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.daily_report.schemas.common import _blank_to_none

_CODE_RE = re.compile(r"^[a-zA-Z0-9]+$")
_PHONE_RE = re.compile(r"^0\d{1,4}-?\d{1,4}-?\d{3,4}$")


def _check_phone(v: Optional[str]) -> Optional[str]:
    if v is not None and not _PHONE_RE.match(v):
        raise ValueError("phone must be a valid phone number")
    return v


class CustomerCreate(BaseModel):
    customer_code: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=200)
    address: Optional[str] = Field(default=None, max_length=500)
    phone: Optional[str] = Field(default=None, max_length=20)
    is_active: bool = True

    @field_validator("customer_code")
    @classmethod
    def _alnum(cls, v: str) -> str:
        if not _CODE_RE.match(v):
            raise ValueError("customer_code must be alphanumeric")
        return v

    @field_validator("address", "phone", mode="before")
    @classmethod
    def _blank(cls, v):
        return _blank_to_none(v)

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: Optional[str]) -> Optional[str]:
        return _check_phone(v)


class CustomerUpdate(BaseModel):
    # customer_code is immutable once created
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    address: Optional[str] = Field(default=None, max_length=500)
    phone: Optional[str] = Field(default=None, max_length=20)
    is_active: Optional[bool] = None

    @field_validator("address", "phone", mode="before")
    @classmethod
    def _blank(cls, v):
        return _blank_to_none(v)

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: Optional[str]) -> Optional[str]:
        return _check_phone(v)


class CustomerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_code: str
    name: str
    address: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
