# src/daily_report/schemas/auth.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from src.daily_report.models.enums import Role
from src.daily_report.schemas.common import PersonRef


class LoginIn(BaseModel):
    email: EmailStr = Field(max_length=255)
    password: str = Field(min_length=1, max_length=100)


class LoginUserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_code: str
    name: str
    email: str
    role: Role


class LoginOut(BaseModel):
    token: str
    expires_at: datetime
    user: LoginUserOut


class MeOut(LoginUserOut):
    manager: Optional[PersonRef] = None
