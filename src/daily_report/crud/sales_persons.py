# src/daily_report/crud/sales_persons.py
from __future__ import annotations

import logging
from typing import Optional, Tuple, List

from sqlalchemy import select, or_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.daily_report.models import Role, SalesPerson
from src.daily_report.schemas.sales_person import SalesPersonCreate, SalesPersonUpdate
from src.daily_report.utils.database import unit_of_work
from src.daily_report.utils.errors import ConflictError, ErrorCode, NotFoundError, ValidationError
from src.daily_report.utils.pagination import calculate_pagination, page_params
from src.daily_report.utils.security import hash_password

logger = logging.getLogger(__name__)


async def list_sales_persons(
    db: AsyncSession,
    keyword: Optional[str] = None,
    is_active: Optional[bool] = None,
    role: Optional[Role] = None,
    page: Optional[int] = None,
    per_page: Optional[int] = None,
) -> Tuple[List[SalesPerson], dict]:
    params = page_params(page, per_page)

    base = select(SalesPerson)
    if keyword and keyword.strip():
        like = f"%{keyword.strip()}%"
        base = base.where(
            or_(
                SalesPerson.employee_code.ilike(like),
                SalesPerson.name.ilike(like),
                SalesPerson.email.ilike(like),
            )
        )
    if is_active is not None:
        base = base.where(SalesPerson.is_active.is_(is_active))
    if role is not None:
        base = base.where(SalesPerson.role == role)

    total = await db.scalar(select(func.count()).select_from(base.subquery())) or 0
    res = await db.execute(
        base.options(selectinload(SalesPerson.manager))
        .order_by(SalesPerson.name.asc(), SalesPerson.id.asc())
        .limit(params.per_page)
        .offset(params.offset)
    )
    rows = list(res.scalars().all())
    return rows, calculate_pagination(params.page, params.per_page, total)


async def load_sales_person(db: AsyncSession, person_id: int) -> Optional[SalesPerson]:
    stmt = (
        select(SalesPerson)
        .where(SalesPerson.id == person_id)
        .options(selectinload(SalesPerson.manager))
        .execution_options(populate_existing=True)
    )
    return (await db.execute(stmt)).scalar_one_or_none()


async def get_sales_person(db: AsyncSession, person_id: int) -> SalesPerson:
    row = await load_sales_person(db, person_id)
    if row is None:
        raise NotFoundError("Sales person not found.")
    return row


async def _check_manager(db: AsyncSession, manager_id: Optional[int], self_id: Optional[int] = None) -> None:
    if manager_id is None:
        return
    if self_id is not None and manager_id == self_id:
        raise ValidationError("A sales person cannot be their own manager.")
    exists = await db.scalar(select(SalesPerson.id).where(SalesPerson.id == manager_id))
    if exists is None:
        raise ValidationError(f"Manager {manager_id} does not exist.")


async def _check_unique(
    db: AsyncSession,
    *,
    employee_code: Optional[str] = None,
    email: Optional[str] = None,
    exclude_id: Optional[int] = None,
) -> None:
    if employee_code is not None:
        taken = await db.scalar(select(SalesPerson.id).where(SalesPerson.employee_code == employee_code))
        if taken is not None and taken != exclude_id:
            raise ConflictError(code=ErrorCode.DUPLICATE_EMPLOYEE_CODE)
    if email is not None:
        taken = await db.scalar(select(SalesPerson.id).where(func.lower(SalesPerson.email) == email.lower()))
        if taken is not None and taken != exclude_id:
            raise ConflictError(code=ErrorCode.DUPLICATE_EMAIL)


def _conflict_from_integrity(e: IntegrityError) -> ConflictError:
    # best effort: the driver message names the violated column
    msg = str(e.orig).lower()
    if "email" in msg:
        return ConflictError(code=ErrorCode.DUPLICATE_EMAIL)
    if "employee_code" in msg:
        return ConflictError(code=ErrorCode.DUPLICATE_EMPLOYEE_CODE)
    return ConflictError()


async def create_sales_person(db: AsyncSession, data: SalesPersonCreate) -> SalesPerson:
    code = data.employee_code.strip()
    await _check_unique(db, employee_code=code, email=data.email)
    await _check_manager(db, data.manager_id)

    row = SalesPerson(
        employee_code=code,
        name=data.name.strip(),
        email=data.email,
        password_hash=hash_password(data.password.get_secret_value()),
        role=data.role,
        manager_id=data.manager_id,
        is_active=data.is_active,
    )
    try:
        async with unit_of_work(db):
            db.add(row)
    except IntegrityError as e:
        raise _conflict_from_integrity(e) from e

    logger.info("Sales person %s (%s) created", row.id, code)
    return await load_sales_person(db, row.id)


async def update_sales_person(db: AsyncSession, person_id: int, data: SalesPersonUpdate) -> SalesPerson:
    row = await get_sales_person(db, person_id)
    sent = data.model_fields_set

    if "email" in sent and data.email is not None:
        await _check_unique(db, email=data.email, exclude_id=row.id)
    if "manager_id" in sent:
        await _check_manager(db, data.manager_id, self_id=row.id)

    try:
        async with unit_of_work(db):
            if "name" in sent and data.name is not None:
                row.name = data.name.strip()
            if "email" in sent and data.email is not None:
                row.email = data.email
            if data.password is not None:
                row.password_hash = hash_password(data.password.get_secret_value())
            if "role" in sent and data.role is not None:
                row.role = data.role
            if "manager_id" in sent:
                row.manager_id = data.manager_id
            if "is_active" in sent and data.is_active is not None:
                row.is_active = data.is_active
    except IntegrityError as e:
        raise _conflict_from_integrity(e) from e

    return await load_sales_person(db, person_id)


async def deactivate_sales_person(db: AsyncSession, person_id: int) -> SalesPerson:
    # reports and comments reference the person, so the row stays
    row = await get_sales_person(db, person_id)
    async with unit_of_work(db):
        row.is_active = False
    logger.info("Sales person %s deactivated", person_id)
    return await load_sales_person(db, person_id)
