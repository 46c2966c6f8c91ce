# src/daily_report/crud/customers.py
from typing import Optional, Tuple, List

from sqlalchemy import select, or_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.daily_report.models import Customer
from src.daily_report.schemas.customer import CustomerCreate, CustomerUpdate
from src.daily_report.utils.database import unit_of_work
from src.daily_report.utils.errors import ConflictError, ErrorCode, NotFoundError
from src.daily_report.utils.pagination import calculate_pagination, page_params


def _duplicate_code() -> ConflictError:
    return ConflictError(code=ErrorCode.DUPLICATE_CUSTOMER_CODE)


async def list_customers(
    db: AsyncSession,
    keyword: Optional[str] = None,
    is_active: Optional[bool] = None,
    page: Optional[int] = None,
    per_page: Optional[int] = None,
) -> Tuple[List[Customer], dict]:
    params = page_params(page, per_page)

    base = select(Customer)
    if keyword and keyword.strip():
        like = f"%{keyword.strip()}%"
        base = base.where(or_(Customer.customer_code.ilike(like), Customer.name.ilike(like)))
    if is_active is not None:
        base = base.where(Customer.is_active.is_(is_active))

    total = await db.scalar(select(func.count()).select_from(base.subquery())) or 0
    res = await db.execute(
        base.order_by(Customer.customer_code.asc()).limit(params.per_page).offset(params.offset)
    )
    rows = list(res.scalars().all())
    return rows, calculate_pagination(params.page, params.per_page, total)


async def get_customer(db: AsyncSession, customer_id: int) -> Customer:
    row = await db.get(Customer, customer_id)
    if row is None:
        raise NotFoundError("Customer not found.")
    return row


async def create_customer(db: AsyncSession, data: CustomerCreate) -> Customer:
    code = data.customer_code.strip()
    taken = await db.scalar(select(Customer.id).where(Customer.customer_code == code))
    if taken is not None:
        raise _duplicate_code()

    row = Customer(
        customer_code=code,
        name=data.name.strip(),
        address=data.address,
        phone=data.phone,
        is_active=data.is_active,
    )
    try:
        async with unit_of_work(db):
            db.add(row)
    except IntegrityError as e:
        raise _duplicate_code() from e
    return row


async def update_customer(db: AsyncSession, customer_id: int, data: CustomerUpdate) -> Customer:
    row = await get_customer(db, customer_id)
    sent = data.model_fields_set
    async with unit_of_work(db):
        if "name" in sent and data.name is not None:
            row.name = data.name.strip()
        if "address" in sent:
            row.address = data.address
        if "phone" in sent:
            row.phone = data.phone
        if "is_active" in sent and data.is_active is not None:
            row.is_active = data.is_active
    await db.refresh(row)
    return row


async def deactivate_customer(db: AsyncSession, customer_id: int) -> Customer:
    # past visit records keep pointing at the customer, so it is never hard-deleted
    row = await get_customer(db, customer_id)
    async with unit_of_work(db):
        row.is_active = False
    return row
