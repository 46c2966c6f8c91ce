# src/daily_report/routes/customers_api.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.daily_report.crud import customers as crud
from src.daily_report.models import SalesPerson
from src.daily_report.schemas.customer import CustomerCreate, CustomerOut, CustomerUpdate
from src.daily_report.utils.auth import get_current_user, require_admin
from src.daily_report.utils.database import get_db
from src.daily_report.utils.response import ok, paginated

router = APIRouter(prefix="/customers", tags=["Customers"])


def _out(row) -> dict:
    return CustomerOut.model_validate(row).model_dump(mode="json")


@router.get("")
async def api_list_customers(
    keyword: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    page: Optional[int] = Query(None),
    per_page: Optional[int] = Query(None),
    current_user: SalesPerson = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rows, pagination = await crud.list_customers(db, keyword, is_active, page, per_page)
    return paginated([_out(r) for r in rows], pagination)


@router.get("/{customer_id}")
async def api_get_customer(
    customer_id: int,
    current_user: SalesPerson = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ok(_out(await crud.get_customer(db, customer_id)))


@router.post("", status_code=201)
async def api_create_customer(
    payload: CustomerCreate,
    admin: SalesPerson = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return ok(_out(await crud.create_customer(db, payload)))


@router.put("/{customer_id}")
async def api_update_customer(
    customer_id: int,
    payload: CustomerUpdate,
    admin: SalesPerson = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return ok(_out(await crud.update_customer(db, customer_id, payload)))


@router.delete("/{customer_id}")
async def api_delete_customer(
    customer_id: int,
    admin: SalesPerson = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return ok(_out(await crud.deactivate_customer(db, customer_id)))
