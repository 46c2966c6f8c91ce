# src/daily_report/routes/sales_persons_api.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.daily_report.crud import sales_persons as crud
from src.daily_report.models import Role, SalesPerson
from src.daily_report.schemas.sales_person import SalesPersonCreate, SalesPersonOut, SalesPersonUpdate
from src.daily_report.utils.auth import get_current_user, require_admin
from src.daily_report.utils.database import get_db
from src.daily_report.utils.response import ok, paginated

router = APIRouter(prefix="/sales-persons", tags=["Sales persons"])


def _out(row) -> dict:
    return SalesPersonOut.model_validate(row).model_dump(mode="json")


@router.get("")
async def api_list_sales_persons(
    keyword: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    role: Optional[Role] = Query(None),
    page: Optional[int] = Query(None),
    per_page: Optional[int] = Query(None),
    current_user: SalesPerson = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rows, pagination = await crud.list_sales_persons(db, keyword, is_active, role, page, per_page)
    return paginated([_out(r) for r in rows], pagination)


@router.get("/{person_id}")
async def api_get_sales_person(
    person_id: int,
    current_user: SalesPerson = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return ok(_out(await crud.get_sales_person(db, person_id)))


@router.post("", status_code=201)
async def api_create_sales_person(
    payload: SalesPersonCreate,
    admin: SalesPerson = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return ok(_out(await crud.create_sales_person(db, payload)))


@router.put("/{person_id}")
async def api_update_sales_person(
    person_id: int,
    payload: SalesPersonUpdate,
    admin: SalesPerson = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return ok(_out(await crud.update_sales_person(db, person_id, payload)))


@router.delete("/{person_id}")
async def api_delete_sales_person(
    person_id: int,
    admin: SalesPerson = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return ok(_out(await crud.deactivate_sales_person(db, person_id)))
