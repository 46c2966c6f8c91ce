# src/daily_report/routes/reports_api.py
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.daily_report.crud import reports as crud
from src.daily_report.models import ReportStatus, SalesPerson
from src.daily_report.schemas.report import (
    ReportCreate,
    ReportDetailOut,
    ReportListItemOut,
    ReportUpdate,
)
from src.daily_report.utils.auth import get_current_user
from src.daily_report.utils.database import get_db
from src.daily_report.utils.response import ok, paginated

router = APIRouter(prefix="/reports", tags=["Reports"])


def _detail(report) -> dict:
    return ReportDetailOut.model_validate(report).model_dump(mode="json")


@router.get("")
async def api_list_reports(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    sales_person_id: Optional[int] = Query(None),
    status: Optional[ReportStatus] = Query(None),
    page: Optional[int] = Query(None),
    per_page: Optional[int] = Query(None),
    current_user: SalesPerson = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rows, pagination = await crud.list_reports(
        db,
        current_user,
        start_date=start_date,
        end_date=end_date,
        sales_person_id=sales_person_id,
        status=status,
        page=page,
        per_page=per_page,
    )
    data = [ReportListItemOut.model_validate(r).model_dump(mode="json") for r in rows]
    return paginated(data, pagination)


@router.post("", status_code=201)
async def api_create_report(
    payload: ReportCreate,
    current_user: SalesPerson = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    report = await crud.create_report(db, current_user, payload)
    return ok(_detail(report))


@router.get("/{report_id}")
async def api_get_report(
    report_id: int,
    current_user: SalesPerson = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    report = await crud.view_report(db, current_user, report_id)
    return ok(_detail(report))


@router.put("/{report_id}")
async def api_update_report(
    report_id: int,
    payload: ReportUpdate,
    current_user: SalesPerson = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    report = await crud.update_report(db, current_user, report_id, payload)
    return ok(_detail(report))


@router.delete("/{report_id}")
async def api_delete_report(
    report_id: int,
    current_user: SalesPerson = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await crud.delete_report(db, current_user, report_id)
    return ok({"message": "Report deleted."})
