# src/daily_report/crud/reports.py
"""
Daily report aggregate: a report plus its ordered visit records.

Visit records are never addressed on their own; they are created, rewritten
and removed only through create_report / update_report, each inside one
unit of work.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.daily_report.models import (
    Comment,
    Customer,
    DailyReport,
    ReportStatus,
    SalesPerson,
    VisitRecord,
)
from src.daily_report.schemas.report import ReportCreate, ReportUpdate, VisitRecordIn
from src.daily_report.utils.database import unit_of_work
from src.daily_report.utils.errors import (
    ConflictError,
    ErrorCode,
    ForbiddenError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from src.daily_report.utils.pagination import calculate_pagination, page_params
from src.daily_report.utils.permissions import Actor, can_edit_report, can_view_report, viewable_owner_ids
from src.daily_report.utils.timezone import now_naive

logger = logging.getLogger(__name__)


def _duplicate_report() -> ConflictError:
    return ConflictError(code=ErrorCode.DUPLICATE_REPORT)


def integrity_error_to_app_error(e: IntegrityError) -> ConflictError | InternalError:
    """Only the owner+date unique constraint is a conflict; anything else (FK etc.) is internal."""
    msg = str(e.orig).lower()
    if "uq_daily_reports_owner_date" in msg or ("unique" in msg and "report_date" in msg):
        return _duplicate_report()
    logger.error("Report write violated a constraint: %s", e.orig)
    return InternalError()


# -------------------------------------------------------------------
# Reads
# -------------------------------------------------------------------
async def list_reports(
    db: AsyncSession,
    actor: Actor,
    *,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    sales_person_id: Optional[int] = None,
    status: Optional[ReportStatus] = None,
    page: Optional[int] = None,
    per_page: Optional[int] = None,
) -> Tuple[list[dict], dict]:
    """
    Reports the actor may see, newest date first.
    An owner filter outside the actor's scope yields an empty page, not an error.
    """
    if start_date and end_date and start_date > end_date:
        raise ValidationError("start_date must be on or before end_date")
    params = page_params(page, per_page)

    conds = []
    owner_ids = await viewable_owner_ids(db, actor)
    if owner_ids is not None:
        conds.append(DailyReport.sales_person_id.in_(owner_ids))
    if sales_person_id is not None:
        conds.append(DailyReport.sales_person_id == sales_person_id)
    if status is not None:
        conds.append(DailyReport.status == status)
    if start_date is not None:
        conds.append(DailyReport.report_date >= start_date)
    if end_date is not None:
        conds.append(DailyReport.report_date <= end_date)

    total = await db.scalar(select(func.count(DailyReport.id)).where(*conds)) or 0

    visit_count = (
        select(func.count(VisitRecord.id))
        .where(VisitRecord.daily_report_id == DailyReport.id)
        .correlate(DailyReport)
        .scalar_subquery()
    )
    stmt = (
        select(DailyReport, SalesPerson.name, visit_count.label("visit_count"))
        .join(SalesPerson, SalesPerson.id == DailyReport.sales_person_id)
        .where(*conds)
        .order_by(DailyReport.report_date.desc(), DailyReport.id.desc())
        .limit(params.per_page)
        .offset(params.offset)
    )
    res = await db.execute(stmt)

    rows = [
        {
            "id": r.id,
            "report_date": r.report_date,
            "sales_person": {"id": r.sales_person_id, "name": owner_name},
            "visit_count": count or 0,
            "status": r.status,
            "created_at": r.created_at,
            "updated_at": r.updated_at,
        }
        for r, owner_name, count in res.all()
    ]
    return rows, calculate_pagination(params.page, params.per_page, total)


async def get_report_detail(db: AsyncSession, report_id: int) -> Optional[DailyReport]:
    # populate_existing: children must reflect the committed state, not the identity map
    stmt = (
        select(DailyReport)
        .where(DailyReport.id == report_id)
        .options(
            selectinload(DailyReport.sales_person),
            selectinload(DailyReport.visit_records).selectinload(VisitRecord.customer),
            selectinload(DailyReport.comments).selectinload(Comment.commenter),
        )
        .execution_options(populate_existing=True)
    )
    return (await db.execute(stmt)).scalar_one_or_none()


async def view_report(db: AsyncSession, actor: Actor, report_id: int) -> DailyReport:
    report = await get_report_detail(db, report_id)
    if report is None:
        raise NotFoundError("Report not found.")
    if not await can_view_report(db, actor, report.sales_person_id):
        raise ForbiddenError("You do not have permission to view this report.")
    return report


# -------------------------------------------------------------------
# Validation helpers
# -------------------------------------------------------------------
async def _ensure_active_customers(db: AsyncSession, customer_ids: Iterable[int]) -> None:
    wanted = list(dict.fromkeys(customer_ids))
    if not wanted:
        return
    res = await db.execute(
        select(Customer.id).where(Customer.id.in_(wanted), Customer.is_active.is_(True))
    )
    found = set(res.scalars().all())
    for cid in wanted:
        if cid not in found:
            raise ValidationError(f"Customer {cid} does not exist or is inactive.")


async def _date_taken(
    db: AsyncSession, owner_id: int, report_date: date, exclude_id: Optional[int] = None
) -> bool:
    stmt = select(DailyReport.id).where(
        DailyReport.sales_person_id == owner_id,
        DailyReport.report_date == report_date,
    )
    if exclude_id is not None:
        stmt = stmt.where(DailyReport.id != exclude_id)
    return (await db.scalar(stmt.limit(1))) is not None


def _visit_row(item: VisitRecordIn, index: int) -> VisitRecord:
    return VisitRecord(
        customer_id=item.customer_id,
        visit_time=item.visit_time or None,
        content=item.content,
        sort_order=index,
    )


# -------------------------------------------------------------------
# Writes
# -------------------------------------------------------------------
async def create_report(db: AsyncSession, actor: Actor, data: ReportCreate) -> DailyReport:
    owner_id = actor.id
    if await _date_taken(db, owner_id, data.report_date):
        raise _duplicate_report()
    await _ensure_active_customers(db, (v.customer_id for v in data.visit_records))

    report = DailyReport(
        sales_person_id=owner_id,
        report_date=data.report_date,
        problem=data.problem,
        plan=data.plan,
        status=data.status,
        visit_records=[_visit_row(v, i) for i, v in enumerate(data.visit_records)],
    )
    try:
        async with unit_of_work(db):
            db.add(report)
    except IntegrityError as e:
        # a concurrent create for the same day lands here
        raise integrity_error_to_app_error(e) from e

    logger.info("Report %s created by sales person %s for %s", report.id, owner_id, data.report_date)
    return await get_report_detail(db, report.id)


async def update_report(
    db: AsyncSession, actor: Actor, report_id: int, data: ReportUpdate
) -> DailyReport:
    """
    Apply the fields that were sent. When visit_records is sent it replaces
    the whole list: rows with a known id are updated in place, known rows
    missing from the list are deleted, rows without an id are inserted, and
    every row's sort_order becomes its position in the list.
    """
    report = await db.scalar(
        select(DailyReport)
        .where(DailyReport.id == report_id)
        .options(selectinload(DailyReport.visit_records))
        .execution_options(populate_existing=True)
    )
    if report is None:
        raise NotFoundError("Report not found.")
    if not can_edit_report(actor, report.sales_person_id):
        raise ForbiddenError("You can only edit your own reports.")

    sent = data.model_fields_set

    if "report_date" in sent and data.report_date != report.report_date:
        if await _date_taken(db, report.sales_person_id, data.report_date, exclude_id=report.id):
            raise _duplicate_report()

    new_visits: Optional[list[VisitRecord]] = None
    if "visit_records" in sent:
        items = data.visit_records or []
        existing = {v.id: v for v in report.visit_records}
        submitted = [v.id for v in items if v.id is not None]
        if len(submitted) != len(set(submitted)):
            raise ValidationError("A visit record id appears more than once.")

        existing_ids = set(existing)
        submitted_ids = set(submitted)
        foreign = submitted_ids - existing_ids
        if foreign:
            raise ValidationError(f"Visit record {min(foreign)} does not belong to this report.")
        await _ensure_active_customers(db, (v.customer_id for v in items))

        to_update = existing_ids & submitted_ids
        to_delete = existing_ids - submitted_ids
        to_insert = [i for i, v in enumerate(items) if v.id is None]
        logger.debug(
            "Report %s visit diff: update=%d delete=%d insert=%d",
            report.id, len(to_update), len(to_delete), len(to_insert),
        )

        # final order is the submitted order, for updated and inserted rows alike
        new_visits = []
        for index, item in enumerate(items):
            if item.id in to_update:
                row = existing[item.id]
                row.customer_id = item.customer_id
                row.visit_time = item.visit_time or None
                row.content = item.content
                row.sort_order = index
                new_visits.append(row)
            else:
                new_visits.append(_visit_row(item, index))

    try:
        async with unit_of_work(db):
            for field in ("report_date", "problem", "plan", "status"):
                if field in sent:
                    setattr(report, field, getattr(data, field))
            if new_visits is not None:
                # rows dropped from the collection are deleted as orphans
                report.visit_records = new_visits
            report.updated_at = now_naive()
    except IntegrityError as e:
        raise integrity_error_to_app_error(e) from e

    logger.info("Report %s updated by sales person %s", report_id, actor.id)
    return await get_report_detail(db, report_id)


async def delete_report(db: AsyncSession, actor: Actor, report_id: int) -> None:
    owner_id = await db.scalar(select(DailyReport.sales_person_id).where(DailyReport.id == report_id))
    if owner_id is None:
        raise NotFoundError("Report not found.")
    if not can_edit_report(actor, owner_id):
        raise ForbiddenError("You can only delete your own reports.")

    async with unit_of_work(db):
        # visit records and comments go with it (ON DELETE CASCADE)
        await db.execute(delete(DailyReport).where(DailyReport.id == report_id))
    logger.info("Report %s deleted by sales person %s", report_id, actor.id)
