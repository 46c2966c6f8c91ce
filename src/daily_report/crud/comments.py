# src/daily_report/crud/comments.py
from __future__ import annotations

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.daily_report.models import Comment, DailyReport
from src.daily_report.schemas.comment import COMMENT_MAX
from src.daily_report.utils.database import unit_of_work
from src.daily_report.utils.errors import ForbiddenError, NotFoundError, ValidationError
from src.daily_report.utils.permissions import (
    Actor,
    can_modify_comment,
    can_post_comment,
    can_view_report,
)

logger = logging.getLogger(__name__)


def _clean_content(content: str) -> str:
    text = (content or "").strip()
    if not 1 <= len(text) <= COMMENT_MAX:
        raise ValidationError(f"content must be between 1 and {COMMENT_MAX} characters")
    return text


async def _viewable_report_owner(db: AsyncSession, actor: Actor, report_id: int) -> int:
    owner_id = await db.scalar(select(DailyReport.sales_person_id).where(DailyReport.id == report_id))
    if owner_id is None:
        raise NotFoundError("Report not found.")
    if not await can_view_report(db, actor, owner_id):
        raise ForbiddenError("You do not have permission to view this report.")
    return owner_id


async def _load_comment(db: AsyncSession, comment_id: int) -> Comment | None:
    stmt = (
        select(Comment)
        .where(Comment.id == comment_id)
        .options(selectinload(Comment.commenter))
        .execution_options(populate_existing=True)
    )
    return (await db.execute(stmt)).scalar_one_or_none()


async def list_comments(db: AsyncSession, actor: Actor, report_id: int) -> List[Comment]:
    await _viewable_report_owner(db, actor, report_id)
    res = await db.execute(
        select(Comment)
        .where(Comment.daily_report_id == report_id)
        .options(selectinload(Comment.commenter))
        .order_by(Comment.created_at.asc(), Comment.id.asc())
    )
    return list(res.scalars().all())


async def create_comment(db: AsyncSession, actor: Actor, report_id: int, content: str) -> Comment:
    await _viewable_report_owner(db, actor, report_id)
    if not can_post_comment(actor):
        raise ForbiddenError("Only managers and administrators can comment on reports.")
    text = _clean_content(content)

    row = Comment(daily_report_id=report_id, commenter_id=actor.id, content=text)
    async with unit_of_work(db):
        db.add(row)

    logger.info("Comment %s added to report %s by sales person %s", row.id, report_id, actor.id)
    return await _load_comment(db, row.id)


async def update_comment(db: AsyncSession, actor: Actor, comment_id: int, content: str) -> Comment:
    row = await db.get(Comment, comment_id)
    if row is None:
        raise NotFoundError("Comment not found.")
    if not can_modify_comment(actor, row.commenter_id):
        raise ForbiddenError("You can only edit your own comments.")
    text = _clean_content(content)

    async with unit_of_work(db):
        row.content = text
    return await _load_comment(db, comment_id)


async def delete_comment(db: AsyncSession, actor: Actor, comment_id: int) -> None:
    row = await db.get(Comment, comment_id)
    if row is None:
        raise NotFoundError("Comment not found.")
    # role does not matter: an admin cannot delete a manager's comment
    if not can_modify_comment(actor, row.commenter_id):
        raise ForbiddenError("You can only delete your own comments.")

    async with unit_of_work(db):
        await db.delete(row)
    logger.info("Comment %s deleted by sales person %s", comment_id, actor.id)
