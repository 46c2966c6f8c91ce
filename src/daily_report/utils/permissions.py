# src/daily_report/utils/permissions.py
"""
Authorization decisions for reports and comments.

Every predicate answers yes/no and never raises; the caller turns a "no"
into ForbiddenError. Only ``can_view_report`` touches storage, and only when
a manager looks at somebody else's report.

    role     view                   edit/delete   post comment
    member   own                    own           never
    manager  own + subordinates     own           on reports it can view
    admin    all                    own           on any report
"""
from __future__ import annotations

from typing import Optional, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.daily_report.models import Role, SalesPerson


class Actor(Protocol):
    id: int
    role: Role


async def is_subordinate(db: AsyncSession, manager_id: int, target_id: int) -> bool:
    # nobody is their own subordinate
    if manager_id == target_id:
        return False
    owner_manager_id = await db.scalar(
        select(SalesPerson.manager_id).where(SalesPerson.id == target_id)
    )
    return owner_manager_id is not None and owner_manager_id == manager_id


async def can_view_report(db: AsyncSession, actor: Actor, report_owner_id: int) -> bool:
    if actor.id == report_owner_id:
        return True
    if actor.role == Role.admin:
        return True
    if actor.role == Role.manager:
        return await is_subordinate(db, actor.id, report_owner_id)
    # member: own reports only
    return False


def can_edit_report(actor: Actor, report_owner_id: int) -> bool:
    # stricter than view: managers and admins never edit someone else's report
    return actor.id == report_owner_id


def can_post_comment(actor: Actor) -> bool:
    return actor.role in (Role.manager, Role.admin)


def can_modify_comment(actor: Actor, commenter_id: int) -> bool:
    return actor.id == commenter_id


def can_manage_master(actor: Actor) -> bool:
    return actor.role == Role.admin


async def viewable_owner_ids(db: AsyncSession, actor: Actor) -> Optional[list[int]]:
    """
    Owners whose reports the actor may list.
    None means unrestricted (admin).
    """
    if actor.role == Role.admin:
        return None
    if actor.role == Role.manager:
        res = await db.execute(
            select(SalesPerson.id).where(SalesPerson.manager_id == actor.id).order_by(SalesPerson.id)
        )
        return [actor.id, *res.scalars().all()]
    return [actor.id]
