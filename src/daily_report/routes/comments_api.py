# src/daily_report/routes/comments_api.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.daily_report.crud import comments as crud
from src.daily_report.models import SalesPerson
from src.daily_report.schemas.comment import CommentIn, CommentOut
from src.daily_report.utils.auth import get_current_user
from src.daily_report.utils.database import get_db
from src.daily_report.utils.response import ok

router = APIRouter(tags=["Comments"])


def _out(row) -> dict:
    return CommentOut.model_validate(row).model_dump(mode="json")


@router.get("/reports/{report_id}/comments")
async def api_list_comments(
    report_id: int,
    current_user: SalesPerson = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rows = await crud.list_comments(db, current_user, report_id)
    return ok([_out(r) for r in rows])


@router.post("/reports/{report_id}/comments", status_code=201)
async def api_create_comment(
    report_id: int,
    payload: CommentIn,
    current_user: SalesPerson = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    row = await crud.create_comment(db, current_user, report_id, payload.content)
    return ok(_out(row))


@router.put("/comments/{comment_id}")
async def api_update_comment(
    comment_id: int,
    payload: CommentIn,
    current_user: SalesPerson = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    row = await crud.update_comment(db, current_user, comment_id, payload.content)
    return ok(_out(row))


@router.delete("/comments/{comment_id}")
async def api_delete_comment(
    comment_id: int,
    current_user: SalesPerson = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await crud.delete_comment(db, current_user, comment_id)
    return ok({"message": "Comment deleted."})
