# src/daily_report/schemas/comment.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from src.daily_report.schemas.common import PersonRef

COMMENT_MAX = 1000


class CommentIn(BaseModel):
    # trimmed and length-checked by the comment service, after permission checks
    content: str


class CommentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    commenter: PersonRef
    content: str
    created_at: datetime
    updated_at: datetime
