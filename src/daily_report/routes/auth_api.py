# src/daily_report/routes/auth_api.py
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from src.daily_report.crud.sales_persons import load_sales_person
from src.daily_report.models import SalesPerson
from src.daily_report.schemas.auth import LoginIn, LoginOut, LoginUserOut, MeOut
from src.daily_report.utils.auth import (
    app_settings,
    authenticate_user,
    clear_access_cookie,
    get_current_user,
    issue_access_token,
    set_access_cookie,
)
from src.daily_report.utils.database import get_db
from src.daily_report.utils.response import ok

auth_api = APIRouter(tags=["Auth"])


@auth_api.post("/login")
async def login(
    payload: LoginIn,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    user = await authenticate_user(db, payload.email, payload.password)
    settings = app_settings(request)
    token, expires_at = issue_access_token(user, settings)
    set_access_cookie(response, token, settings)
    out = LoginOut(token=token, expires_at=expires_at, user=LoginUserOut.model_validate(user))
    return ok(out.model_dump(mode="json"))


@auth_api.post("/logout")
async def logout(response: Response, current_user: SalesPerson = Depends(get_current_user)):
    # tokens are stateless; dropping the cookie is all the server can do
    clear_access_cookie(response)
    return ok({"message": "Logged out."})


@auth_api.get("/me")
async def me(
    current_user: SalesPerson = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await load_sales_person(db, current_user.id)
    return ok(MeOut.model_validate(user).model_dump(mode="json"))
