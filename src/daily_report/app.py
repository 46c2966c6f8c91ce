# src/daily_report/app.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.daily_report.config import Settings, get_settings
from src.daily_report.middleware.security_headers import security_headers_middleware
from src.daily_report.utils.database import build_engine, build_sessionmaker, create_tables
from src.daily_report.utils.error_handler import custom_exception_handler
from src.daily_report.utils.errors import AppError

from src.daily_report.routes.auth_api import auth_api
from src.daily_report.routes.reports_api import router as reports_router
from src.daily_report.routes.comments_api import router as comments_router
from src.daily_report.routes.customers_api import router as customers_router
from src.daily_report.routes.sales_persons_api import router as sales_persons_router

API_PREFIX = "/api/v1"

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    # ----------------------------------------------------------
    # DATABASE (owned by the app, one engine per process)
    # ----------------------------------------------------------
    engine = build_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.AUTO_CREATE_TABLES:
            await create_tables(engine)
        yield
        await engine.dispose()
        logger.info("Database engine disposed")

    app = FastAPI(title="daily-report", version="1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessionmaker = build_sessionmaker(engine)

    # ----------------------------------------------------------
    # SECURITY HEADERS
    # ----------------------------------------------------------
    app.middleware("http")(security_headers_middleware)

    # ----------------------------------------------------------
    # CUSTOM ERROR HANDLERS
    # ----------------------------------------------------------
    # 1) Domain errors raised by the services
    app.add_exception_handler(AppError, custom_exception_handler)

    # 2) Starlette/FastAPI HTTPException (routing 404 etc.)
    app.add_exception_handler(StarletteHTTPException, custom_exception_handler)

    # 3) Validation errors
    app.add_exception_handler(RequestValidationError, custom_exception_handler)

    # 4) Catch-all
    app.add_exception_handler(Exception, custom_exception_handler)

    # ----------------------------------------------------------
    # ROUTERS
    # ----------------------------------------------------------
    app.include_router(auth_api, prefix=f"{API_PREFIX}/auth")
    app.include_router(reports_router, prefix=API_PREFIX)
    app.include_router(comments_router, prefix=API_PREFIX)
    app.include_router(customers_router, prefix=API_PREFIX)
    app.include_router(sales_persons_router, prefix=API_PREFIX)

    return app

