# src/daily_report/utils/response.py
from typing import Any


def ok(data: Any = None) -> dict:
    return {"success": True, "data": data}


def paginated(data: list, pagination: dict) -> dict:
    return {"success": True, "data": data, "pagination": pagination}
