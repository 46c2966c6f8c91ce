from sqlalchemy.exc import IntegrityError

from src.daily_report.crud.reports import integrity_error_to_app_error
from src.daily_report.utils.errors import ConflictError, ErrorCode, InternalError


def _integrity(message: str) -> IntegrityError:
    return IntegrityError("INSERT INTO daily_reports ...", {}, Exception(message))


def test_owner_date_clash_is_duplicate_report():
    err = integrity_error_to_app_error(
        _integrity("UNIQUE constraint failed: daily_reports.sales_person_id, daily_reports.report_date")
    )
    assert isinstance(err, ConflictError)
    assert err.code == ErrorCode.DUPLICATE_REPORT


def test_named_constraint_is_duplicate_report():
    err = integrity_error_to_app_error(
        _integrity('duplicate key value violates unique constraint "uq_daily_reports_owner_date"')
    )
    assert err.code == ErrorCode.DUPLICATE_REPORT


def test_foreign_key_failure_is_internal():
    err = integrity_error_to_app_error(_integrity("FOREIGN KEY constraint failed"))
    assert isinstance(err, InternalError)
    assert err.status_code == 500
