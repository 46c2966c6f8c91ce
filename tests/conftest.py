# tests/conftest.py
import pytest
from httpx import ASGITransport, AsyncClient

from src.daily_report.app import create_app
from src.daily_report.config import Settings
from src.daily_report.models import Customer, Role, SalesPerson
from src.daily_report.utils.database import create_tables
from src.daily_report.utils.security import create_access_token, hash_password

PASSWORD = "password123"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        AUTO_CREATE_TABLES=False,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
async def app(settings):
    app = create_app(settings)
    # ASGITransport does not run the lifespan, so tables are created here
    await create_tables(app.state.engine)
    yield app
    await app.state.engine.dispose()


@pytest.fixture
async def db(app):
    async with app.state.sessionmaker() as session:
        yield session


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


@pytest.fixture
async def people(db):
    """
    1 member (reports to 3), 2 member (reports to 5), 3 manager, 4 admin, 5 manager.
    Inserted one by one so ids are stable.
    """
    pw = hash_password(PASSWORD)
    specs = [
        ("E001", "Member One", "member1@example.com", Role.member),
        ("E002", "Member Two", "member2@example.com", Role.member),
        ("E003", "Manager Three", "manager3@example.com", Role.manager),
        ("E004", "Admin Four", "admin4@example.com", Role.admin),
        ("E005", "Manager Five", "manager5@example.com", Role.manager),
    ]
    rows = {}
    for code, name, email, role in specs:
        row = SalesPerson(employee_code=code, name=name, email=email, password_hash=pw, role=role)
        db.add(row)
        await db.flush()
        rows[row.id] = row
    rows[1].manager_id = 3
    rows[2].manager_id = 5
    await db.commit()
    return rows


@pytest.fixture
async def customers(db):
    specs = [("C001", "Acme", True), ("C002", "Globex", True), ("C003", "Closed Corp", False)]
    rows = {}
    for code, name, active in specs:
        row = Customer(customer_code=code, name=name, is_active=active)
        db.add(row)
        await db.flush()
        rows[row.id] = row
    await db.commit()
    return rows


def auth_headers(person_id: int) -> dict:
    token, _ = create_access_token({"sub": str(person_id)})
    return {"Authorization": f"Bearer {token}"}


def report_body(report_date="2025-01-15", visits=None, **extra) -> dict:
    body = {
        "report_date": report_date,
        "visit_records": visits if visits is not None else [{"customer_id": 1, "content": "A"}],
    }
    body.update(extra)
    return body
