from tests.conftest import PASSWORD, auth_headers

URL = "/api/v1/sales-persons"


def _body(**extra):
    body = {
        "employee_code": "E100",
        "name": "New Hire",
        "email": "New.Hire@Example.com",
        "password": "longenough",
    }
    body.update(extra)
    return body


async def test_admin_creates_sales_person(client, people):
    resp = await client.post(URL, json=_body(manager_id=3), headers=auth_headers(4))
    assert resp.status_code == 201, resp.text
    data = resp.json()["data"]

    assert data["role"] == "member"
    assert data["email"] == "new.hire@example.com"
    assert data["manager"] == {"id": 3, "name": "Manager Three"}
    assert "password" not in data and "password_hash" not in data

    # the new account can log in
    login = await client.post(
        "/api/v1/auth/login", json={"email": "new.hire@example.com", "password": "longenough"}
    )
    assert login.status_code == 200


async def test_duplicates(client, people):
    h = auth_headers(4)
    resp = await client.post(URL, json=_body(employee_code="E001"), headers=h)
    assert resp.json()["error"]["code"] == "DUPLICATE_EMPLOYEE_CODE"

    resp = await client.post(URL, json=_body(email="member1@example.com"), headers=h)
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "DUPLICATE_EMAIL"


async def test_password_and_manager_rules(client, people):
    h = auth_headers(4)
    assert (await client.post(URL, json=_body(password="short"), headers=h)).status_code == 422
    assert (await client.post(URL, json=_body(manager_id=99), headers=h)).status_code == 422

    resp = await client.put(f"{URL}/1", json={"manager_id": 1}, headers=h)
    assert resp.status_code == 422


async def test_blank_password_on_update_keeps_current(client, people):
    resp = await client.put(f"{URL}/1", json={"name": "Renamed", "password": ""}, headers=auth_headers(4))
    assert resp.status_code == 200
    assert resp.json()["data"]["name"] == "Renamed"

    login = await client.post("/api/v1/auth/login", json={"email": "member1@example.com", "password": PASSWORD})
    assert login.status_code == 200


async def test_update_email_conflict(client, people):
    resp = await client.put(f"{URL}/1", json={"email": "member2@example.com"}, headers=auth_headers(4))
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "DUPLICATE_EMAIL"


async def test_list_filters(client, people):
    h = auth_headers(1)

    body = (await client.get(URL, headers=h)).json()
    assert [p["name"] for p in body["data"]] == [
        "Admin Four", "Manager Five", "Manager Three", "Member One", "Member Two",
    ]

    managers = (await client.get(URL, params={"role": "manager"}, headers=h)).json()["data"]
    assert {p["id"] for p in managers} == {3, 5}

    found = (await client.get(URL, params={"keyword": "member"}, headers=h)).json()["data"]
    assert {p["id"] for p in found} == {1, 2}


async def test_deactivated_person_is_locked_out(client, people):
    resp = await client.delete(f"{URL}/2", headers=auth_headers(4))
    assert resp.status_code == 200
    assert resp.json()["data"]["is_active"] is False

    assert (await client.get("/api/v1/auth/me", headers=auth_headers(2))).status_code == 401
    login = await client.post("/api/v1/auth/login", json={"email": "member2@example.com", "password": PASSWORD})
    assert login.json()["error"]["code"] == "ACCOUNT_DISABLED"


async def test_non_admin_cannot_write(client, people):
    resp = await client.post(URL, json=_body(), headers=auth_headers(3))
    assert resp.status_code == 403
