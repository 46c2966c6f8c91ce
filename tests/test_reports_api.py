from datetime import timedelta

from sqlalchemy import func, select

from src.daily_report.models import Comment, VisitRecord
from src.daily_report.utils.timezone import today_local

from tests.conftest import auth_headers, report_body

URL = "/api/v1/reports"


async def _create(client, person_id, **kwargs):
    resp = await client.post(URL, json=report_body(**kwargs), headers=auth_headers(person_id))
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


async def test_member_creates_report_with_defaults(client, people, customers):
    data = await _create(client, 1)

    assert data["status"] == "draft"
    assert data["report_date"] == "2025-01-15"
    assert data["sales_person"] == {"id": 1, "name": "Member One"}
    assert len(data["visit_records"]) == 1
    assert data["visit_records"][0]["sort_order"] == 0
    assert data["visit_records"][0]["visit_time"] is None
    assert data["comments"] == []


async def test_round_trip_keeps_visit_order(client, people, customers):
    created = await _create(
        client,
        1,
        visits=[{"customer_id": 1, "content": "A"}, {"customer_id": 2, "content": "B", "visit_time": "14:30"}],
    )
    resp = await client.get(f"{URL}/{created['id']}", headers=auth_headers(1))
    visits = resp.json()["data"]["visit_records"]

    assert [(v["content"], v["sort_order"]) for v in visits] == [("A", 0), ("B", 1)]
    assert visits[1]["customer"] == {"id": 2, "name": "Globex"}
    assert visits[1]["visit_time"] == "14:30"


async def test_second_report_same_day_conflicts(client, people, customers):
    await _create(client, 1)
    resp = await client.post(URL, json=report_body(), headers=auth_headers(1))

    assert resp.status_code == 409
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["code"] == "DUPLICATE_REPORT"


async def test_same_day_for_different_people_is_fine(client, people, customers):
    await _create(client, 1)
    await _create(client, 2)


async def test_inactive_customer_is_named(client, people, customers):
    resp = await client.post(
        URL,
        json=report_body(visits=[{"customer_id": 1, "content": "ok"}, {"customer_id": 3, "content": "x"}]),
        headers=auth_headers(1),
    )
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
    assert "3" in resp.json()["error"]["message"]


async def test_create_input_rules(client, people, customers):
    h = auth_headers(1)
    tomorrow = (today_local() + timedelta(days=1)).isoformat()

    cases = [
        report_body(report_date=tomorrow),
        report_body(report_date="2025-02-30"),
        report_body(visits=[]),
        report_body(visits=[{"customer_id": 1, "content": ""}]),
        report_body(visits=[{"customer_id": 1, "content": "x", "visit_time": "24:00"}]),
        report_body(visits=[{"customer_id": 0, "content": "x"}]),
        report_body(problem="p" * 2001),
    ]
    for body in cases:
        resp = await client.post(URL, json=body, headers=h)
        assert resp.status_code == 422, body
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_validation_reports_first_field(client, people, customers):
    resp = await client.post(
        URL,
        json=report_body(visits=[{"customer_id": 1, "content": ""}]),
        headers=auth_headers(1),
    )
    assert resp.json()["error"]["message"].startswith("visit_records.0.content:")


async def test_update_diffs_visit_records(client, people, customers):
    created = await _create(
        client,
        1,
        visits=[
            {"customer_id": 1, "content": "keep"},
            {"customer_id": 2, "content": "drop"},
        ],
    )
    keep_id, drop_id = (v["id"] for v in created["visit_records"])

    resp = await client.put(
        f"{URL}/{created['id']}",
        json={
            "visit_records": [
                {"customer_id": 2, "content": "new first"},
                {"id": keep_id, "customer_id": 1, "content": "kept, moved"},
            ]
        },
        headers=auth_headers(1),
    )
    assert resp.status_code == 200, resp.text
    visits = resp.json()["data"]["visit_records"]

    assert [v["sort_order"] for v in visits] == [0, 1]
    assert visits[0]["content"] == "new first"
    assert visits[0]["id"] not in (keep_id, drop_id)
    assert visits[1]["id"] == keep_id
    assert visits[1]["content"] == "kept, moved"
    assert drop_id not in {v["id"] for v in visits}


async def test_update_leaves_unsent_fields_alone(client, people, customers):
    created = await _create(client, 1, problem="late delivery", plan="call back")

    resp = await client.put(
        f"{URL}/{created['id']}", json={"status": "submitted"}, headers=auth_headers(1)
    )
    data = resp.json()["data"]

    assert data["status"] == "submitted"
    assert data["problem"] == "late delivery"
    assert data["plan"] == "call back"
    assert len(data["visit_records"]) == 1


async def test_update_rejects_foreign_visit_id(client, people, customers):
    mine = await _create(client, 1)
    other = await _create(client, 1, report_date="2025-01-16")
    foreign_id = other["visit_records"][0]["id"]

    resp = await client.put(
        f"{URL}/{mine['id']}",
        json={"visit_records": [{"id": foreign_id, "customer_id": 1, "content": "x"}]},
        headers=auth_headers(1),
    )
    assert resp.status_code == 422

    # nothing was applied
    again = await client.get(f"{URL}/{other['id']}", headers=auth_headers(1))
    assert again.json()["data"]["visit_records"][0]["content"] == "A"


async def test_moving_to_taken_date_conflicts(client, people, customers):
    first = await _create(client, 1)
    second = await _create(client, 1, report_date="2025-01-16")

    resp = await client.put(
        f"{URL}/{second['id']}", json={"report_date": first["report_date"]}, headers=auth_headers(1)
    )
    assert resp.status_code == 409


async def test_member_cannot_touch_others_reports(client, people, customers):
    created = await _create(client, 2)
    h = auth_headers(1)

    assert (await client.get(f"{URL}/{created['id']}", headers=h)).status_code == 403
    assert (await client.put(f"{URL}/{created['id']}", json={"plan": "x"}, headers=h)).status_code == 403
    assert (await client.delete(f"{URL}/{created['id']}", headers=h)).status_code == 403


async def test_manager_views_but_cannot_edit_subordinate(client, people, customers):
    created = await _create(client, 1)
    h = auth_headers(3)

    assert (await client.get(f"{URL}/{created['id']}", headers=h)).status_code == 200
    assert (await client.put(f"{URL}/{created['id']}", json={"plan": "x"}, headers=h)).status_code == 403
    assert (await client.delete(f"{URL}/{created['id']}", headers=h)).status_code == 403


async def test_missing_report_is_not_found(client, people):
    resp = await client.get(f"{URL}/999", headers=auth_headers(1))
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


async def test_delete_cascades_children(app, client, people, customers):
    created = await _create(client, 3)
    await client.post(
        f"{URL}/{created['id']}/comments", json={"content": "self note"}, headers=auth_headers(3)
    )

    resp = await client.delete(f"{URL}/{created['id']}", headers=auth_headers(3))
    assert resp.status_code == 200
    assert (await client.get(f"{URL}/{created['id']}", headers=auth_headers(3))).status_code == 404

    async with app.state.sessionmaker() as s:
        assert await s.scalar(select(func.count(VisitRecord.id))) == 0
        assert await s.scalar(select(func.count(Comment.id))) == 0


async def test_manager_list_scope(client, people, customers):
    for pid in (1, 2, 3, 4):
        await _create(client, pid)

    resp = await client.get(URL, headers=auth_headers(3))
    body = resp.json()

    assert {r["sales_person"]["id"] for r in body["data"]} == {1, 3}
    assert body["pagination"]["total_count"] == 2


async def test_owner_filter_outside_scope_is_empty(client, people, customers):
    await _create(client, 2)

    resp = await client.get(URL, params={"sales_person_id": 2}, headers=auth_headers(1))
    body = resp.json()

    assert resp.status_code == 200
    assert body["data"] == []
    assert body["pagination"] == {"current_page": 1, "per_page": 20, "total_pages": 0, "total_count": 0}


async def test_list_order_filters_and_counts(client, people, customers):
    await _create(client, 1, report_date="2025-01-10")
    await _create(
        client, 1, report_date="2025-01-12",
        visits=[{"customer_id": 1, "content": "a"}, {"customer_id": 2, "content": "b"}],
    )
    await _create(client, 1, report_date="2025-01-11", status="submitted")
    h = auth_headers(1)

    rows = (await client.get(URL, headers=h)).json()["data"]
    assert [r["report_date"] for r in rows] == ["2025-01-12", "2025-01-11", "2025-01-10"]
    assert rows[0]["visit_count"] == 2

    rows = (await client.get(URL, params={"status": "submitted"}, headers=h)).json()["data"]
    assert [r["report_date"] for r in rows] == ["2025-01-11"]

    rows = (
        await client.get(URL, params={"start_date": "2025-01-11", "end_date": "2025-01-12"}, headers=h)
    ).json()["data"]
    assert len(rows) == 2

    page2 = (await client.get(URL, params={"page": 2, "per_page": 2}, headers=h)).json()
    assert [r["report_date"] for r in page2["data"]] == ["2025-01-10"]
    assert page2["pagination"]["total_pages"] == 2


async def test_list_rejects_inverted_range(client, people):
    resp = await client.get(
        URL, params={"start_date": "2025-02-01", "end_date": "2025-01-01"}, headers=auth_headers(1)
    )
    assert resp.status_code == 422
    assert "start_date" in resp.json()["error"]["message"]


async def test_list_rejects_oversized_page(client, people):
    resp = await client.get(URL, params={"per_page": 101}, headers=auth_headers(1))
    assert resp.status_code == 422


async def test_requires_authentication(client):
    resp = await client.get(URL)
    assert resp.status_code == 401
    assert resp.json()["error"]["code"] == "UNAUTHORIZED"


async def test_failed_update_leaves_report_untouched(client, people, customers):
    created = await _create(
        client,
        1,
        problem="orig",
        visits=[{"customer_id": 1, "content": "A"}, {"customer_id": 2, "content": "B"}],
    )
    before = [(v["id"], v["customer"]["id"], v["content"], v["sort_order"]) for v in created["visit_records"]]

    resp = await client.put(
        f"{URL}/{created['id']}",
        json={
            "problem": "changed",
            "report_date": "2025-01-10",
            "visit_records": [{"customer_id": 3, "content": "inactive customer"}],
        },
        headers=auth_headers(1),
    )
    assert resp.status_code == 422
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
    assert "3" in resp.json()["error"]["message"]

    data = (await client.get(f"{URL}/{created['id']}", headers=auth_headers(1))).json()["data"]
    assert data["problem"] == "orig"
    assert data["report_date"] == "2025-01-15"
    assert [(v["id"], v["customer"]["id"], v["content"], v["sort_order"]) for v in data["visit_records"]] == before


async def test_resending_own_date_is_not_a_conflict(client, people, customers):
    created = await _create(client, 1)

    resp = await client.put(
        f"{URL}/{created['id']}",
        json={"report_date": created["report_date"], "plan": "same day"},
        headers=auth_headers(1),
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["report_date"] == "2025-01-15"
    assert resp.json()["data"]["plan"] == "same day"
