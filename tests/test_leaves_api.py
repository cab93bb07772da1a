from datetime import date, timedelta

import pytest
from sqlalchemy import select  # type: ignore

from leave_portal.db import AsyncSessionLocal
from leave_portal.models import BalanceHistory, BalanceChangeTypeEnum, RoleEnum


async def submit(client, headers, payload, expected=201):
    response = await client.post("/leaves", json=payload, headers=headers)
    assert response.status_code == expected, response.text
    return response.json()


# Submit

async def test_submit_creates_pending_request(client, employee, auth_headers, leave_payload):
    payload = leave_payload(replacement="Hassan", emergency_contact="7771234")
    leave = await submit(client, auth_headers(employee), payload)

    assert leave["status"] == "pending"
    assert leave["employee_id"] == employee.id
    assert leave["employee_name"] == employee.name
    assert leave["total_days"] == 3
    assert leave["priority"] == "medium"
    assert leave["approved_by"] is None and leave["approved_at"] is None
    assert leave["rejected_by"] is None and leave["rejected_at"] is None
    assert leave["comments"] == []


async def test_round_trip_returns_submitted_fields(client, employee, auth_headers, leave_payload):
    payload = leave_payload(
        leave_type="fr",
        replacement="Hassan",
        emergency_contact="7771234",
        attachment_url="https://files.example.org/a.pdf",
        priority="high",
    )
    created = await submit(client, auth_headers(employee), payload)

    response = await client.get(f"/leaves/{created['id']}", headers=auth_headers(employee))
    assert response.status_code == 200
    fetched = response.json()
    for key, value in payload.items():
        assert fetched[key] == value
    assert fetched == created


async def test_half_day_counts_half(client, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload(is_half_day=True, half_day_period="morning"))
    assert leave["total_days"] == 0.5
    assert leave["half_day_period"] == "morning"


async def test_half_day_period_ignored_for_full_days(client, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload(half_day_period="afternoon"))
    assert leave["half_day_period"] is None


async def test_half_day_requires_period(client, employee, auth_headers, leave_payload):
    body = await submit(client, auth_headers(employee), leave_payload(is_half_day=True), expected=400)
    assert body["error"] == "validation_error"


async def test_friday_is_not_counted(client, employee, auth_headers, leave_payload):
    start = date.fromisoformat(leave_payload()["from_date"])  # a Monday
    leave = await submit(client, auth_headers(employee), leave_payload(to_date=(start + timedelta(days=6)).isoformat()))
    assert leave["total_days"] == 6


@pytest.mark.parametrize("missing", ["leave_type", "from_date", "to_date", "reason"])
async def test_missing_required_field(client, employee, auth_headers, leave_payload, missing):
    payload = leave_payload()
    del payload[missing]
    body = await submit(client, auth_headers(employee), payload, expected=400)
    assert body["error"] == "validation_error"


async def test_blank_reason_rejected(client, employee, auth_headers, leave_payload):
    await submit(client, auth_headers(employee), leave_payload(reason="   "), expected=400)


async def test_from_after_to_rejected(client, employee, auth_headers, leave_payload):
    payload = leave_payload()
    payload["from_date"], payload["to_date"] = payload["to_date"], payload["from_date"]
    await submit(client, auth_headers(employee), payload, expected=400)


async def test_unknown_category_rejected(client, employee, auth_headers, leave_payload):
    body = await submit(client, auth_headers(employee), leave_payload(leave_type="vacation"), expected=400)
    assert body["error"] == "validation_error"


async def test_backdated_annual_rejected(client, employee, auth_headers, leave_payload):
    yesterday = date.today() - timedelta(days=1)
    payload = leave_payload(from_date=yesterday.isoformat(), to_date=date.today().isoformat())
    await submit(client, auth_headers(employee), payload, expected=400)


@pytest.mark.parametrize("override", [{"leave_type": "sick"}, {"priority": "urgent"}])
async def test_backdating_allowed_for_sick_or_urgent(client, employee, auth_headers, leave_payload, override):
    start = date.today() - timedelta(days=3)
    payload = leave_payload(from_date=start.isoformat(), to_date=date.today().isoformat(), **override)
    leave = await submit(client, auth_headers(employee), payload)
    assert leave["status"] == "pending"


async def test_submit_without_token_is_unauthorized(client, leave_payload):
    response = await client.post("/leaves", json=leave_payload())
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"
    assert response.json()["error"] == "unauthorized"


async def test_submit_with_garbage_token_is_unauthorized(client, leave_payload):
    response = await client.post("/leaves", json=leave_payload(), headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


async def test_employee_cannot_submit_for_someone_else(client, employee, other_employee, auth_headers, leave_payload):
    body = await submit(client, auth_headers(employee), leave_payload(employee_id=other_employee.id), expected=403)
    assert body["error"] == "forbidden"


async def test_admin_submits_on_behalf(client, admin, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(admin), leave_payload(employee_id=employee.id))
    assert leave["employee_id"] == employee.id
    assert leave["employee_name"] == employee.name


async def test_employee_cannot_rename_own_request(client, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload(employee_name="Someone Else"))
    assert leave["employee_name"] == employee.name


async def test_admin_may_set_name_on_behalf(client, admin, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(admin), leave_payload(employee_id=employee.id, employee_name="I. Employee"))
    assert leave["employee_name"] == "I. Employee"


async def test_admin_submit_for_unknown_employee(client, admin, auth_headers, leave_payload):
    await submit(client, auth_headers(admin), leave_payload(employee_id=9999), expected=404)


# Approve / reject

async def test_approve_sets_metadata_and_deducts(client, admin, employee, auth_headers, leave_payload, fetch_employee):
    leave = await submit(client, auth_headers(employee), leave_payload())

    response = await client.post(
        f"/leaves/{leave['id']}/approve", json={"comment": "Enjoy"}, headers=auth_headers(admin)
    )
    assert response.status_code == 200, response.text
    approved = response.json()
    assert approved["status"] == "approved"
    assert approved["approved_by"] == admin.id
    assert approved["approved_at"] is not None
    assert approved["rejected_by"] is None
    assert [(c["role"], c["text"]) for c in approved["comments"]] == [("admin", "Enjoy")]

    refreshed = await fetch_employee(employee.id)
    assert refreshed.annual_leave_taken == 3
    assert refreshed.annual_leave_balance == 30

    async with AsyncSessionLocal() as session:
        history = (await session.execute(
            select(BalanceHistory).where(BalanceHistory.related_leave_id == leave["id"])
        )).scalars().all()
    assert len(history) == 1
    assert history[0].change_type == BalanceChangeTypeEnum.DEDUCTION
    assert history[0].change_amount == 3


async def test_approving_untracked_category_leaves_counters_alone(client, admin, employee, auth_headers, leave_payload, fetch_employee):
    leave = await submit(client, auth_headers(employee), leave_payload(leave_type="nopay"))
    response = await client.post(f"/leaves/{leave['id']}/approve", headers=auth_headers(admin))
    assert response.status_code == 200
    refreshed = await fetch_employee(employee.id)
    assert refreshed.annual_leave_taken == 0
    assert refreshed.fr_leave_taken == 0
    assert refreshed.sick_leave_taken == 0


async def test_employee_cannot_approve_or_reject(client, employee, other_employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(other_employee), leave_payload())
    for action in ("approve", "reject"):
        response = await client.post(f"/leaves/{leave['id']}/{action}", headers=auth_headers(employee))
        assert response.status_code == 403


async def test_employee_cannot_approve_own_request(client, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload())
    response = await client.post(f"/leaves/{leave['id']}/approve", headers=auth_headers(employee))
    assert response.status_code == 403


async def test_reject_adds_default_comment(client, admin, employee, auth_headers, leave_payload, fetch_employee):
    leave = await submit(client, auth_headers(employee), leave_payload())
    response = await client.post(f"/leaves/{leave['id']}/reject", headers=auth_headers(admin))
    assert response.status_code == 200
    rejected = response.json()
    assert rejected["status"] == "rejected"
    assert rejected["rejected_by"] == admin.id
    assert rejected["rejected_at"] is not None
    assert rejected["approved_by"] is None
    assert rejected["comments"][-1]["text"] == "Leave request rejected"
    assert (await fetch_employee(employee.id)).annual_leave_taken == 0


@pytest.mark.parametrize("first", ["approve", "reject"])
@pytest.mark.parametrize("second", ["approve", "reject"])
async def test_decisions_on_processed_request_conflict(client, admin, create_employee, employee, auth_headers, leave_payload, first, second):
    md = await create_employee(RoleEnum.MD)
    leave = await submit(client, auth_headers(employee), leave_payload())
    assert (await client.post(f"/leaves/{leave['id']}/{first}", headers=auth_headers(admin))).status_code == 200

    response = await client.post(f"/leaves/{leave['id']}/{second}", headers=auth_headers(md))
    assert response.status_code == 409
    assert response.json()["error"] == "conflict"


async def test_second_approval_does_not_count_twice(client, admin, employee, auth_headers, leave_payload, fetch_employee):
    leave = await submit(client, auth_headers(employee), leave_payload())
    await client.post(f"/leaves/{leave['id']}/approve", headers=auth_headers(admin))
    assert (await client.post(f"/leaves/{leave['id']}/approve", headers=auth_headers(admin))).status_code == 409
    assert (await fetch_employee(employee.id)).annual_leave_taken == 3


async def test_rejected_request_stays_rejected(client, admin, employee, auth_headers, leave_payload, fetch_employee):
    leave = await submit(client, auth_headers(employee), leave_payload())
    await client.post(f"/leaves/{leave['id']}/reject", headers=auth_headers(admin))
    assert (await client.post(f"/leaves/{leave['id']}/approve", headers=auth_headers(admin))).status_code == 409

    fetched = (await client.get(f"/leaves/{leave['id']}", headers=auth_headers(admin))).json()
    assert fetched["status"] == "rejected"
    assert fetched["approved_by"] is None and fetched["approved_at"] is None
    assert fetched["rejected_by"] == admin.id
    assert (await fetch_employee(employee.id)).annual_leave_taken == 0


async def test_decision_on_cancelled_request_conflicts(client, admin, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload())
    await client.post(f"/leaves/{leave['id']}/cancel", headers=auth_headers(employee))
    response = await client.post(f"/leaves/{leave['id']}/approve", headers=auth_headers(admin))
    assert response.status_code == 409


async def test_approve_missing_request(client, admin, auth_headers):
    response = await client.post("/leaves/4242/approve", headers=auth_headers(admin))
    assert response.status_code == 404


# Cancel

async def test_owner_cancels_pending(client, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload())
    response = await client.post(
        f"/leaves/{leave['id']}/cancel", json={"comment": "Plans changed"}, headers=auth_headers(employee)
    )
    assert response.status_code == 200
    cancelled = response.json()
    assert cancelled["status"] == "cancelled"
    assert cancelled["comments"][-1]["role"] == "employee"
    assert cancelled["comments"][-1]["text"] == "Plans changed"


async def test_cancel_without_reason_uses_default_comment(client, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload())
    response = await client.post(f"/leaves/{leave['id']}/cancel", headers=auth_headers(employee))
    assert response.json()["comments"][-1]["text"] == "Leave request cancelled"


async def test_non_owner_cannot_cancel(client, admin, employee, other_employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload())
    for caller in (other_employee, admin):
        response = await client.post(f"/leaves/{leave['id']}/cancel", headers=auth_headers(caller))
        assert response.status_code == 403


async def test_cancel_rejected_conflicts(client, admin, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload())
    await client.post(f"/leaves/{leave['id']}/reject", headers=auth_headers(admin))
    response = await client.post(f"/leaves/{leave['id']}/cancel", headers=auth_headers(employee))
    assert response.status_code == 409


async def test_cancel_future_approved_refunds(client, admin, employee, auth_headers, leave_payload, fetch_employee):
    leave = await submit(client, auth_headers(employee), leave_payload())
    await client.post(f"/leaves/{leave['id']}/approve", headers=auth_headers(admin))
    assert (await fetch_employee(employee.id)).annual_leave_taken == 3

    response = await client.post(f"/leaves/{leave['id']}/cancel", headers=auth_headers(employee))
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"
    assert (await fetch_employee(employee.id)).annual_leave_taken == 0


async def test_cancel_started_approved_conflicts(client, admin, employee, auth_headers, leave_payload, fetch_employee):
    start = date.today() - timedelta(days=2)
    leave = await submit(client, auth_headers(employee), leave_payload(
        leave_type="sick", from_date=start.isoformat(), to_date=(date.today() + timedelta(days=2)).isoformat(),
    ))
    await client.post(f"/leaves/{leave['id']}/approve", headers=auth_headers(admin))
    taken = (await fetch_employee(employee.id)).sick_leave_taken

    response = await client.post(f"/leaves/{leave['id']}/cancel", headers=auth_headers(employee))
    assert response.status_code == 409
    assert (await fetch_employee(employee.id)).sick_leave_taken == taken


async def test_submit_approve_cancel_scenario(client, admin, employee, auth_headers):
    leave = await submit(client, auth_headers(employee), {
        "leave_type": "annual",
        "from_date": "2025-06-01",
        "to_date": "2025-06-03",
        "reason": "trip",
        "priority": "urgent",
    })
    assert leave["status"] == "pending"
    assert leave["employee_id"] == employee.id
    assert leave["total_days"] == 3

    approved = (await client.post(f"/leaves/{leave['id']}/approve", headers=auth_headers(admin))).json()
    assert approved["status"] == "approved"
    assert approved["approved_by"] == admin.id
    assert approved["approved_at"] is not None

    response = await client.post(f"/leaves/{leave['id']}/cancel", headers=auth_headers(employee))
    assert response.status_code == 409


# Update

async def test_owner_updates_pending_and_days_are_recomputed(client, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload())
    start = date.fromisoformat(leave["from_date"])
    response = await client.patch(
        f"/leaves/{leave['id']}",
        json={"to_date": (start + timedelta(days=1)).isoformat(), "reason": "Shorter trip", "replacement": "Ali"},
        headers=auth_headers(employee),
    )
    assert response.status_code == 200, response.text
    updated = response.json()
    assert updated["total_days"] == 2
    assert updated["reason"] == "Shorter trip"
    assert updated["replacement"] == "Ali"
    assert updated["leave_type"] == "annual"
    assert updated["from_date"] == leave["from_date"]


async def test_update_to_half_day(client, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload())
    response = await client.patch(
        f"/leaves/{leave['id']}",
        json={"is_half_day": True, "half_day_period": "afternoon"},
        headers=auth_headers(employee),
    )
    assert response.json()["total_days"] == 0.5


async def test_invalid_update_changes_nothing(client, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload())
    start = date.fromisoformat(leave["from_date"])
    response = await client.patch(
        f"/leaves/{leave['id']}",
        json={"reason": "Changed", "to_date": (start - timedelta(days=1)).isoformat()},
        headers=auth_headers(employee),
    )
    assert response.status_code == 400

    fetched = (await client.get(f"/leaves/{leave['id']}", headers=auth_headers(employee))).json()
    assert fetched["reason"] == leave["reason"]
    assert fetched["to_date"] == leave["to_date"]


async def test_update_into_past_rejected(client, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload())
    response = await client.patch(
        f"/leaves/{leave['id']}",
        json={"from_date": (date.today() - timedelta(days=1)).isoformat()},
        headers=auth_headers(employee),
    )
    assert response.status_code == 400


async def test_switching_backdated_sick_leave_to_annual_rejected(client, employee, auth_headers, leave_payload):
    today = date.today()
    leave = await submit(client, auth_headers(employee), leave_payload(
        leave_type="sick",
        from_date=(today - timedelta(days=5)).isoformat(),
        to_date=today.isoformat(),
        reason="Flu",
    ))
    response = await client.patch(f"/leaves/{leave['id']}", json={"leave_type": "annual"}, headers=auth_headers(employee))
    assert response.status_code == 400

    fetched = (await client.get(f"/leaves/{leave['id']}", headers=auth_headers(employee))).json()
    assert fetched["leave_type"] == "sick"


async def test_update_clears_optional_contacts(client, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload(replacement="Hassan", emergency_contact="7771234"))
    response = await client.patch(
        f"/leaves/{leave['id']}",
        json={"replacement": None, "emergency_contact": None, "reason": None},
        headers=auth_headers(employee),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["replacement"] is None
    assert body["emergency_contact"] is None
    assert body["reason"] == "Family trip"


async def test_non_owner_cannot_update(client, admin, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload())
    response = await client.patch(f"/leaves/{leave['id']}", json={"reason": "x"}, headers=auth_headers(admin))
    assert response.status_code == 403


async def test_update_processed_request_conflicts(client, admin, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload())
    await client.post(f"/leaves/{leave['id']}/approve", headers=auth_headers(admin))
    response = await client.patch(f"/leaves/{leave['id']}", json={"reason": "x"}, headers=auth_headers(employee))
    assert response.status_code == 409


# Delete

async def test_owner_deletes_pending(client, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload())
    await client.post(f"/leaves/{leave['id']}/comments", json={"text": "note"}, headers=auth_headers(employee))

    response = await client.delete(f"/leaves/{leave['id']}", headers=auth_headers(employee))
    assert response.status_code == 200
    assert (await client.get(f"/leaves/{leave['id']}", headers=auth_headers(employee))).status_code == 404


async def test_owner_cannot_delete_processed(client, admin, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload())
    await client.post(f"/leaves/{leave['id']}/approve", headers=auth_headers(admin))
    response = await client.delete(f"/leaves/{leave['id']}", headers=auth_headers(employee))
    assert response.status_code == 409


async def test_other_employee_cannot_delete(client, employee, other_employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload())
    response = await client.delete(f"/leaves/{leave['id']}", headers=auth_headers(other_employee))
    assert response.status_code == 403


async def test_admin_deletes_approved_and_refunds(client, admin, employee, auth_headers, leave_payload, fetch_employee):
    leave = await submit(client, auth_headers(employee), leave_payload(leave_type="fr"))
    await client.post(f"/leaves/{leave['id']}/approve", headers=auth_headers(admin))
    assert (await fetch_employee(employee.id)).fr_leave_taken == 3

    response = await client.delete(f"/leaves/{leave['id']}", headers=auth_headers(admin))
    assert response.status_code == 200
    assert (await fetch_employee(employee.id)).fr_leave_taken == 0


async def test_delete_missing_request(client, employee, auth_headers):
    response = await client.delete("/leaves/777", headers=auth_headers(employee))
    assert response.status_code == 404


# Comments, get, list, stats

async def test_comment_appends_with_role(client, admin, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload())
    await client.post(f"/leaves/{leave['id']}/comments", json={"text": "Please confirm"}, headers=auth_headers(admin))
    response = await client.post(f"/leaves/{leave['id']}/comments", json={"text": "Confirmed"}, headers=auth_headers(employee))
    assert response.status_code == 201
    comments = response.json()["comments"]
    assert [(c["role"], c["text"], c["author_id"]) for c in comments] == [
        ("admin", "Please confirm", admin.id),
        ("employee", "Confirmed", employee.id),
    ]
    assert all(c["created_at"] for c in comments)


async def test_comment_allowed_on_terminal_request(client, admin, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload())
    await client.post(f"/leaves/{leave['id']}/reject", headers=auth_headers(admin))
    response = await client.post(f"/leaves/{leave['id']}/comments", json={"text": "Why?"}, headers=auth_headers(employee))
    assert response.status_code == 201


async def test_blank_comment_rejected(client, employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload())
    response = await client.post(f"/leaves/{leave['id']}/comments", json={"text": "  "}, headers=auth_headers(employee))
    assert response.status_code == 400


async def test_comment_on_hidden_request_not_found(client, admin, employee, other_employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload())
    response = await client.post(f"/leaves/{leave['id']}/comments", json={"text": "Nosy"}, headers=auth_headers(other_employee))
    assert response.status_code == 404
    assert "comments" not in response.json()

    fetched = (await client.get(f"/leaves/{leave['id']}", headers=auth_headers(employee))).json()
    assert fetched["comments"] == []

    response = await client.post(f"/leaves/{leave['id']}/comments", json={"text": "Noted"}, headers=auth_headers(admin))
    assert response.status_code == 201


async def test_employee_cannot_see_others_request(client, admin, employee, other_employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(other_employee), leave_payload())
    assert (await client.get(f"/leaves/{leave['id']}", headers=auth_headers(employee))).status_code == 404
    assert (await client.get(f"/leaves/{leave['id']}", headers=auth_headers(admin))).status_code == 200


async def test_invalid_id_is_validation_error(client, employee, auth_headers):
    response = await client.get("/leaves/abc", headers=auth_headers(employee))
    assert response.status_code == 400


async def test_list_is_scoped_and_filtered(client, admin, employee, other_employee, auth_headers, leave_payload):
    mine = await submit(client, auth_headers(employee), leave_payload())
    await submit(client, auth_headers(employee), leave_payload(leave_type="sick"))
    await submit(client, auth_headers(other_employee), leave_payload())

    own = (await client.get("/leaves", headers=auth_headers(employee))).json()
    assert own["total"] == 2
    assert {l["employee_id"] for l in own["leaves"]} == {employee.id}

    everything = (await client.get("/leaves", headers=auth_headers(admin))).json()
    assert everything["total"] == 3

    annual = (await client.get("/leaves", params={"type": "annual-leave"}, headers=auth_headers(employee))).json()
    assert [l["id"] for l in annual["leaves"]] == [mine["id"]]

    pending = (await client.get("/leaves", params={"status": "approved"}, headers=auth_headers(admin))).json()
    assert pending["total"] == 0


async def test_list_is_newest_first(client, employee, auth_headers, leave_payload):
    first = await submit(client, auth_headers(employee), leave_payload())
    second = await submit(client, auth_headers(employee), leave_payload(leave_type="fr"))
    leaves = (await client.get("/leaves", headers=auth_headers(employee))).json()["leaves"]
    assert [l["id"] for l in leaves] == [second["id"], first["id"]]


async def test_leave_stats(client, admin, employee, other_employee, auth_headers, leave_payload):
    leave = await submit(client, auth_headers(employee), leave_payload())
    await submit(client, auth_headers(employee), leave_payload(leave_type="fr"))
    await client.post(f"/leaves/{leave['id']}/approve", headers=auth_headers(admin))
    year = date.fromisoformat(leave["from_date"]).year

    response = await client.get(f"/leaves/stats/{employee.id}", params={"year": year}, headers=auth_headers(employee))
    assert response.status_code == 200
    assert response.json() == [{"leave_type": "annual", "total_days": 3.0, "count": 1}]

    hidden = await client.get(f"/leaves/stats/{employee.id}", headers=auth_headers(other_employee))
    assert hidden.status_code == 404
