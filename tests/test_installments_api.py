import uuid
from decimal import Decimal

from tests.conftest import ADMIN_HEADERS, client_headers


PLAN = {
    "totalAmount": "1000.00",
    "schedule": [
        {"amountDue": "300.00", "dueDate": "2024-01-01", "description": "Deposit"},
        {"amountDue": "350.00", "dueDate": "2024-02-15"},
        {"amountDue": "350.00", "dueDate": "2024-03-01"},
    ],
}


async def create_plan(client, reservation_id, body=None):
    response = await client.post(
        f"/api/reservations/{reservation_id}/installments",
        json=body or PLAN,
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 201, response.text
    return response.json()


# ---------- gateway auth ----------

async def test_requests_without_gateway_headers_are_rejected(client):
    response = await client.get("/api/payments/reconciliation")

    assert response.status_code == 401
    body = response.json()
    assert body["success"] is False
    assert body["errors"][0]["code"] == "access_token_required"


async def test_health_is_public(client):
    response = await client.get("/api/health/")

    assert response.status_code == 200
    assert response.json()["status"] in ("ok", "degraded")


async def test_reconciliation_requires_admin(client, reservation):
    response = await client.get(
        "/api/payments/reconciliation", headers=client_headers(reservation.user_id)
    )

    assert response.status_code == 403
    assert response.json()["errors"][0]["code"] == "access_denied"


async def test_buyer_sees_only_own_installments(client, reservation):
    await create_plan(client, reservation.id)

    own = await client.get(
        f"/api/reservations/{reservation.id}/installments",
        headers=client_headers(reservation.user_id),
    )
    other = await client.get(
        f"/api/reservations/{reservation.id}/installments",
        headers=client_headers(uuid.uuid4()),
    )

    assert own.status_code == 200
    assert len(own.json()["installments"]) == 3
    assert other.status_code == 403


# ---------- plans ----------

async def test_create_plan_with_explicit_schedule(client, reservation):
    body = await create_plan(client, reservation.id)

    assert body["reservationId"] == str(reservation.id)
    assert body["totalAmount"] == "1000.00"
    items = body["installments"]
    assert [i["installmentNo"] for i in items] == [1, 2, 3]
    assert [i["amountDue"] for i in items] == ["300.00", "350.00", "350.00"]
    assert all(i["status"] == "pending" and i["version"] == 1 for i in items)


async def test_create_plan_from_defaults(client, reservation):
    body = await create_plan(client, reservation.id, {"firstDueDate": "2024-01-01"})

    amounts = [Decimal(i["amountDue"]) for i in body["installments"]]
    assert sum(amounts) == Decimal("1000.00")
    assert body["installments"][0]["dueDate"] == "2024-01-01"


async def test_create_plan_with_empty_schedule(client, reservation):
    response = await client.post(
        f"/api/reservations/{reservation.id}/installments",
        json={"totalAmount": "1000.00", "schedule": []},
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["code"] == "validation_error"


async def test_create_plan_with_mismatched_total(client, reservation):
    response = await client.post(
        f"/api/reservations/{reservation.id}/installments",
        json={
            "totalAmount": "1000.00",
            "schedule": [{"amountDue": "900.00", "dueDate": "2024-01-01"}],
        },
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


async def test_create_plan_without_schedule_source(client, reservation):
    response = await client.post(
        f"/api/reservations/{reservation.id}/installments",
        json={"totalAmount": "1000.00"},
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["code"] == "validation_error"


async def test_create_plan_for_unknown_reservation(client):
    response = await client.post(
        f"/api/reservations/{uuid.uuid4()}/installments", json=PLAN, headers=ADMIN_HEADERS
    )

    assert response.status_code == 404
    assert response.json()["errors"][0]["code"] == "reservation_not_found"


# ---------- pay ----------

async def test_pay_installment_then_pay_again(client, reservation):
    plan = await create_plan(client, reservation.id)
    installment_id = plan["installments"][0]["id"]

    paid = await client.put(
        f"/api/installments/{installment_id}/pay",
        json={"paymentMethod": "transfer", "paymentReference": "TRX-9", "version": 1},
        headers=ADMIN_HEADERS,
    )
    assert paid.status_code == 200
    body = paid.json()
    assert body["status"] == "paid"
    assert body["effectiveStatus"] == "paid"
    assert body["paidBy"] == "admin-1"
    assert body["paymentReference"] == "TRX-9"
    assert body["paidAt"] is not None
    assert body["version"] == 2

    again = await client.put(
        f"/api/installments/{installment_id}/pay",
        json={"version": 2},
        headers=ADMIN_HEADERS,
    )
    assert again.status_code == 409
    assert again.json()["errors"][0]["code"] == "installment_already_paid"


async def test_pay_with_stale_version(client, reservation):
    plan = await create_plan(client, reservation.id)
    installment_id = plan["installments"][1]["id"]

    response = await client.put(
        f"/api/installments/{installment_id}/pay", json={"version": 5}, headers=ADMIN_HEADERS
    )

    assert response.status_code == 409
    assert response.json()["errors"][0]["code"] == "version_conflict"


async def test_pay_unknown_installment(client):
    response = await client.put(
        f"/api/installments/{uuid.uuid4()}/pay", json={"version": 1}, headers=ADMIN_HEADERS
    )

    assert response.status_code == 404
    assert response.json()["errors"][0]["code"] == "installment_not_found"


async def test_pay_requires_admin(client, reservation):
    plan = await create_plan(client, reservation.id)

    response = await client.put(
        f"/api/installments/{plan['installments'][0]['id']}/pay",
        json={"version": 1},
        headers=client_headers(reservation.user_id),
    )

    assert response.status_code == 403


async def test_bulk_pay_reports_each_outcome(client, reservation):
    plan = await create_plan(client, reservation.id)
    first, _, third = [i["id"] for i in plan["installments"]]
    missing = str(uuid.uuid4())

    response = await client.post(
        "/api/installments/bulk-pay",
        json={"installmentIds": [first, missing, third], "paymentMethod": "cash"},
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["succeeded"] == 2
    assert body["failed"] == 1
    assert [r["installmentId"] for r in body["results"]] == [first, missing, third]
    assert [r["outcome"] for r in body["results"]] == ["ok", "not_found", "ok"]
    assert body["results"][0]["installment"]["status"] == "paid"
    assert body["results"][1]["code"] == "installment_not_found"

    listing = await client.get(
        f"/api/reservations/{reservation.id}/installments", headers=ADMIN_HEADERS
    )
    statuses = [i["status"] for i in listing.json()["installments"]]
    assert statuses == ["paid", "pending", "paid"]


async def test_bulk_pay_requires_ids(client):
    response = await client.post(
        "/api/installments/bulk-pay", json={"installmentIds": []}, headers=ADMIN_HEADERS
    )

    assert response.status_code == 400


# ---------- reconciliation / calendar ----------

async def test_reconciliation_with_min_amount(client, reservation):
    await create_plan(client, reservation.id)

    response = await client.get(
        "/api/payments/reconciliation",
        params={"minAmount": "350"},
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["meta"]["total"] == 2
    assert body["meta"]["filters"]["minAmount"] == "350"
    rows = body["data"]
    assert all(Decimal(r["installment"]["amountDue"]) >= Decimal("350") for r in rows)
    assert rows[0]["reservation"]["id"] == str(reservation.id)
    assert rows[0]["tour"]["title"] == "Patagonia Trek"
    assert rows[0]["departure"]["departureDate"] == "2024-03-15"
    assert rows[0]["buyer"]["email"] == "ana.torres@example.com"


async def test_reconciliation_marks_past_due_rows_overdue(client, reservation):
    await create_plan(client, reservation.id)

    response = await client.get(
        "/api/payments/reconciliation",
        params={"status": "pending", "startDate": "2024-01-01", "endDate": "2024-01-31"},
        headers=ADMIN_HEADERS,
    )

    rows = response.json()["data"]
    assert len(rows) == 1
    assert rows[0]["installment"]["status"] == "pending"
    assert rows[0]["installment"]["effectiveStatus"] == "overdue"


async def test_reconciliation_rejects_unknown_status(client):
    response = await client.get(
        "/api/payments/reconciliation", params={"status": "late"}, headers=ADMIN_HEADERS
    )

    assert response.status_code == 400


async def test_calendar_groups_by_due_date(client, reservation):
    await create_plan(client, reservation.id)

    response = await client.get(
        "/api/payments/calendar",
        params={"startDate": "2024-02-01", "endDate": "2024-03-31"},
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 200
    days = response.json()["data"]
    assert [d["dueDate"] for d in days] == ["2024-02-15", "2024-03-01"]
    assert [d["count"] for d in days] == [1, 1]
    assert days[0]["totalAmount"] == "350.00"


async def test_calendar_rejects_inverted_range(client):
    response = await client.get(
        "/api/payments/calendar",
        params={"startDate": "2024-03-01", "endDate": "2024-02-01"},
        headers=ADMIN_HEADERS,
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["code"] == "validation_error"


# ---------- timeline ----------

async def test_timeline_lists_ledger_events(client, reservation):
    plan = await create_plan(client, reservation.id)
    await client.put(
        f"/api/installments/{plan['installments'][0]['id']}/pay",
        json={"version": 1},
        headers=ADMIN_HEADERS,
    )

    response = await client.get(
        f"/api/reservations/{reservation.id}/timeline",
        headers=client_headers(reservation.user_id),
    )

    assert response.status_code == 200
    events = response.json()
    assert {e["eventType"] for e in events} == {"installment_plan_created", "installment_paid"}
    assert all(e["performedBy"] == "admin-1" for e in events)


async def test_default_plan_after_paid_deposit_covers_the_rest(client, reservation):
    deposit_plan = await create_plan(
        client,
        reservation.id,
        {"totalAmount": "300.00", "schedule": [{"amountDue": "300.00", "dueDate": "2024-01-01"}]},
    )
    paid = await client.put(
        f"/api/installments/{deposit_plan['installments'][0]['id']}/pay",
        json={"version": 1},
        headers=ADMIN_HEADERS,
    )
    assert paid.status_code == 200

    body = await create_plan(client, reservation.id, {"firstDueDate": "2024-02-01"})

    amounts = [Decimal(i["amountDue"]) for i in body["installments"]]
    assert sum(amounts) == Decimal("700.00")
    assert body["installments"][0]["installmentNo"] == 2


async def test_buyer_cannot_tell_unknown_from_foreign_reservations(client, reservation):
    buyer = client_headers(uuid.uuid4())

    for path in ("installments", "timeline"):
        foreign = await client.get(f"/api/reservations/{reservation.id}/{path}", headers=buyer)
        unknown = await client.get(f"/api/reservations/{uuid.uuid4()}/{path}", headers=buyer)

        assert foreign.status_code == unknown.status_code == 403
        assert foreign.json()["errors"] == unknown.json()["errors"]


async def test_admin_gets_not_found_for_unknown_reservation(client):
    response = await client.get(
        f"/api/reservations/{uuid.uuid4()}/timeline", headers=ADMIN_HEADERS
    )

    assert response.status_code == 404
    assert response.json()["errors"][0]["code"] == "reservation_not_found"
