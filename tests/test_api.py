"""HTTP API tests against the ASGI app."""
from decimal import Decimal

import httpx
import pytest_asyncio

from booking_engine.api.deps import get_booking_service, get_lifecycle, get_reporting_service
from booking_engine.core.database import get_db
from booking_engine.main import app
from tests.helpers import MANAGER_ID, OTHER_MANAGER_ID, OTHER_PLAYER_ID, PLAYER_ID

PLAYER = {"X-User-Id": str(PLAYER_ID)}
OTHER_PLAYER = {"X-User-Id": str(OTHER_PLAYER_ID)}
MANAGER = {"X-User-Id": str(MANAGER_ID), "X-Club-Id": "1"}
OTHER_MANAGER = {"X-User-Id": str(OTHER_MANAGER_ID), "X-Club-Id": "2"}

BOOKING = {"court_id": 1, "date": "2026-03-02", "start_time": "10:00:00", "duration_hours": 2}


@pytest_asyncio.fixture
async def client(session_factory, seed, booking, lifecycle, reporting):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_booking_service] = lambda: booking
    app.dependency_overrides[get_lifecycle] = lambda: lifecycle
    app.dependency_overrides[get_reporting_service] = lambda: reporting

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_create_reservation(client):
    response = await client.post("/reservations", json=BOOKING, headers=PLAYER)

    assert response.status_code == 201
    body = response.json()
    assert body["reservation"]["court_id"] == 1
    assert body["reservation"]["end_time"] == "12:00:00"
    assert Decimal(body["reservation"]["monto_total"]) == Decimal("3000")
    assert body["pricing"]["tariff_source"] == "rule"
    assert Decimal(body["pricing"]["price_per_hour"]) == Decimal("1500")
    assert body["pricing"]["night_range"] == {"start": "22:00:00", "end": "06:00:00"}


async def test_overlap_returns_409(client):
    await client.post("/reservations", json=BOOKING, headers=PLAYER)
    response = await client.post("/reservations", json=BOOKING, headers=OTHER_PLAYER)

    assert response.status_code == 409
    assert response.json() == {
        "detail": "El horario solicitado se solapa con otra reserva",
        "code": "reservation_conflict",
    }


async def test_error_mapping(client):
    response = await client.post("/reservations", json={**BOOKING, "date": "2026-03-01"}, headers=PLAYER)
    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"

    response = await client.post("/reservations", json={**BOOKING, "court_id": 999}, headers=PLAYER)
    assert response.status_code == 404

    response = await client.post(
        "/reservations",
        json={**BOOKING, "court_id": 4, "kind": "privada", "contact_name": "Eva", "contact_surname": "Ruiz"},
        headers={"X-User-Id": "98", "X-Club-Id": "2"},
    )
    assert response.status_code == 422
    assert response.json()["code"] == "no_price_available"


async def test_malformed_body_is_a_400(client):
    response = await client.post("/reservations", json={**BOOKING, "start_time": "late"}, headers=PLAYER)

    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


async def test_missing_identity(client):
    response = await client.post("/reservations", json=BOOKING)
    assert response.status_code == 401


async def test_cancel_and_status(client):
    created = (await client.post("/reservations", json=BOOKING, headers=PLAYER)).json()
    reservation_id = created["reservation"]["id"]

    response = await client.patch(
        f"/reservations/{reservation_id}/status", json={"estado_pago": "Seña"}, headers=MANAGER
    )
    assert response.status_code == 200
    assert response.json()["estado_pago"] == "senado"

    response = await client.patch(f"/reservations/{reservation_id}/status", json={}, headers=MANAGER)
    assert response.status_code == 400

    response = await client.patch(
        f"/reservations/{reservation_id}/status", json={"estado": "confirmada"}, headers=PLAYER
    )
    assert response.status_code == 403

    response = await client.patch(f"/reservations/{reservation_id}/cancel", headers=PLAYER)
    assert response.status_code == 200
    assert response.json()["estado"] == "cancelada"

    response = await client.patch(f"/reservations/{reservation_id}/cancel", headers=PLAYER)
    assert response.status_code == 400
    assert response.json()["code"] == "invalid_transition"

    response = await client.post("/reservations", json=BOOKING, headers=OTHER_PLAYER)
    assert response.status_code == 201


async def test_get_list_and_delete(client):
    created = (await client.post("/reservations", json=BOOKING, headers=PLAYER)).json()
    reservation_id = created["reservation"]["id"]

    response = await client.get(f"/reservations/{reservation_id}", headers=PLAYER)
    assert response.status_code == 200

    response = await client.get(f"/reservations/{reservation_id}", headers=OTHER_PLAYER)
    assert response.status_code == 403

    response = await client.get("/reservations/mine", headers=PLAYER)
    assert [r["id"] for r in response.json()["reservations"]] == [reservation_id]

    response = await client.delete(f"/reservations/{reservation_id}", headers=MANAGER)
    assert response.status_code == 204

    response = await client.get(f"/reservations/{reservation_id}", headers=PLAYER)
    assert response.status_code == 404


async def test_court_schedule(client):
    await client.post("/reservations", json=BOOKING, headers=PLAYER)

    response = await client.get("/courts/1/reservations", params={"date": "2026-03-02"}, headers=MANAGER)
    assert response.status_code == 200
    assert len(response.json()["reservations"]) == 1

    response = await client.get(
        "/courts/1/availability",
        params={"date": "2026-03-02", "start_time": "11:00:00", "duration_hours": 1},
    )
    assert response.json()["available"] is False

    response = await client.get(
        "/courts/1/availability",
        params={"date": "2026-03-02", "start_time": "12:00:00", "duration_hours": 1},
    )
    assert response.json() == {
        "court_id": 1,
        "date": "2026-03-02",
        "start_time": "12:00:00",
        "end_time": "13:00:00",
        "available": True,
    }

    response = await client.get("/courts/999/reservations", params={"date": "2026-03-02"}, headers=MANAGER)
    assert response.status_code == 404


async def test_court_schedule_is_for_the_owning_club(client):
    await client.post("/reservations", json=BOOKING, headers=PLAYER)

    response = await client.get("/courts/1/reservations", params={"date": "2026-03-02"})
    assert response.status_code == 401

    response = await client.get("/courts/1/reservations", params={"date": "2026-03-02"}, headers=PLAYER)
    assert response.status_code == 403
    assert response.json()["code"] == "forbidden"

    response = await client.get("/courts/1/reservations", params={"date": "2026-03-02"}, headers=OTHER_MANAGER)
    assert response.status_code == 403


async def test_summary_and_panel(client):
    await client.post("/reservations", json=BOOKING, headers=PLAYER)
    await client.post("/reservations", json={**BOOKING, "court_id": 2, "add_on_requested": True}, headers=PLAYER)

    response = await client.get("/clubs/1/summary", params={"date": "2026-03-02"}, headers=MANAGER)
    assert response.status_code == 200
    totals = response.json()["totals"]
    assert totals["count"] == 2
    assert Decimal(totals["gross_amount"]) == Decimal("6500")
    assert Decimal(totals["add_on_amount"]) == Decimal("500")
    amounts = response.json()["amount_per_payment_status"]
    assert Decimal(amounts["pendiente_pago"]) == Decimal("6500")

    # Without dates the club's own current date is used
    response = await client.get("/clubs/1/summary", headers=MANAGER)
    assert response.json()["from_date"] == response.json()["to_date"] == "2026-03-02"
    assert response.json()["totals"]["count"] == 2

    response = await client.get(
        "/clubs/1/summary/daily",
        params={"from_date": "2026-03-01", "to_date": "2026-03-03"},
        headers=MANAGER,
    )
    assert [day["totals"]["count"] for day in response.json()["days"]] == [0, 2, 0]

    response = await client.get("/clubs/1/panel", params={"date": "2026-03-02"}, headers=MANAGER)
    assert response.status_code == 200
    assert len(response.json()["agenda"]) == 2

    response = await client.get("/clubs/1/summary", headers=PLAYER)
    assert response.status_code == 403
