"""
Tests for the HTTP surface under /api/v1
Covers: status codes, error envelope, tenant header, recompute on read,
        calendar, room availability, invoices, ledger
"""
from datetime import datetime
from decimal import Decimal

from conftest import OTHER_HOTEL_ID, add_food_order, add_room, booking_payload

CHECK_IN = datetime(2025, 1, 1, 12, 0)
CHECK_OUT = datetime(2025, 1, 3, 10, 0)


async def _create(client, room_id, check_in=CHECK_IN, check_out=CHECK_OUT, **overrides):
    response = await client.post(
        "/api/v1/bookings/", json=booking_payload(room_id, check_in, check_out, **overrides)
    )
    assert response.status_code == 201, response.text
    return response.json()


async def test_health_check(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_create_booking(client, room):
    body = await _create(client, room.id, discount_percent="10")

    assert body["status"] == "OCCUPIED"
    assert body["nights"] == 2
    assert Decimal(body["grand_total"]) == Decimal("4725.00")
    assert Decimal(body["cgst"]) == Decimal("112.50")
    assert body["version"] == 1


async def test_overlap_returns_conflict_envelope(client, room):
    existing = await _create(client, room.id)

    response = await client.post(
        "/api/v1/bookings/",
        json=booking_payload(room.id, datetime(2025, 1, 2, 12), datetime(2025, 1, 4, 10)),
    )

    assert response.status_code == 409
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "ROOM_ALREADY_BOOKED"
    assert body["details"]["conflicting_id"] == existing["id"]


async def test_missing_booking_is_not_found(client):
    response = await client.get("/api/v1/bookings/404")

    assert response.status_code == 404
    assert response.json()["error_type"] == "entity_not_found"


async def test_other_hotel_is_forbidden(client, room):
    booking = await _create(client, room.id)

    response = await client.get(
        f"/api/v1/bookings/{booking['id']}", headers={"X-Hotel-Id": str(OTHER_HOTEL_ID)}
    )

    assert response.status_code == 403
    assert response.json()["success"] is False


async def test_room_of_other_hotel_is_forbidden(client, db):
    foreign = await add_room(db, number="901", hotel_id=OTHER_HOTEL_ID)

    response = await client.post(
        "/api/v1/bookings/", json=booking_payload(foreign.id, CHECK_IN, CHECK_OUT)
    )

    assert response.status_code == 403


async def test_missing_tenant_header_is_rejected(client, room):
    response = await client.get("/api/v1/bookings/", headers={"X-Hotel-Id": ""})

    assert response.status_code == 400
    assert "X-Hotel-Id" in response.json()["message"]


async def test_invalid_body_is_unprocessable(client, room):
    payload = booking_payload(room.id, CHECK_IN, CHECK_OUT, discount_percent="150")

    response = await client.post("/api/v1/bookings/", json=payload)

    assert response.status_code == 422
    body = response.json()
    assert body["success"] is False
    assert body["error_type"] == "request_validation_error"


async def test_new_booking_cannot_start_as_block(client, room):
    payload = booking_payload(room.id, CHECK_IN, CHECK_OUT, status="BLOCKED")

    response = await client.post("/api/v1/bookings/", json=payload)

    assert response.status_code == 422


async def test_inverted_dates_are_rejected(client, room):
    response = await client.post(
        "/api/v1/bookings/", json=booking_payload(room.id, CHECK_OUT, CHECK_IN)
    )

    assert response.status_code == 400


async def test_read_includes_new_food_orders(client, db, room):
    booking = await _create(client, room.id)
    await add_food_order(db, room, "400", datetime(2025, 1, 2, 13, 0))

    response = await client.get(f"/api/v1/bookings/{booking['id']}")

    body = response.json()
    assert Decimal(body["food_totals"]["subtotal"]) == Decimal("400.00")
    assert Decimal(body["food_totals"]["total"]) == Decimal("420.00")
    assert Decimal(body["grand_total"]) == Decimal("5670.00")

    food = (await client.get(f"/api/v1/bookings/{booking['id']}/food-billing")).json()
    assert len(food["orders"]) == 1
    assert Decimal(food["total"]) == Decimal("420.00")


async def test_food_billing_update(client, db, room):
    booking = await _create(client, room.id)
    await add_food_order(db, room, "400", datetime(2025, 1, 2, 13, 0))

    response = await client.patch(
        f"/api/v1/bookings/{booking['id']}/food-billing",
        json={"food_discount_percent": "10", "food_gst_enabled": False},
    )

    assert response.status_code == 200, response.text
    assert Decimal(response.json()["food_totals"]["total"]) == Decimal("360.00")


async def test_list_filters_by_status(client, room):
    await _create(client, room.id)
    await _create(
        client,
        room.id,
        datetime(2025, 1, 5, 12),
        datetime(2025, 1, 6, 10),
        status="CONFIRMED",
    )

    response = await client.get("/api/v1/bookings/", params={"status": "CONFIRMED"})

    assert [b["status"] for b in response.json()] == ["CONFIRMED"]


async def test_calendar_reports_payment_state(client, room):
    await _create(client, room.id, advance_paid="1000")
    await _create(client, room.id, datetime(2025, 1, 5, 12), datetime(2025, 1, 6, 10))

    response = await client.get(
        "/api/v1/bookings/calendar",
        params={"from": "2025-01-01T00:00:00", "to": "2025-01-31T00:00:00"},
    )

    assert response.status_code == 200, response.text
    events = response.json()
    assert [e["payment"]["status"] for e in events] == ["PARTIAL", "DUE"]
    assert events[0]["room_number"] == "101"
    assert events[0]["title"] == "Asha Rao (1)"


async def test_block_and_unblock(client, room):
    block = await client.post(
        "/api/v1/bookings/block",
        json={
            "room_id": room.id,
            "check_in": CHECK_IN.isoformat(),
            "check_out": CHECK_OUT.isoformat(),
            "status": "MAINTENANCE",
            "reason": "AC repair",
        },
    )
    assert block.status_code == 201, block.text

    blocked = await client.post(
        "/api/v1/bookings/", json=booking_payload(room.id, CHECK_IN, CHECK_OUT)
    )
    assert blocked.status_code == 409

    released = await client.patch(f"/api/v1/bookings/unblock/{block.json()['id']}")
    assert released.status_code == 200
    assert released.json()["status"] == "CANCELLED"

    await _create(client, room.id)


async def test_extend_stay_with_warning(client, room):
    stay = await _create(client, room.id)
    await _create(
        client,
        room.id,
        datetime(2025, 1, 3, 14),
        datetime(2025, 1, 4, 10),
        status="CONFIRMED",
    )

    conflict = await client.post(
        f"/api/v1/bookings/{stay['id']}/extend-stay",
        json={"new_check_out": "2025-01-03T15:00:00"},
    )
    assert conflict.status_code == 409
    assert conflict.json()["code"] == "ROOM_ALREADY_BOOKED"

    response = await client.post(
        f"/api/v1/bookings/{stay['id']}/extend-stay",
        json={"new_check_out": "2025-01-03T12:00:00"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["warning"] is True
    assert body["conflicting_booking_id"] is not None
    assert body["booking"]["check_out"] == "2025-01-03T12:00:00"


async def test_available_rooms(client, db, room):
    await add_room(db, number="102")
    await _create(client, room.id)

    response = await client.get(
        "/api/v1/rooms/available",
        params={"checkIn": "2025-01-03T12:00:00", "checkOut": "2025-01-04T11:00:00"},
    )

    assert response.status_code == 200, response.text
    rows = {r["number"]: r for r in response.json()}
    assert rows["101"]["has_same_day_checkout"] is True
    assert rows["101"]["checkout_time"] == "2025-01-03T10:00:00"
    assert rows["102"]["has_same_day_checkout"] is False

    busy = await client.get(
        "/api/v1/rooms/available",
        params={"checkIn": "2025-01-02T12:00:00", "checkOut": "2025-01-04T11:00:00"},
    )
    assert [r["number"] for r in busy.json()] == ["102"]


async def test_rooms_listing(client, db, room):
    await add_room(db, number="901", hotel_id=OTHER_HOTEL_ID)

    response = await client.get("/api/v1/rooms/")

    assert [r["number"] for r in response.json()] == ["101"]
    assert response.json()[0]["plans"][0]["code"] == "DELUXE"


async def test_checkout_invoice_and_ledger(client, room):
    booking = await _create(client, room.id)

    response = await client.post(
        f"/api/v1/bookings/{booking['id']}/checkout",
        json={"final_payment_mode": "CARD"},
    )

    assert response.status_code == 200, response.text
    body = response.json()
    assert body["success"] is True
    assert body["booking"]["status"] == "CHECKEDOUT"
    invoice = body["invoice"]
    assert Decimal(invoice["grand_total"]) == Decimal("5250.00")

    fetched = await client.get(f"/api/v1/invoices/{invoice['id']}")
    assert fetched.json()["invoice_number"] == invoice["invoice_number"]

    foreign = await client.get(
        f"/api/v1/invoices/{invoice['id']}", headers={"X-Hotel-Id": str(OTHER_HOTEL_ID)}
    )
    assert foreign.status_code == 403

    listed = await client.get(f"/api/v1/rooms/{room.id}/invoices")
    assert [i["id"] for i in listed.json()] == [invoice["id"]]

    ledger = await client.get("/api/v1/transactions/", params={"source": "ROOM"})
    entries = ledger.json()
    assert len(entries) == 1
    assert entries[0]["reference_id"] == str(booking["id"])
    assert Decimal(entries[0]["amount"]) == Decimal("5250.00")
    assert entries[0]["payment_mode"] == "CARD"

    again = await client.post(f"/api/v1/bookings/{booking['id']}/checkout")
    assert again.status_code == 400


async def test_booking_invoice_after_checkout(client, room):
    booking = await _create(client, room.id)

    missing = await client.get(f"/api/v1/bookings/{booking['id']}/invoice")
    assert missing.status_code == 404
    assert missing.json()["success"] is False

    checkout = await client.post(
        f"/api/v1/bookings/{booking['id']}/checkout", json={"final_payment_mode": "CARD"}
    )
    invoice = checkout.json()["invoice"]

    response = await client.get(f"/api/v1/bookings/{booking['id']}/invoice")
    assert response.status_code == 200, response.text
    assert response.json()["id"] == invoice["id"]
    assert response.json()["invoice_number"] == invoice["invoice_number"]

    foreign = await client.get(
        f"/api/v1/bookings/{booking['id']}/invoice",
        headers={"X-Hotel-Id": str(OTHER_HOTEL_ID)},
    )
    assert foreign.status_code == 403
