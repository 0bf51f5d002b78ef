from datetime import datetime, timedelta

import services.cancellation as cancellation
from models import db, AuditLog, Booking, Slot
from tests.helpers import at


def _payload(barber, services, day, start_h=10, end_h=11, **extra):
    data = {
        "barberId": barber.id,
        "serviceIds": [s.id for s in services],
        "startTime": at(day, start_h).isoformat(),
        "endTime": at(day, end_h).isoformat(),
        "phone": "+1 555 000 1111",
    }
    data.update(extra)
    return data


def test_create_booking(client, auth, client_user, barber, services, monday):
    resp = client.post("/api/bookings", headers=auth(client_user),
                       json=_payload(barber, [services["cut"], services["beard"]], monday, notes="fade"))

    assert resp.status_code == 201
    booking = resp.get_json()["data"]["booking"]
    assert booking["status"] == "confirmed"
    assert booking["totalPrice"] == 4000
    assert booking["totalDuration"] == 50
    assert booking["userId"] == client_user.id
    assert booking["barber"]["id"] == barber.id
    assert booking["barbershop"]["id"] == barber.barbershop_id
    assert booking["slot"]["isBooked"] is True
    assert booking["startTime"] == at(monday, 10).isoformat()
    assert [s["name"] for s in booking["services"]] == ["Haircut", "Beard Trim"]
    assert AuditLog.query.filter_by(action="BOOKING_CREATE").count() == 1


def test_utc_offsets_are_normalized(client, auth, client_user, barber, services, monday):
    data = _payload(barber, [services["cut"]], monday)
    data["startTime"] = at(monday, 12).isoformat() + "+02:00"
    data["endTime"] = at(monday, 11).isoformat() + "Z"

    resp = client.post("/api/bookings", headers=auth(client_user), json=data)

    assert resp.status_code == 201
    assert resp.get_json()["data"]["booking"]["startTime"] == at(monday, 10).isoformat()


def test_second_booking_for_same_window_conflicts(client, auth, client_user, other_client, barber, services, monday):
    first = client.post("/api/bookings", headers=auth(client_user), json=_payload(barber, [services["cut"]], monday))
    second = client.post("/api/bookings", headers=auth(other_client), json=_payload(barber, [services["cut"]], monday))

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.get_json()["error"] == "Selected time slot is not available"
    assert Booking.query.count() == 1
    assert AuditLog.query.filter_by(action="BOOKING_FAIL_CONFLICT").count() == 1


def test_insufficient_duration_is_400(client, auth, client_user, barber, services, monday):
    resp = client.post("/api/bookings", headers=auth(client_user),
                       json=_payload(barber, [services["cut"], services["beard"], services["wash"]], monday))
    assert resp.status_code == 400
    assert "insufficient" in resp.get_json()["error"]


def test_request_shape_is_validated(client, auth, client_user, barber, services, monday):
    headers = auth(client_user)
    bad = [
        _payload(barber, [], monday),
        _payload(barber, [services["cut"]], monday, phone="123"),
        _payload(barber, [services["cut"]], monday, startTime="next tuesday"),
        _payload(barber, [services["cut"]], monday, 11, 10),
        _payload(barber, [services["cut"]], monday - timedelta(days=400)),
    ]
    for data in bad:
        assert client.post("/api/bookings", headers=headers, json=data).status_code == 400


def test_booking_requires_login_unless_guests_allowed(app, client, barber, services, monday):
    data = _payload(barber, [services["cut"]], monday)
    assert client.post("/api/bookings", json=data).status_code == 401

    app.config["ALLOW_GUEST_BOOKINGS"] = True
    resp = client.post("/api/bookings", json=data)
    assert resp.status_code == 201
    assert resp.get_json()["data"]["booking"]["userId"] is None


def test_listing_is_scoped_by_role(client, auth, client_user, other_client, admin_user, other_admin,
                                   barber_user, super_admin, barber, services, monday):
    client.post("/api/bookings", headers=auth(client_user), json=_payload(barber, [services["cut"]], monday, 10, 11))
    client.post("/api/bookings", headers=auth(other_client), json=_payload(barber, [services["cut"]], monday, 11, 12))

    def total(user, query=""):
        resp = client.get(f"/api/bookings{query}", headers=auth(user))
        assert resp.status_code == 200
        return resp.get_json()["data"]["pagination"]["total"]

    assert total(client_user) == 1
    assert total(other_client) == 1
    assert total(barber_user) == 2
    assert total(admin_user) == 2
    assert total(other_admin) == 0
    assert total(super_admin) == 2
    assert total(super_admin, "?status=cancelled") == 0
    assert total(super_admin, "?limit=1&page=2") == 2
    assert client.get("/api/bookings?limit=500", headers=auth(super_admin)).status_code == 400
    assert client.get("/api/bookings").status_code == 401


def test_get_booking_checks_access(client, auth, client_user, other_client, admin_user, barber, services, monday):
    created = client.post("/api/bookings", headers=auth(client_user),
                          json=_payload(barber, [services["cut"]], monday)).get_json()["data"]["booking"]

    assert client.get(f"/api/bookings/{created['id']}", headers=auth(client_user)).status_code == 200
    assert client.get(f"/api/bookings/{created['id']}", headers=auth(admin_user)).status_code == 200
    assert client.get(f"/api/bookings/{created['id']}", headers=auth(other_client)).status_code == 403
    assert client.get("/api/bookings/9999", headers=auth(client_user)).status_code == 404


def test_staff_update(client, auth, client_user, barber_user, barber, services, monday):
    created = client.post("/api/bookings", headers=auth(client_user),
                          json=_payload(barber, [services["cut"]], monday)).get_json()["data"]["booking"]
    url = f"/api/bookings/{created['id']}"

    assert client.put(url, headers=auth(client_user), json={"status": "completed"}).status_code == 403

    resp = client.put(url, headers=auth(barber_user), json={"status": "completed", "notes": "done"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["booking"]["status"] == "completed"

    assert client.put(url, headers=auth(barber_user), json={"status": "cancelled"}).status_code == 400


def test_cancel_respects_lead_time(client, auth, client_user, barber, services, monday, monkeypatch):
    created = client.post("/api/bookings", headers=auth(client_user),
                          json=_payload(barber, [services["cut"]], monday)).get_json()["data"]["booking"]
    url = f"/api/bookings/{created['id']}"
    start = at(monday, 10)

    monkeypatch.setattr(cancellation, "_utcnow", lambda: start - timedelta(hours=1))
    resp = client.delete(url, headers=auth(client_user))
    assert resp.status_code == 400
    assert "within 2 hours" in resp.get_json()["error"]

    monkeypatch.setattr(cancellation, "_utcnow", lambda: start - timedelta(hours=3))
    assert client.delete(url, headers=auth(client_user)).status_code == 200

    booking = db.session.get(Booking, created["id"])
    assert booking.status == "cancelled"
    assert db.session.get(Slot, booking.slot_id).is_booked is False

    avail = client.get(f"/api/timeslots/available?barberId={barber.id}&date={monday.isoformat()}").get_json()
    assert at(monday, 10).isoformat() in [s["startTime"] for s in avail["data"]]


def test_cancel_permissions(client, auth, client_user, other_client, other_admin, admin_user,
                            barber, services, monday):
    created = client.post("/api/bookings", headers=auth(client_user),
                          json=_payload(barber, [services["cut"]], monday)).get_json()["data"]["booking"]
    url = f"/api/bookings/{created['id']}"

    assert client.delete(url, headers=auth(other_client)).status_code == 403
    assert client.delete(url, headers=auth(other_admin)).status_code == 403
    assert client.delete(url, headers=auth(admin_user), json={"reason": "Shop closed"}).status_code == 200
    assert client.delete(url, headers=auth(admin_user)).status_code == 400


def test_calendar_shows_booked_blocked_and_released(client, auth, client_user, admin_user, barber, services,
                                                    monday, monkeypatch):
    headers = auth(client_user)
    kept = client.post("/api/bookings", headers=headers,
                       json=_payload(barber, [services["cut"]], monday, 10, 11)).get_json()["data"]["booking"]
    gone = client.post("/api/bookings", headers=headers,
                       json=_payload(barber, [services["cut"]], monday, 13, 14)).get_json()["data"]["booking"]
    client.post("/api/timeslots/block", headers=auth(admin_user), json={
        "barberId": barber.id,
        "startTime": at(monday, 15).isoformat(),
        "endTime": at(monday, 16).isoformat(),
    })
    monkeypatch.setattr(cancellation, "_utcnow", lambda: datetime(monday.year, monday.month, monday.day) - timedelta(days=1))
    assert client.delete(f"/api/bookings/{gone['id']}", headers=headers).status_code == 200

    resp = client.get(f"/api/bookings/calendar?barberId={barber.id}&date={monday.isoformat()}", headers=headers)
    assert resp.status_code == 200
    slots = resp.get_json()["data"]["slots"]

    assert [s["startTime"] for s in slots] == [at(monday, h).isoformat() for h in (10, 13, 15)]
    assert slots[0]["isBooked"] and slots[0]["booking"] == {"id": kept["id"], "status": "confirmed"}
    assert slots[1]["isAvailable"] and slots[1]["booking"] == {"id": gone["id"], "status": "cancelled"}
    assert slots[2]["isBlocked"] and slots[2]["booking"] is None


def test_released_window_in_the_past_cannot_be_booked_by_id(client, auth, client_user, barber, services):
    past = datetime.utcnow().replace(minute=0, second=0, microsecond=0) - timedelta(days=3)
    slot = Slot(barber_id=barber.id, start_time=past, end_time=past + timedelta(hours=1))
    db.session.add(slot)
    db.session.commit()

    by_window = _payload(barber, [services["cut"]], past.date(),
                         startTime=past.isoformat(), endTime=(past + timedelta(hours=1)).isoformat())
    resp = client.post("/api/bookings", headers=auth(client_user), json=by_window)
    assert resp.status_code == 400

    by_id = {"barberId": barber.id, "serviceIds": [services["cut"].id], "slotId": slot.id,
             "phone": "+1 555 000 1111"}
    resp = client.post("/api/bookings", headers=auth(client_user), json=by_id)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Cannot book past/started slots"
    assert Booking.query.count() == 0
