# tests/test_api.py

from datetime import date

import pytest
from sqlmodel import SQLModel


@pytest.fixture
def barbershop(client):
    res = client.put("/businesses/barber-1", json={
        "name": "Barbería Centro",
        "address": "Av. Siempre Viva 742",
        "business_type": "barbershop",
        "timezone": "America/Argentina/Buenos_Aires",
    })
    assert res.status_code == 200
    return res.json()


def book(client, on_date, time="10:00", **overrides):
    payload = {
        "client_name": "Juan Pérez",
        "phone": "+54 11 5555-0001",
        "service_id": "1",
        "date": on_date.isoformat(),
        "time": time,
    }
    payload.update(overrides)
    return client.post("/businesses/barber-1/appointments", json=payload)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_business_gets_type_defaults(barbershop):
    assert [s["name"] for s in barbershop["services"]][0] == "Corte de cabello"
    assert len(barbershop["hours"]) == 7
    assert barbershop["notifications"]["confirmation_message"] is True


def test_invalid_hours_rejected(client):
    res = client.put("/businesses/bad", json={
        "name": "Bad",
        "hours": [{"day": "monday", "is_open": True, "open_time": "18:00", "close_time": "09:00"}],
    })

    assert res.status_code == 422


def test_unknown_business_is_404(client):
    assert client.get("/businesses/nope").status_code == 404


def test_monday_availability(client, barbershop, upcoming):
    monday = upcoming(0)

    res = client.get("/businesses/barber-1/availability", params={"date": monday.isoformat(), "service_id": "1"})

    assert res.status_code == 200
    starts = res.json()["available_starts"]
    assert len(starts) == 18
    assert starts[0] == "09:00" and starts[-1] == "17:30"


def test_sunday_has_no_availability(client, barbershop, upcoming):
    res = client.get("/businesses/barber-1/availability", params={"date": upcoming(6).isoformat(), "service_id": "1"})

    assert res.json()["available_starts"] == []


def test_unknown_service_is_404(client, barbershop, upcoming):
    res = client.get("/businesses/barber-1/availability", params={"date": upcoming(0).isoformat(), "service_id": "99"})

    assert res.status_code == 404


def test_double_booking_prevented(client, barbershop, upcoming, dispatcher):
    tuesday = upcoming(1)

    first = book(client, tuesday)
    assert first.status_code == 201
    assert first.json()["status"] == "pending"
    assert dispatcher.sent

    res = client.get("/businesses/barber-1/availability", params={"date": tuesday.isoformat(), "service_id": "1"})
    assert "10:00" not in res.json()["available_starts"]

    second = book(client, tuesday, client_name="Otro", phone="1144440000")
    assert second.status_code == 409


def test_past_booking_is_422(client, barbershop):
    assert book(client, date(2020, 1, 6)).status_code == 422


def test_status_transitions(client, barbershop, upcoming, dispatcher):
    appt_id = book(client, upcoming(1)).json()["id"]

    res = client.patch(f"/appointments/{appt_id}/status", json={"status": "completed"})
    assert res.status_code == 409

    res = client.patch(f"/appointments/{appt_id}/status", json={"status": "confirmed"})
    assert res.status_code == 200
    assert res.json()["status"] == "confirmed"
    assert "ha sido aceptado" in dispatcher.sent[-1][1]

    res = client.patch(f"/appointments/{appt_id}/status", json={"status": "pending"})
    assert res.status_code == 409

    res = client.patch(f"/appointments/{appt_id}/status", json={"status": "cancelled", "expected_status": "pending"})
    assert res.status_code == 409

    res = client.patch(f"/appointments/{appt_id}/status", json={"status": "cancelled", "expected_status": "confirmed"})
    assert res.status_code == 200

    res = client.patch(f"/appointments/{appt_id}/status", json={"status": "pending"})
    assert res.json()["status"] == "pending"


def test_unknown_appointment_is_404(client):
    assert client.get("/appointments/missing").status_code == 404


def test_list_appointments_filters(client, barbershop, upcoming):
    tuesday = upcoming(1)
    book(client, tuesday, time="10:00")
    cancelled_id = book(client, tuesday, time="11:00", client_name="Ana").json()["id"]
    client.patch(f"/appointments/{cancelled_id}/status", json={"status": "cancelled"})

    assert len(client.get("/businesses/barber-1/appointments").json()) == 2
    pending = client.get("/businesses/barber-1/appointments", params={"status": "pending"}).json()
    assert [a["client_name"] for a in pending] == ["Juan Pérez"]
    assert client.get("/businesses/barber-1/appointments", params={"status": "booked"}).status_code == 422
    assert len(client.get("/businesses/barber-1/appointments", params={"q": "ana"}).json()) == 1


def test_clients_endpoints(client, barbershop, upcoming):
    tuesday = upcoming(1)
    book(client, tuesday, time="10:00")
    book(client, tuesday, time="11:00", phone="541155550001")
    book(client, tuesday, time="12:00", client_id="user-1", client_name="Ana", phone="1144440000")

    clients = client.get("/businesses/barber-1/clients").json()
    assert [c["id"] for c in clients] == ["541155550001", "user-1"]

    detail = client.get("/businesses/barber-1/clients/541155550001").json()
    assert detail["stats"]["total"] == 2
    assert detail["stats"]["last_visit"] == tuesday.isoformat()

    assert client.get("/businesses/barber-1/clients/nobody").status_code == 404


def test_reminders_endpoint(client, barbershop):
    res = client.get("/businesses/barber-1/reminders")

    assert res.status_code == 200
    assert res.json() == []


def test_stats_endpoint(client, barbershop, upcoming):
    tuesday = upcoming(1)
    book(client, tuesday, "10:00")
    book(client, tuesday, "11:00", client_name="Ana", phone="1144440000")

    res = client.get("/businesses/barber-1/stats")

    assert res.status_code == 200
    body = res.json()
    assert body["pending"] == 2
    assert body["clients"] == 2
    assert body["revenue"] == 0
    assert client.get("/businesses/nope/stats").status_code == 404


def test_employee_roster_checked_on_booking(client, upcoming):
    client.put("/businesses/barber-1", json={
        "name": "Barbería Centro",
        "business_type": "barbershop",
        "employees": [{"id": "emp-1", "name": "Carlos", "services": ["1"]}],
    })
    tuesday = upcoming(1)

    assert book(client, tuesday, "10:00", employee_id="emp-9").status_code == 404
    assert book(client, tuesday, "10:00", employee_id="emp-1", service_id="3").status_code == 404

    res = book(client, tuesday, "10:00", employee_id="emp-1")
    assert res.status_code == 201
    assert res.json()["employee_name"] == "Carlos"


def test_blank_client_name_is_422(client, barbershop, upcoming):
    assert book(client, upcoming(1), client_name="   ").status_code == 422


def test_store_outage_is_503(client, engine):
    SQLModel.metadata.drop_all(engine)

    res = client.get("/appointments/x")

    assert res.status_code == 503
    assert res.json()["detail"] == "Appointment store is unavailable"
