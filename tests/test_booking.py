# tests/test_booking.py

from datetime import date, datetime

import pytest

from agenda.booking import BookingService
from pydantic import ValidationError

from agenda.errors import ConfigurationMissing, IllegalTransition, PastDateRequested, SlotUnavailable, StaleAppointment
from agenda.schemas import AppointmentCreate, AppointmentStatus
from agenda.store import SqlAppointmentStore, SqlBusinessConfig

BOOKING_DATE = date(2025, 6, 10)


@pytest.fixture
def service(session, business, dispatcher):
    config = SqlBusinessConfig(session)
    config.save_business(business)
    return BookingService(
        config=config,
        store=SqlAppointmentStore(session),
        dispatcher=dispatcher,
        policy="strict",
        clock=lambda tz: datetime(2025, 6, 1, 8, 0),
    )


def request(**overrides):
    values = {
        "client_name": "Juan Pérez",
        "phone": "+54 11 5555-0001",
        "service_id": "1",
        "date": BOOKING_DATE,
        "time": "10:00",
    }
    values.update(overrides)
    return AppointmentCreate(**values)


def test_booking_creates_pending_with_snapshot(service, dispatcher):
    appt = service.book("barber-1", request(service_id="3"))

    assert appt.status == AppointmentStatus.pending
    assert appt.service_name == "Corte + Barba"
    assert appt.price == 22
    assert appt.client_id == "guest"
    assert dispatcher.sent[-1][0] == "+54 11 5555-0001"


def test_second_booking_same_slot_is_rejected(service):
    service.book("barber-1", request())

    assert "10:00" not in service.availability("barber-1", BOOKING_DATE, "1")
    with pytest.raises(SlotUnavailable):
        service.book("barber-1", request(client_name="Otro", phone="1144440000"))


def test_past_date_rejected(service):
    with pytest.raises(PastDateRequested):
        service.book("barber-1", request(date=date(2025, 5, 20)))


def test_status_flow_and_confirmation_message(service, dispatcher):
    appt = service.book("barber-1", request())
    sent_before = len(dispatcher.sent)

    confirmed = service.change_status(appt.id, AppointmentStatus.confirmed)

    assert confirmed.status == AppointmentStatus.confirmed
    assert len(dispatcher.sent) == sent_before + 1
    assert "ha sido aceptado" in dispatcher.sent[-1][1]

    with pytest.raises(IllegalTransition):
        service.change_status(appt.id, AppointmentStatus.pending)

    service.change_status(appt.id, AppointmentStatus.completed)
    assert service.change_status(appt.id, AppointmentStatus.pending).status == AppointmentStatus.pending


def test_confirmation_message_can_be_disabled(session, service, business, dispatcher):
    business.notifications.confirmation_message = False
    SqlBusinessConfig(session).save_business(business)
    appt = service.book("barber-1", request())
    sent_before = len(dispatcher.sent)

    service.change_status(appt.id, AppointmentStatus.confirmed)

    assert len(dispatcher.sent) == sent_before


def test_expected_status_mismatch_is_stale(service):
    appt = service.book("barber-1", request())
    service.change_status(appt.id, AppointmentStatus.cancelled)

    with pytest.raises(StaleAppointment):
        service.change_status(appt.id, AppointmentStatus.confirmed, expected_status=AppointmentStatus.pending)


def test_cancelling_frees_the_slot(service):
    appt = service.book("barber-1", request())
    service.change_status(appt.id, AppointmentStatus.cancelled)

    assert "10:00" in service.availability("barber-1", BOOKING_DATE, "1")


def test_clients_and_detail(service):
    service.book("barber-1", request())
    service.book("barber-1", request(time="11:00", date=date(2025, 6, 12)))
    service.book("barber-1", request(client_id="user-1", client_name="Ana", phone="1144440000", time="12:00"))

    clients = service.clients("barber-1")
    detail = service.client_detail("barber-1", "541155550001")

    assert [c.id for c in clients] == ["541155550001", "user-1"]
    assert [c.id for c in service.clients("barber-1", "ana")] == ["user-1"]
    assert detail.stats.total == 2
    assert detail.stats.last_visit == date(2025, 6, 12)
    assert detail.appointments[0].date == date(2025, 6, 12)


def test_list_appointments_search(service):
    service.book("barber-1", request())
    service.book("barber-1", request(time="11:00", service_id="3", client_name="Ana"))

    assert len(service.list_appointments("barber-1")) == 2
    assert [a.client_name for a in service.list_appointments("barber-1", term="barba")] == ["Ana"]


def test_reminders_use_business_clock(session, service, business):
    business.notifications.reminder_hours = 48
    SqlBusinessConfig(session).save_business(business)
    service.book("barber-1", request(date=date(2025, 6, 2), time="09:00"))
    service.book("barber-1", request(date=date(2025, 6, 10), time="09:00"))

    reminders = service.reminders("barber-1")

    assert len(reminders) == 1
    assert "09:00" in reminders[0].message


def test_booking_with_employee_takes_roster_name(service):
    appt = service.book("barber-1", request(employee_id="emp-1"))

    assert appt.employee_id == "emp-1"
    assert appt.employee_name == "Carlos"


def test_unknown_employee_is_configuration_missing(service):
    with pytest.raises(ConfigurationMissing):
        service.book("barber-1", request(employee_id="emp-9"))

    assert service.list_appointments("barber-1") == []


def test_employee_must_perform_the_service(service):
    # emp-1 only does service "1"
    with pytest.raises(ConfigurationMissing):
        service.book("barber-1", request(employee_id="emp-1", service_id="3"))


def test_client_name_is_stripped_and_required(service):
    appt = service.book("barber-1", request(client_name="  Juan Pérez  "))
    assert appt.client_name == "Juan Pérez"

    with pytest.raises(ValidationError):
        request(client_name="   ")


def test_stats_count_and_revenue(service):
    first = service.book("barber-1", request())
    service.book("barber-1", request(time="11:00", service_id="3", client_name="Ana", phone="1144440000"))
    service.change_status(first.id, AppointmentStatus.confirmed)

    stats = service.stats("barber-1")

    assert stats.pending == 1
    assert stats.confirmed == 1
    assert stats.clients == 2
    assert stats.revenue == 15
    assert stats.today == 0
