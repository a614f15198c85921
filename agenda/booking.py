# agenda/booking.py

import logging
import uuid
from datetime import date, datetime, timezone
from typing import Callable, List, Optional

from agenda.availability import available_slots, check_slot
from agenda.clients import client_stats, derive_clients, search_clients
from agenda.core import local_now
from agenda.dashboard import dashboard_stats
from agenda.errors import BookingError, ConfigurationMissing, StaleAppointment
from agenda.notifications import (
    MessageDispatcher,
    booking_message,
    confirmation_message,
    dispatch,
    due_reminders,
)
from agenda.schemas import (
    Appointment,
    AppointmentCreate,
    AppointmentStatus,
    Business,
    Client,
    ClientDetail,
    DashboardStats,
    Employee,
    Reminder,
)
from agenda.store import AppointmentStore, BusinessConfigProvider
from agenda.transitions import transition

logger = logging.getLogger(__name__)


class BookingService:
    """
    Ties the pure scheduling core to its collaborators.

    - availability / book: slot generation + availability predicate, then
      an atomic check-and-create in the store
    - change_status: state machine check, then compare-and-set in the store,
      then the confirmation message on -> confirmed
    """

    def __init__(
        self,
        config: BusinessConfigProvider,
        store: AppointmentStore,
        dispatcher: MessageDispatcher,
        policy: Optional[str] = None,
        clock: Callable[[str], datetime] = local_now,
    ):
        self.config = config
        self.store = store
        self.dispatcher = dispatcher
        self.policy = policy
        self.clock = clock

    def availability(self, business_id: str, on_date: date, service_id: str) -> List[str]:
        business = self.config.get_business(business_id)
        now = self.clock(business.timezone)
        appointments = self.store.list_for_date(business_id, on_date)
        return available_slots(business, on_date, service_id, appointments, now)

    def book(self, business_id: str, request: AppointmentCreate) -> Appointment:
        business = self.config.get_business(business_id)
        now = self.clock(business.timezone)

        # 1) Validate against hours, breaks, past dates and current bookings
        existing = self.store.list_for_date(business_id, request.date)
        try:
            service = check_slot(business, request.date, request.time, request.service_id, existing, now)
            employee = self._resolve_employee(business, request.employee_id, service.id)
        except BookingError as e:
            logger.warning("Booking rejected for %s on %s %s: %s", business_id, request.date, request.time, e)
            raise

        # 2) Snapshot service name/price and create as pending
        appointment = Appointment(
            id=uuid.uuid4().hex,
            business_id=business_id,
            client_id=request.client_id,
            client_name=request.client_name,
            phone=request.phone,
            service_id=service.id,
            service_name=service.name,
            date=request.date,
            time=request.time,
            status=AppointmentStatus.pending,
            employee_id=employee.id if employee else None,
            employee_name=employee.name if employee else None,
            notes=request.notes,
            price=service.price,
            created_at=datetime.now(timezone.utc),
        )

        # 3) Atomic check-and-create
        saved = self.store.create_if_free(appointment)
        logger.info("Booked %s for %s on %s %s", saved.id, business_id, saved.date, saved.time)

        dispatch(self.dispatcher, saved.phone, booking_message(saved, business))
        return saved

    @staticmethod
    def _resolve_employee(business: Business, employee_id: Optional[str], service_id: str) -> Optional[Employee]:
        if not employee_id:
            return None
        employee = business.get_employee(employee_id)
        if employee is None:
            raise ConfigurationMissing(f"Employee '{employee_id}' not found")
        if not employee.performs(service_id):
            raise ConfigurationMissing(f"Employee '{employee_id}' does not perform service '{service_id}'")
        return employee

    def get_appointment(self, appointment_id: str) -> Appointment:
        appointment = self.store.get(appointment_id)
        if appointment is None:
            raise ConfigurationMissing(f"Appointment '{appointment_id}' not found")
        return appointment

    def change_status(
        self,
        appointment_id: str,
        target: AppointmentStatus,
        expected_status: Optional[AppointmentStatus] = None,
    ) -> Appointment:
        current = self.get_appointment(appointment_id)
        expected = AppointmentStatus(expected_status or current.status)
        if expected != current.status:
            raise StaleAppointment(
                f"Appointment '{appointment_id}' is '{current.status.value}', not '{expected.value}'"
            )

        # raises IllegalTransition
        transition(current, target, self.policy)

        saved = self.store.compare_and_set_status(appointment_id, expected, target)
        logger.info("Appointment %s: %s -> %s", appointment_id, expected.value, saved.status.value)

        if saved.status == AppointmentStatus.confirmed:
            business = self.config.get_business(saved.business_id)
            if business.notifications.confirmation_message:
                dispatch(self.dispatcher, saved.phone, confirmation_message(saved, business))

        return saved

    def list_appointments(
        self,
        business_id: str,
        status: Optional[str] = None,
        on_date: Optional[date] = None,
        term: Optional[str] = None,
    ) -> List[Appointment]:
        self.config.get_business(business_id)
        appointments = self.store.list_for_business(business_id, status=status, on_date=on_date)
        term = (term or "").strip().lower()
        if term:
            appointments = [
                a for a in appointments
                if term in a.client_name.lower() or term in a.service_name.lower()
            ]
        return appointments

    def clients(self, business_id: str, term: Optional[str] = None) -> List[Client]:
        self.config.get_business(business_id)
        clients = derive_clients(self.store.list_for_business(business_id))
        return search_clients(clients, term)

    def client_detail(self, business_id: str, identity: str) -> ClientDetail:
        self.config.get_business(business_id)
        appointments = self.store.list_for_client(business_id, identity)
        if not appointments:
            raise ConfigurationMissing(f"Client '{identity}' not found")

        return ClientDetail(
            client=derive_clients(appointments)[0],
            stats=client_stats(appointments, identity),
            appointments=sorted(appointments, key=lambda a: (a.date, a.time), reverse=True),
        )

    def stats(self, business_id: str) -> DashboardStats:
        business = self.config.get_business(business_id)
        today = self.clock(business.timezone).date()
        return dashboard_stats(self.store.list_for_business(business_id), today)

    def reminders(self, business_id: str) -> List[Reminder]:
        business = self.config.get_business(business_id)
        now = self.clock(business.timezone)
        appointments = self.store.list_for_business(business_id)
        return due_reminders(appointments, business, now)
