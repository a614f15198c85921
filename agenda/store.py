# agenda/store.py

"""
Store collaborators: business configuration and appointment persistence.

The core only sees the abstract interfaces; SqlBusinessConfig and
SqlAppointmentStore are the SQLModel-backed implementations used by the API.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import date
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlmodel import Session, select

from agenda.availability import ACTIVE_STATUSES, is_slot_taken
from agenda.clients import client_identity
from agenda.errors import ConfigurationMissing, SlotUnavailable, StaleAppointment, StoreUnavailable
from agenda.models import AppointmentRecord, BusinessRecord, ServiceRecord
from agenda.schemas import Appointment, AppointmentStatus, Business

logger = logging.getLogger(__name__)


def slot_key_for(on_date: date, time: str, status) -> Optional[str]:
    if status in ACTIVE_STATUSES:
        return f"{on_date.isoformat()} {time}"
    return None


@contextmanager
def store_errors(session: Session):
    try:
        yield
    except OperationalError as e:
        session.rollback()
        logger.error("Store unavailable: %s", e)
        raise StoreUnavailable("Appointment store is unavailable") from e


class BusinessConfigProvider(ABC):
    @abstractmethod
    def get_business(self, business_id: str) -> Business:
        """Return the business or raise ConfigurationMissing."""

    @abstractmethod
    def save_business(self, business: Business) -> Business:
        ...


class AppointmentStore(ABC):
    @abstractmethod
    def get(self, appointment_id: str) -> Optional[Appointment]:
        ...

    @abstractmethod
    def list_for_date(self, business_id: str, on_date: date) -> List[Appointment]:
        ...

    @abstractmethod
    def list_for_business(
        self,
        business_id: str,
        status: Optional[str] = None,
        on_date: Optional[date] = None,
    ) -> List[Appointment]:
        ...

    def list_for_client(self, business_id: str, identity: str) -> List[Appointment]:
        return [a for a in self.list_for_business(business_id) if client_identity(a) == identity]

    @abstractmethod
    def create_if_free(self, appointment: Appointment) -> Appointment:
        """Insert the appointment unless its slot is held; raise SlotUnavailable otherwise."""

    @abstractmethod
    def compare_and_set_status(
        self,
        appointment_id: str,
        expected_status: AppointmentStatus,
        new_status: AppointmentStatus,
    ) -> Appointment:
        """Apply the status change only if the stored status is still expected_status."""


class SqlBusinessConfig(BusinessConfigProvider):
    def __init__(self, session: Session):
        self.session = session

    def get_business(self, business_id: str) -> Business:
        with store_errors(self.session):
            record = self.session.get(BusinessRecord, business_id)
            if record is None:
                raise ConfigurationMissing(f"Business '{business_id}' not found")

            services = self.session.exec(
                select(ServiceRecord)
                .where(ServiceRecord.business_id == business_id)
                .order_by(ServiceRecord.position)
            ).all()

        return Business(
            id=record.id,
            name=record.name,
            slogan=record.slogan,
            address=record.address,
            phone=record.phone,
            email=record.email,
            business_type=record.business_type,
            timezone=record.timezone,
            hours=record.hours or [],
            services=[
                {"id": s.id, "name": s.name, "duration_minutes": s.duration_minutes, "price": s.price}
                for s in services
            ],
            employees=record.employees or [],
            notifications=record.notifications or {},
        )

    def save_business(self, business: Business) -> Business:
        with store_errors(self.session):
            record = self.session.get(BusinessRecord, business.id)
            if record is None:
                record = BusinessRecord(id=business.id, name=business.name, timezone=business.timezone)
                self.session.add(record)

            record.name = business.name
            record.slogan = business.slogan
            record.address = business.address
            record.phone = business.phone
            record.email = business.email
            record.business_type = business.business_type.value
            record.timezone = business.timezone
            record.hours = [h.model_dump(mode="json") for h in business.hours]
            record.employees = [e.model_dump() for e in business.employees]
            record.notifications = business.notifications.model_dump()

            # Replace the catalog; appointments keep their own name/price snapshot
            existing = self.session.exec(
                select(ServiceRecord).where(ServiceRecord.business_id == business.id)
            ).all()
            for s in existing:
                self.session.delete(s)
            self.session.flush()

            for position, service in enumerate(business.services):
                self.session.add(
                    ServiceRecord(
                        business_id=business.id,
                        id=service.id,
                        name=service.name,
                        duration_minutes=service.duration_minutes,
                        price=service.price,
                        position=position,
                    )
                )

            self.session.commit()

        logger.info("Saved business %s (%d services)", business.id, len(business.services))
        return self.get_business(business.id)


class SqlAppointmentStore(AppointmentStore):
    def __init__(self, session: Session):
        self.session = session

    def get(self, appointment_id: str) -> Optional[Appointment]:
        with store_errors(self.session):
            record = self.session.get(AppointmentRecord, appointment_id)
        if record is None:
            return None
        return Appointment.model_validate(record)

    def list_for_date(self, business_id: str, on_date: date) -> List[Appointment]:
        return self.list_for_business(business_id, on_date=on_date)

    def list_for_business(
        self,
        business_id: str,
        status: Optional[str] = None,
        on_date: Optional[date] = None,
    ) -> List[Appointment]:
        stmt = select(AppointmentRecord).where(AppointmentRecord.business_id == business_id)

        if on_date is not None:
            stmt = stmt.where(AppointmentRecord.date == on_date)

        if status is not None:
            stmt = stmt.where(AppointmentRecord.status == AppointmentStatus(status).value)

        stmt = stmt.order_by(AppointmentRecord.date, AppointmentRecord.time)

        with store_errors(self.session):
            records = self.session.exec(stmt).all()
        return [Appointment.model_validate(r) for r in records]

    def create_if_free(self, appointment: Appointment) -> Appointment:
        with store_errors(self.session):
            # 1) Read current bookings for the date and reject if the slot is held
            existing = self.list_for_date(appointment.business_id, appointment.date)
            if is_slot_taken(existing, appointment.business_id, appointment.date, appointment.time):
                raise SlotUnavailable(
                    f"{appointment.date.isoformat()} {appointment.time} is already booked"
                )

            # 2) Insert; the unique slot_key closes the race with a concurrent booker
            values = appointment.model_dump()
            values["status"] = AppointmentStatus(appointment.status).value
            record = AppointmentRecord(
                **values,
                slot_key=slot_key_for(appointment.date, appointment.time, appointment.status),
                version=1,
            )
            self.session.add(record)
            try:
                self.session.commit()
            except IntegrityError:
                self.session.rollback()
                raise SlotUnavailable(
                    f"{appointment.date.isoformat()} {appointment.time} is already booked"
                )

            self.session.refresh(record)
        return Appointment.model_validate(record)

    def compare_and_set_status(
        self,
        appointment_id: str,
        expected_status: AppointmentStatus,
        new_status: AppointmentStatus,
    ) -> Appointment:
        expected_status = AppointmentStatus(expected_status)
        new_status = AppointmentStatus(new_status)

        with store_errors(self.session):
            current = self.session.get(AppointmentRecord, appointment_id)
            if current is None:
                raise ConfigurationMissing(f"Appointment '{appointment_id}' not found")

            stmt = (
                update(AppointmentRecord)
                .where(AppointmentRecord.id == appointment_id)
                .where(AppointmentRecord.status == expected_status.value)
                .values(
                    status=new_status.value,
                    slot_key=slot_key_for(current.date, current.time, new_status),
                    version=AppointmentRecord.version + 1,
                )
            )
            try:
                result = self.session.execute(stmt)
            except IntegrityError:
                self.session.rollback()
                raise SlotUnavailable(
                    f"{current.date.isoformat()} {current.time} was booked by another appointment"
                )

            if result.rowcount == 0:
                self.session.rollback()
                logger.warning(
                    "Stale status change on %s: expected %s", appointment_id, expected_status.value
                )
                raise StaleAppointment(
                    f"Appointment '{appointment_id}' is no longer '{expected_status.value}'"
                )

            self.session.commit()

            # the bulk UPDATE bypassed the identity map
            self.session.expire_all()
            record = self.session.get(AppointmentRecord, appointment_id)
        return Appointment.model_validate(record)
