# agenda/availability.py

import logging
from datetime import date, datetime
from typing import Iterable, List, Optional

from agenda.core import in_break, to_minutes
from agenda.data import shop_settings
from agenda.errors import ConfigurationMissing, PastDateRequested, SlotUnavailable
from agenda.hours import WeeklyHoursTable
from agenda.schemas import AppointmentStatus, Business, Service

logger = logging.getLogger(__name__)

# statuses that hold a slot; a cancelled appointment frees it
ACTIVE_STATUSES = (
    AppointmentStatus.pending,
    AppointmentStatus.confirmed,
    AppointmentStatus.completed,
)


def is_slot_taken(
    appointments: Iterable,
    business_id: str,
    on_date: date,
    time: str,
    exclude_id: Optional[str] = None,
) -> bool:
    for a in appointments:
        if exclude_id is not None and a.id == exclude_id:
            continue
        if a.business_id != business_id or a.date != on_date or a.time != time:
            continue
        if a.status in ACTIVE_STATUSES:
            return True
    return False


def _resolve_service(business: Business, service_id: str) -> Service:
    service = business.get_service(service_id)
    if service is None:
        raise ConfigurationMissing(f"Service '{service_id}' not offered by business '{business.id}'")
    return service


def available_slots(
    business: Business,
    on_date: date,
    service_id: str,
    appointments: Iterable,
    now: datetime,
    step_minutes: Optional[int] = None,
) -> List[str]:
    """
    Start times a client can still book on on_date.

    Algorithm:
        1. Resolve the service (ConfigurationMissing if unknown)
        2. Closed day or past date -> []
        3. Generate the day's slots (breaks already removed)
        4. Drop slots held by a pending/confirmed/completed appointment
        5. On today, drop slots that already started
    """
    _resolve_service(business, service_id)
    step_minutes = step_minutes or shop_settings["slot_minutes"]

    table = WeeklyHoursTable(business.hours)
    if not table.is_open(on_date):
        return []

    today = now.date()
    if on_date < today:
        return []

    taken = {
        a.time
        for a in appointments
        if a.business_id == business.id and a.date == on_date and a.status in ACTIVE_STATUSES
    }

    now_minutes = now.hour * 60 + now.minute
    available = []
    for slot in table.slots_on(on_date, step_minutes):
        if slot in taken:
            continue
        if on_date == today and to_minutes(slot) <= now_minutes:
            continue
        available.append(slot)

    return available


def check_slot(
    business: Business,
    on_date: date,
    time: str,
    service_id: str,
    appointments: Iterable,
    now: datetime,
    step_minutes: Optional[int] = None,
    exclude_id: Optional[str] = None,
) -> Service:
    """Validate a requested booking and return the service it is for."""
    service = _resolve_service(business, service_id)
    step_minutes = step_minutes or shop_settings["slot_minutes"]

    # 1) No booking in the past (business local time)
    today = now.date()
    if on_date < today:
        raise PastDateRequested(f"Cannot book an appointment in the past ({on_date.isoformat()})")
    if on_date == today and to_minutes(time) <= now.hour * 60 + now.minute:
        raise PastDateRequested(f"Cannot book an appointment in the past ({on_date.isoformat()} {time})")

    # 2) Business must be open that day
    table = WeeklyHoursTable(business.hours)
    schedule = table.schedule_on(on_date)
    if schedule is None:
        raise SlotUnavailable(f"Business is closed on {on_date.isoformat()}")

    # 3) Time must be one of the generated slots
    if in_break(time, schedule.breaks):
        raise SlotUnavailable(f"{time} falls inside a break")
    if time not in table.slots_on(on_date, step_minutes):
        raise SlotUnavailable(f"{time} is not a bookable start time on {on_date.isoformat()}")

    # 4) Not already taken
    if is_slot_taken(appointments, business.id, on_date, time, exclude_id=exclude_id):
        raise SlotUnavailable(f"{on_date.isoformat()} {time} is already booked")

    return service
