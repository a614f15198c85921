# agenda/routers/appointments_routes.py

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from agenda.booking import BookingService
from agenda.deps import get_booking_service
from agenda.schemas import Appointment, AppointmentCreate, AppointmentStatus, Reminder, StatusUpdate

router = APIRouter(
    tags=["appointments"],
)

STATUS_FILTERS = [s.value for s in AppointmentStatus] + ["all"]


@router.post("/businesses/{business_id}/appointments", response_model=Appointment, status_code=201)
def create_appointment(
    business_id: str,
    appt: AppointmentCreate,
    service: BookingService = Depends(get_booking_service),
):
    return service.book(business_id, appt)


@router.get("/businesses/{business_id}/appointments", response_model=List[Appointment])
def list_appointments(
    business_id: str,
    status: Optional[str] = "all",
    on_date: Optional[date] = None,
    q: Optional[str] = None,
    service: BookingService = Depends(get_booking_service),
):
    if status not in STATUS_FILTERS:
        raise HTTPException(status_code=422, detail=f"status must be one of {', '.join(STATUS_FILTERS)}")

    return service.list_appointments(
        business_id,
        status=None if status == "all" else status,
        on_date=on_date,
        term=q,
    )


@router.get("/appointments/{appt_id}", response_model=Appointment)
def get_appointment(
    appt_id: str,
    service: BookingService = Depends(get_booking_service),
):
    return service.get_appointment(appt_id)


@router.patch("/appointments/{appt_id}/status", response_model=Appointment)
def update_status(
    appt_id: str,
    update: StatusUpdate,
    service: BookingService = Depends(get_booking_service),
):
    return service.change_status(appt_id, update.status, expected_status=update.expected_status)


@router.get("/businesses/{business_id}/reminders", response_model=List[Reminder])
def list_due_reminders(
    business_id: str,
    service: BookingService = Depends(get_booking_service),
):
    return service.reminders(business_id)
