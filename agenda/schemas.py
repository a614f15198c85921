# agenda/schemas.py

from datetime import datetime, date, timezone
from enum import Enum
from typing import Annotated, Dict, List, Optional

from pydantic import AfterValidator, BaseModel, Field, StringConstraints, field_validator, model_validator

from agenda.core import parse_hhmm, to_minutes
from agenda.data import DEFAULT_NOTIFICATIONS, GUEST_CLIENT_ID

WEEKDAY_LABELS = ["Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado", "Domingo"]


class WeekDay(str, Enum):
    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"
    friday = "friday"
    saturday = "saturday"
    sunday = "sunday"

    @property
    def number(self) -> int:
        # 0=Mon ... 6=Sun, same as date.weekday()
        return list(WeekDay).index(self)

    @property
    def label(self) -> str:
        return WEEKDAY_LABELS[self.number]

    @classmethod
    def from_date(cls, on_date: date) -> "WeekDay":
        return list(cls)[on_date.weekday()]

    @classmethod
    def from_label(cls, value: str) -> "WeekDay":
        for day in cls:
            if value.lower() in (day.value, day.label.lower()):
                return day
        raise ValueError(f"Unknown weekday '{value}'")


class AppointmentStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"


class BusinessType(str, Enum):
    barbershop = "barbershop"
    salon = "salon"
    restaurant = "restaurant"
    clinic = "clinic"
    spa = "spa"
    gym = "gym"
    other = "other"


def _check_hhmm(value: str) -> str:
    parse_hhmm(value)
    return value


HHMM = Annotated[str, AfterValidator(_check_hhmm)]
NonBlank = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class TimeRange(BaseModel):
    start: HHMM
    end: HHMM

    @model_validator(mode="after")
    def check_order(self):
        if to_minutes(self.start) >= to_minutes(self.end):
            raise ValueError("break start must be before break end")
        return self


class DaySchedule(BaseModel):
    day: WeekDay
    is_open: bool = False
    open_time: HHMM = "09:00"
    close_time: HHMM = "18:00"
    breaks: List[TimeRange] = []

    @field_validator("day", mode="before")
    @classmethod
    def accept_labels(cls, value):
        if isinstance(value, str):
            return WeekDay.from_label(value)
        return value

    @model_validator(mode="after")
    def check_bounds(self):
        if not self.is_open:
            return self
        open_minutes = to_minutes(self.open_time)
        close_minutes = to_minutes(self.close_time)
        if open_minutes >= close_minutes:
            raise ValueError("open_time must be before close_time")

        self.breaks = sorted(self.breaks, key=lambda b: to_minutes(b.start))
        previous_end = None
        for b in self.breaks:
            if to_minutes(b.start) < open_minutes or to_minutes(b.end) > close_minutes:
                raise ValueError("breaks must be within opening hours")
            if previous_end is not None and to_minutes(b.start) < previous_end:
                raise ValueError("breaks cannot overlap")
            previous_end = to_minutes(b.end)
        return self


class Service(BaseModel):
    id: str
    name: str
    duration_minutes: int = Field(gt=0)
    price: float = Field(default=0, ge=0)


class NotificationSettings(BaseModel):
    whatsapp_reminder: bool = DEFAULT_NOTIFICATIONS["whatsapp_reminder"]
    reminder_hours: int = Field(default=DEFAULT_NOTIFICATIONS["reminder_hours"], ge=0)
    confirmation_message: bool = DEFAULT_NOTIFICATIONS["confirmation_message"]
    custom_message: str = DEFAULT_NOTIFICATIONS["custom_message"]


class Employee(BaseModel):
    id: str
    name: NonBlank
    role: str = ""
    # ids of the services this employee can perform
    services: List[str] = []

    def performs(self, service_id: str) -> bool:
        return service_id in self.services


class BusinessConfig(BaseModel):
    name: str
    slogan: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    business_type: BusinessType = BusinessType.other
    timezone: Optional[str] = None
    hours: Optional[List[DaySchedule]] = None
    services: Optional[List[Service]] = None
    employees: List[Employee] = []
    notifications: NotificationSettings = Field(default_factory=NotificationSettings)

    @field_validator("services")
    @classmethod
    def unique_service_ids(cls, value):
        if value is not None:
            ids = [s.id for s in value]
            if len(ids) != len(set(ids)):
                raise ValueError("service ids must be unique within a business")
        return value

    @field_validator("employees")
    @classmethod
    def unique_employee_ids(cls, value):
        ids = [e.id for e in value]
        if len(ids) != len(set(ids)):
            raise ValueError("employee ids must be unique within a business")
        return value

    @field_validator("hours")
    @classmethod
    def unique_days(cls, value):
        if value is not None:
            days = [h.day for h in value]
            if len(days) != len(set(days)):
                raise ValueError("hours cannot repeat a weekday")
        return value


class Business(BusinessConfig):
    id: str
    timezone: str
    hours: List[DaySchedule] = []
    services: List[Service] = []

    def get_service(self, service_id: str) -> Optional[Service]:
        for service in self.services:
            if service.id == service_id:
                return service
        return None

    def get_employee(self, employee_id: str) -> Optional[Employee]:
        for employee in self.employees:
            if employee.id == employee_id:
                return employee
        return None


class Appointment(BaseModel):
    id: str
    business_id: str
    client_id: str = GUEST_CLIENT_ID
    client_name: str
    phone: str
    service_id: str
    service_name: str
    date: date
    time: HHMM
    status: AppointmentStatus = AppointmentStatus.pending
    employee_id: Optional[str] = None
    employee_name: Optional[str] = None
    notes: Optional[str] = None
    price: Optional[float] = None
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("created_at")
    @classmethod
    def as_utc(cls, value: datetime) -> datetime:
        # naive values (SQLite reads, fixtures) are taken as UTC
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class AppointmentCreate(BaseModel):
    client_id: str = GUEST_CLIENT_ID
    client_name: NonBlank
    phone: NonBlank
    service_id: str
    date: date
    time: HHMM
    employee_id: Optional[str] = None
    notes: Optional[str] = None


class StatusUpdate(BaseModel):
    status: AppointmentStatus
    # compare-and-set token: the status the caller last saw
    expected_status: Optional[AppointmentStatus] = None


class AvailabilityResponse(BaseModel):
    business_id: str
    date: date
    service_id: str
    available_starts: List[str]


class Client(BaseModel):
    id: str
    name: str
    phone: str
    email: Optional[str] = None
    created_at: Optional[datetime] = None


class ClientStats(BaseModel):
    total: int = 0
    completed: int = 0
    cancelled: int = 0
    last_visit: Optional[date] = None


class ClientDetail(BaseModel):
    client: Client
    stats: ClientStats
    appointments: List[Appointment]


class DashboardStats(BaseModel):
    today: int = 0
    pending: int = 0
    confirmed: int = 0
    clients: int = 0
    # price snapshots of confirmed + completed appointments
    revenue: float = 0
    # service name -> appointment count, busiest first
    services: Dict[str, int] = {}


class Reminder(BaseModel):
    appointment_id: str
    phone: str
    message: str
