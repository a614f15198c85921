# agenda/models.py

from typing import Optional, List
from datetime import datetime, date as Date

from sqlalchemy import UniqueConstraint
from sqlalchemy.types import JSON
from sqlmodel import SQLModel, Field, Column


class BusinessRecord(SQLModel, table=True):
    __tablename__ = "business"

    id: str = Field(primary_key=True)
    name: str
    slogan: str = ""
    address: str = ""
    phone: str = ""
    email: str = ""
    business_type: str = "other"
    timezone: str
    hours: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    employees: List[dict] = Field(default_factory=list, sa_column=Column(JSON))
    notifications: dict = Field(default_factory=dict, sa_column=Column(JSON))


class ServiceRecord(SQLModel, table=True):
    __tablename__ = "service"

    business_id: str = Field(primary_key=True, foreign_key="business.id")
    id: str = Field(primary_key=True)
    name: str
    duration_minutes: int
    price: float = 0
    position: int = 0


class AppointmentRecord(SQLModel, table=True):
    __tablename__ = "appointment"
    __table_args__ = (
        # one active booking per business calendar slot; cancelled rows have slot_key NULL
        UniqueConstraint("business_id", "slot_key", name="uq_business_slot"),
    )

    id: str = Field(primary_key=True)
    business_id: str = Field(index=True, foreign_key="business.id")
    client_id: str = Field(index=True)
    client_name: str
    phone: str = Field(index=True)
    service_id: str
    service_name: str
    date: Date = Field(index=True)
    time: str
    status: str = "pending"
    employee_id: Optional[str] = None
    employee_name: Optional[str] = None
    notes: Optional[str] = None
    price: Optional[float] = None
    created_at: datetime
    slot_key: Optional[str] = None
    version: int = 1
