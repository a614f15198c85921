# tests/conftest.py

from datetime import date, datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

import agenda.models  # noqa: F401
from agenda.data import DEFAULT_HOURS
from agenda.db import get_session
from agenda.deps import get_message_dispatcher
from agenda.main import app
from agenda.notifications import LoggingDispatcher
from agenda.schemas import Appointment, Business

# Tuesday
BOOKING_DATE = date(2025, 6, 10)


@pytest.fixture
def business():
    return Business(
        id="barber-1",
        name="Barbería Centro",
        address="Av. Siempre Viva 742",
        business_type="barbershop",
        timezone="America/Argentina/Buenos_Aires",
        hours=DEFAULT_HOURS,
        services=[
            {"id": "1", "name": "Corte de cabello", "duration_minutes": 30, "price": 15},
            {"id": "3", "name": "Corte + Barba", "duration_minutes": 45, "price": 22},
        ],
        employees=[
            {"id": "emp-1", "name": "Carlos", "role": "Barbero", "services": ["1"]},
        ],
    )


@pytest.fixture
def make_appointment():
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        values = {
            "id": f"appt-{counter['n']}",
            "business_id": "barber-1",
            "client_id": "guest",
            "client_name": "Juan Pérez",
            "phone": "+54 11 5555-0001",
            "service_id": "1",
            "service_name": "Corte de cabello",
            "date": BOOKING_DATE,
            "time": "10:00",
            "status": "pending",
            "price": 15,
            "created_at": datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc) + timedelta(minutes=counter["n"]),
        }
        values.update(overrides)
        return Appointment(**values)

    return _make


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def dispatcher():
    return LoggingDispatcher()


@pytest.fixture
def client(engine, dispatcher):
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    app.dependency_overrides[get_message_dispatcher] = lambda: dispatcher
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def upcoming():
    """Date with the given weekday (0=Mon) safely in the future."""

    def _upcoming(weekday: int) -> date:
        day = date.today() + timedelta(days=14)
        while day.weekday() != weekday:
            day += timedelta(days=1)
        return day

    return _upcoming
