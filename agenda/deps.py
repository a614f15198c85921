# agenda/deps.py

from fastapi import Depends
from sqlmodel import Session

from agenda.booking import BookingService
from agenda.data import shop_settings
from agenda.db import get_session
from agenda.notifications import MessageDispatcher, get_dispatcher
from agenda.store import SqlAppointmentStore, SqlBusinessConfig


def get_message_dispatcher() -> MessageDispatcher:
    return get_dispatcher(shop_settings["dispatcher"])


def get_config(session: Session = Depends(get_session)) -> SqlBusinessConfig:
    return SqlBusinessConfig(session)


def get_booking_service(
    session: Session = Depends(get_session),
    dispatcher: MessageDispatcher = Depends(get_message_dispatcher),
) -> BookingService:
    return BookingService(
        config=SqlBusinessConfig(session),
        store=SqlAppointmentStore(session),
        dispatcher=dispatcher,
        policy=shop_settings["transition_policy"],
    )
