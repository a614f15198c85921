# agenda/notifications.py

"""
Message composition for appointment notifications.

The core only builds message text; delivery goes through a
MessageDispatcher so that no network call happens here.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Iterable, List
from urllib.parse import quote

from agenda.clients import normalize_phone
from agenda.core import parse_hhmm
from agenda.schemas import AppointmentStatus, Business, Reminder

logger = logging.getLogger(__name__)

MONTHS = [
    "enero", "febrero", "marzo", "abril", "mayo", "junio",
    "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
]


def format_long_date(value) -> str:
    return f"{value.day} de {MONTHS[value.month - 1]} de {value.year}"


def confirmation_message(appointment, business: Business) -> str:
    return (
        f"Hola {appointment.client_name}!\n\n"
        f"Te confirmamos que tu turno en *{business.name}* ha sido aceptado.\n\n"
        f"Fecha: {appointment.date.isoformat()}\n"
        f"Hora: {appointment.time}\n"
        f"Servicio: {appointment.service_name}\n\n"
        f"Direccion: {business.address or 'Consultar'}\n\n"
        f"Te esperamos!"
    )


def booking_message(appointment, business: Business) -> str:
    return (
        f"¡Turno agendado en {business.name}! "
        f"Te esperamos el {format_long_date(appointment.date)} a las {appointment.time}."
    )


def reminder_message(appointment, business: Business) -> str:
    # plain replace: custom templates may contain other braces
    values = {
        "{nombre}": appointment.client_name,
        "{servicio}": appointment.service_name,
        "{fecha}": appointment.date.isoformat(),
        "{hora}": appointment.time,
        "{negocio}": business.name,
        "{direccion}": business.address or "Consultar",
    }
    message = business.notifications.custom_message
    for placeholder, value in values.items():
        message = message.replace(placeholder, value)
    return message


def appointment_start(appointment) -> datetime:
    hour, minute = parse_hhmm(appointment.time)
    return datetime.combine(appointment.date, datetime.min.time()).replace(hour=hour, minute=minute)


def due_reminders(appointments: Iterable, business: Business, now: datetime) -> List[Reminder]:
    """Reminders for pending/confirmed appointments starting within reminder_hours of now."""
    settings = business.notifications
    if not settings.whatsapp_reminder:
        return []

    horizon = now + timedelta(hours=settings.reminder_hours)
    due = []
    for a in sorted(appointments, key=appointment_start):
        if a.business_id != business.id:
            continue
        if a.status not in (AppointmentStatus.pending, AppointmentStatus.confirmed):
            continue
        if now <= appointment_start(a) <= horizon:
            due.append(Reminder(appointment_id=a.id, phone=a.phone, message=reminder_message(a, business)))
    return due


class MessageDispatcher(ABC):
    @abstractmethod
    def send(self, phone: str, message: str) -> None:
        ...


class LoggingDispatcher(MessageDispatcher):
    def __init__(self):
        self.sent = []

    def send(self, phone: str, message: str) -> None:
        self.sent.append((phone, message))
        logger.info("Message for %s: %s", phone, message)


class WhatsAppLinkDispatcher(MessageDispatcher):
    """Builds the wa.me click-to-chat link; opening it is left to the client app."""

    def __init__(self):
        self.links = []

    @staticmethod
    def link_for(phone: str, message: str) -> str:
        return f"https://wa.me/{normalize_phone(phone)}?text={quote(message)}"

    def send(self, phone: str, message: str) -> None:
        link = self.link_for(phone, message)
        self.links.append(link)
        logger.info("WhatsApp link for %s: %s", phone, link)


DISPATCHERS = {
    "log": LoggingDispatcher,
    "whatsapp": WhatsAppLinkDispatcher,
}


def get_dispatcher(name: str) -> MessageDispatcher:
    if name not in DISPATCHERS:
        raise ValueError(f"Unknown dispatcher '{name}'")
    return DISPATCHERS[name]()


def dispatch(dispatcher: MessageDispatcher, phone: str, message: str) -> bool:
    try:
        dispatcher.send(phone, message)
    except Exception:
        # delivery is best effort; the appointment change is already committed
        logger.exception("Failed to send message to %s", phone)
        return False
    return True
