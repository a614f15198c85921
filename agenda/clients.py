# agenda/clients.py

import re
from typing import Dict, Iterable, List

from agenda.data import GUEST_CLIENT_ID
from agenda.schemas import AppointmentStatus, Client, ClientStats


def normalize_phone(phone: str) -> str:
    return re.sub(r"[^0-9]", "", phone or "")


def client_identity(appointment) -> str:
    """client_id, or the digits of the phone number for guest bookings."""
    if appointment.client_id and appointment.client_id != GUEST_CLIENT_ID:
        return appointment.client_id
    return normalize_phone(appointment.phone)


def _recency(appointment):
    return (appointment.date, appointment.created_at, appointment.id)


def _group(appointments: Iterable) -> Dict[str, list]:
    groups: Dict[str, list] = {}
    for a in appointments:
        groups.setdefault(client_identity(a), []).append(a)
    return groups


def derive_clients(appointments: Iterable) -> List[Client]:
    """
    One Client per identity, folded from the appointment history.

    Name and phone come from the identity's most recent appointment,
    created_at from its earliest one. Output is sorted by identity so the
    result does not depend on input order.
    """
    clients = []
    for identity, group in sorted(_group(appointments).items()):
        latest = max(group, key=_recency)
        clients.append(
            Client(
                id=identity,
                name=latest.client_name,
                phone=latest.phone,
                created_at=min(a.created_at for a in group),
            )
        )
    return clients


def client_stats(appointments: Iterable, identity: str) -> ClientStats:
    group = [a for a in appointments if client_identity(a) == identity]
    if not group:
        return ClientStats()

    return ClientStats(
        total=len(group),
        completed=sum(1 for a in group if a.status == AppointmentStatus.completed),
        cancelled=sum(1 for a in group if a.status == AppointmentStatus.cancelled),
        last_visit=max(group, key=_recency).date,
    )


def search_clients(clients: Iterable[Client], term: str) -> List[Client]:
    term = (term or "").strip().lower()
    if not term:
        return list(clients)

    matches = []
    for client in clients:
        if term in client.name.lower() or term in client.phone:
            matches.append(client)
        elif client.email and term in client.email.lower():
            matches.append(client)
    return matches
