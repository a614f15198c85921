# agenda/dashboard.py

from collections import Counter
from datetime import date
from typing import Iterable

from agenda.clients import derive_clients
from agenda.schemas import AppointmentStatus, DashboardStats

EARNING_STATUSES = (AppointmentStatus.confirmed, AppointmentStatus.completed)
TOP_SERVICES = 5


def dashboard_stats(appointments: Iterable, today: date) -> DashboardStats:
    """
    Summary of a business's appointment history.

    Revenue sums the price snapshot of confirmed and completed appointments;
    a missing price counts as 0.
    """
    appointments = list(appointments)

    services = Counter(a.service_name or "Otros" for a in appointments)
    busiest = sorted(services.items(), key=lambda item: (-item[1], item[0]))[:TOP_SERVICES]

    return DashboardStats(
        today=sum(1 for a in appointments if a.date == today),
        pending=sum(1 for a in appointments if a.status == AppointmentStatus.pending),
        confirmed=sum(1 for a in appointments if a.status == AppointmentStatus.confirmed),
        clients=len(derive_clients(appointments)),
        revenue=sum(a.price or 0 for a in appointments if a.status in EARNING_STATUSES),
        services=dict(busiest),
    )
