# agenda/transitions.py

import logging
from typing import Dict, FrozenSet, Optional

from agenda.data import shop_settings
from agenda.errors import IllegalTransition
from agenda.schemas import Appointment, AppointmentStatus

logger = logging.getLogger(__name__)

STRICT = "strict"
PERMISSIVE = "permissive"

# completed/cancelled -> pending is the explicit "reopen" action
ALLOWED_TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.pending: frozenset({AppointmentStatus.confirmed, AppointmentStatus.cancelled}),
    AppointmentStatus.confirmed: frozenset({AppointmentStatus.completed, AppointmentStatus.cancelled}),
    AppointmentStatus.completed: frozenset({AppointmentStatus.pending}),
    AppointmentStatus.cancelled: frozenset({AppointmentStatus.pending}),
}


def allowed_transitions(status, policy: Optional[str] = None) -> FrozenSet[AppointmentStatus]:
    status = AppointmentStatus(status)
    policy = policy or shop_settings["transition_policy"]
    if policy == PERMISSIVE:
        return frozenset(s for s in AppointmentStatus if s != status)
    if policy != STRICT:
        raise ValueError(f"Unknown transition policy '{policy}'")
    return ALLOWED_TRANSITIONS[status]


def can_transition(current, target, policy: Optional[str] = None) -> bool:
    return AppointmentStatus(target) in allowed_transitions(current, policy)


def transition(appointment: Appointment, target, policy: Optional[str] = None) -> Appointment:
    """Return a copy of the appointment in the target status, or raise IllegalTransition."""
    current = AppointmentStatus(appointment.status)
    target = AppointmentStatus(target)
    if not can_transition(current, target, policy):
        raise IllegalTransition(current.value, target.value)

    logger.debug("Appointment %s: %s -> %s", appointment.id, current.value, target.value)
    return appointment.model_copy(update={"status": target})
