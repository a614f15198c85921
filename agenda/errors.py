# agenda/errors.py


class BookingError(Exception):
    """Deterministic rejection raised by the scheduling core. Never retried."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ConfigurationMissing(BookingError):
    # no business hours, unknown business, service or employee
    status_code = 404


class IllegalTransition(BookingError):
    status_code = 409

    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot change appointment status from '{current}' to '{target}'")
        self.current = current
        self.target = target


class SlotUnavailable(BookingError):
    status_code = 409


class PastDateRequested(BookingError):
    status_code = 422


class StaleAppointment(BookingError):
    """The appointment changed since it was read (lost compare-and-set)."""

    status_code = 409


class StoreUnavailable(BookingError):
    status_code = 503
