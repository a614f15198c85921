# agenda/core.py

import logging
import re
from datetime import datetime
from typing import Iterable, List, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def parse_hhmm(value: str) -> Tuple[int, int]:
    match = HHMM_PATTERN.match(value or "")
    if match is None:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return int(match.group(1)), int(match.group(2))


def to_minutes(value: str) -> int:
    hour, minute = parse_hhmm(value)
    return hour * 60 + minute


def format_hhmm(hour: int, minute: int) -> str:
    return f"{hour:02d}:{minute:02d}"


def _bounds(item) -> Tuple[str, str]:
    if hasattr(item, "start"):
        return item.start, item.end
    return item[0], item[1]


def in_break(slot: str, breaks: Iterable) -> bool:
    """True when the slot start falls inside [start, end) of any break."""
    slot_minutes = to_minutes(slot)
    for item in breaks:
        start, end = _bounds(item)
        if to_minutes(start) <= slot_minutes < to_minutes(end):
            return True
    return False


def generate_slots(
    open_time: str,
    close_time: str,
    step_minutes: int = 30,
    breaks: Iterable = (),
) -> List[str]:
    """
    Bookable start times for one day: open_time <= slot < close_time,
    step_minutes apart, minus any slot starting inside a break.

    The service duration is not subtracted from close_time, so the last
    slot can run past closing.
    """
    if step_minutes <= 0:
        raise ValueError("step_minutes must be positive")

    breaks = list(breaks)
    hour, minute = parse_hhmm(open_time)
    close = to_minutes(close_time)

    slots = []
    while hour * 60 + minute < close:
        slot = format_hhmm(hour, minute)
        if not in_break(slot, breaks):
            slots.append(slot)
        carry, minute = divmod(minute + step_minutes, 60)
        hour += carry

    return slots


def get_timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Invalid timezone '%s', using UTC", name)
        return ZoneInfo("UTC")


def local_now(timezone_name: str) -> datetime:
    """Current wall-clock time in the business timezone, as a naive datetime."""
    return datetime.now(get_timezone(timezone_name)).replace(tzinfo=None)
