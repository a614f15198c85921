# agenda/hours.py

from datetime import date
from typing import Dict, Iterable, List, Optional

from agenda.core import generate_slots
from agenda.schemas import DaySchedule, WeekDay


class WeeklyHoursTable:
    """
    Weekly opening template of a business: one DaySchedule per weekday.

    A weekday with no entry is treated as closed; lookups never raise.
    """

    def __init__(self, hours: Iterable[DaySchedule]):
        self._by_day: Dict[WeekDay, DaySchedule] = {h.day: h for h in hours}

    def schedule_for(self, day: WeekDay) -> Optional[DaySchedule]:
        schedule = self._by_day.get(day)
        if schedule is None or not schedule.is_open:
            return None
        return schedule

    def schedule_on(self, on_date: date) -> Optional[DaySchedule]:
        return self.schedule_for(WeekDay.from_date(on_date))

    def is_open(self, on_date: date) -> bool:
        return self.schedule_on(on_date) is not None

    def slots_on(self, on_date: date, step_minutes: int = 30) -> List[str]:
        schedule = self.schedule_on(on_date)
        if schedule is None:
            return []
        return generate_slots(
            schedule.open_time,
            schedule.close_time,
            step_minutes,
            breaks=schedule.breaks,
        )
