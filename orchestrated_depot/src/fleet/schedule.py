# src/fleet/schedule.py
"""
Scheduled duties (blocks) and HH:MM helpers.
Times are minutes after midnight with no date component.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class DutyStatus(str, Enum):
    SCHEDULED = "Scheduled"
    AT_RISK = "At Risk"
    CRITICAL = "Critical"
    DEPARTED = "Departed"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


TERMINAL_DUTY_STATUSES = (DutyStatus.DEPARTED, DutyStatus.COMPLETED, DutyStatus.CANCELLED)


def hhmm_to_minutes(value: str) -> int:
    """'06:15' -> 375. Raises ValueError on malformed input."""
    try:
        hours, minutes = (int(part) for part in str(value).strip().split(":"))
    except ValueError:
        raise ValueError(f"Expected HH:MM time, got {value!r}") from None
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValueError(f"Expected HH:MM time, got {value!r}")
    return hours * 60 + minutes


def minute_of_day(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


@dataclass
class ScheduledDuty:
    duty_id: str
    depot_id: str
    vehicle_id: str

    # Timing (HH:MM, 24h local)
    departure_time: str
    return_time: str = ""

    # Route
    route_id: str = ""
    route_name: str = ""
    distance_km: float = 0.0
    estimated_energy_kwh: float = 0.0

    # Crew
    driver: str = ""
    driver_id: str = ""

    required_soc: float = 90.0
    status: DutyStatus = DutyStatus.SCHEDULED

    def __post_init__(self):
        hhmm_to_minutes(self.departure_time)  # validate early

    @property
    def departure_minutes(self) -> int:
        return hhmm_to_minutes(self.departure_time)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_DUTY_STATUSES

    def minutes_until_departure(self, current_time: datetime) -> int:
        # Same-day arithmetic only; a 00:10 departure seen at 23:50 reads as past
        return self.departure_minutes - minute_of_day(current_time)
