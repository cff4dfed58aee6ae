# src/scenarios/events.py
"""
Scripted scenario timelines.
A Scenario is a named window of the depot day with a list of timed events;
EventQueue hands them out in time order as the simulated clock passes them.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple
import heapq

from orchestrated_depot.src.fleet.schedule import hhmm_to_minutes


class EventType(Enum):
    """Types of scripted scenario events"""
    FAULT = "fault"
    WEATHER = "weather"
    DELAY = "delay"
    ALERT = "alert"
    RESOLUTION = "resolution"
    DEPARTURE = "departure"
    ARRIVAL = "arrival"


@dataclass
class ScenarioEvent:
    """One timed event on a scenario timeline"""
    event_id: str
    time: str                   # HH:MM
    event_type: EventType
    title: str
    description: str = ""
    sequence: int = 0           # Position in the source timeline, breaks time ties

    # Effects
    vehicle_ids: Tuple[str, ...] = ()
    charger_ids: Tuple[str, ...] = ()
    fault_type: Optional[str] = None
    temperature_change: float = 0.0

    highlight: bool = False

    def __post_init__(self):
        hhmm_to_minutes(self.time)

    @property
    def minutes(self) -> int:
        return hhmm_to_minutes(self.time)

    def __lt__(self, other: "ScenarioEvent") -> bool:
        """For heap ordering (min-heap by time)"""
        if self.minutes != other.minutes:
            return self.minutes < other.minutes
        return self.sequence < other.sequence

    def __repr__(self) -> str:
        return f"Event(t={self.time}, type={self.event_type.value}, id={self.event_id})"


@dataclass
class Scenario:
    scenario_id: str
    name: str
    description: str
    start_time: str
    end_time: str
    difficulty: str = "Medium"
    tags: List[str] = field(default_factory=list)
    initial_temperature: Optional[float] = None
    events: List[ScenarioEvent] = field(default_factory=list)

    def __post_init__(self):
        if hhmm_to_minutes(self.end_time) < hhmm_to_minutes(self.start_time):
            raise ValueError(f"Scenario {self.scenario_id} ends before it starts")

    @property
    def duration_minutes(self) -> int:
        return hhmm_to_minutes(self.end_time) - hhmm_to_minutes(self.start_time)


def find_scenario(scenarios: List[Scenario], scenario_id: str) -> Scenario:
    for scenario in scenarios:
        if scenario.scenario_id == scenario_id:
            return scenario
    known = ", ".join(s.scenario_id for s in scenarios) or "none"
    raise ValueError(f"Unknown scenario {scenario_id!r} (known: {known})")


class EventQueue:
    """
    Priority queue of scenario events.

    Usage:
        queue = EventQueue()
        queue.add_events(scenario.events)
        due = queue.pop_due(until_minutes=375)  # everything at or before 06:15
    """

    def __init__(self):
        self.queue: List[ScenarioEvent] = []  # min-heap

    def add_event(self, event: ScenarioEvent) -> None:
        heapq.heappush(self.queue, event)

    def add_events(self, events: List[ScenarioEvent]) -> None:
        for event in events:
            self.add_event(event)

    def pop_due(self, until_minutes: int) -> List[ScenarioEvent]:
        """Remove and return every event at or before `until_minutes`, in order."""
        due = []
        while self.queue and self.queue[0].minutes <= until_minutes:
            due.append(heapq.heappop(self.queue))
        return due

    def peek_next_time(self) -> Optional[str]:
        if self.queue:
            return self.queue[0].time
        return None

    def is_empty(self) -> bool:
        return len(self.queue) == 0

    def size(self) -> int:
        return len(self.queue)

    def clear(self) -> None:
        self.queue.clear()

    def __repr__(self) -> str:
        return f"EventQueue(size={len(self.queue)})"
