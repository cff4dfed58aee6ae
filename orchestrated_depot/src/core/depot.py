# src/core/depot.py
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .geometry import Location


@dataclass(frozen=True)
class GridConstraint:
    """Time-windowed cap on depot draw, optionally limited to some months."""
    start_hour: int
    end_hour: int                               # exclusive
    max_capacity_percent: float
    description: str = ""
    months: Optional[Tuple[int, ...]] = None    # 1-12; None -> every month

    def applies_at(self, hour: int, month: int) -> bool:
        in_window = self.start_hour <= hour < self.end_hour
        in_months = self.months is None or month in self.months
        return in_window and in_months


@dataclass
class Depot:
    depot_id: str
    name: str
    location: Location
    address: str = ""

    # Grid
    max_capacity_mw: float = 1.0
    current_load_kw: float = 0.0
    constraints: List[GridConstraint] = field(default_factory=list)

    # Stats (refreshed every tick)
    total_chargers: int = 0
    active_chargers: int = 0
    total_vehicles: int = 0
    vehicles_on_site: int = 0

    @property
    def max_capacity_kw(self) -> float:
        return self.max_capacity_mw * 1000

    def active_constraint(self, hour: int, month: int) -> Optional[GridConstraint]:
        """Most restrictive constraint in force, ignoring 100% "no restriction" entries."""
        matching = [
            c for c in self.constraints
            if c.applies_at(hour, month) and c.max_capacity_percent < 100
        ]
        if not matching:
            return None
        return min(matching, key=lambda c: c.max_capacity_percent)

    def effective_capacity_kw(self, hour: int, month: int) -> float:
        constraint = self.active_constraint(hour, month)
        percent = constraint.max_capacity_percent if constraint else 100.0
        return self.max_capacity_kw * percent / 100
