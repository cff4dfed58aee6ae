# src/core/route.py
import math
from dataclasses import dataclass, field
from typing import List, Optional

from .geometry import Location


@dataclass
class Route:
    """
    A bus route described by an ordered waypoint polyline.
    The simulation treats every route as a loop: progress wraps from 1 back to 0.
    """
    route_id: str
    name: str
    depot_id: str
    waypoints: List[Location] = field(default_factory=list)
    distance_km: Optional[float] = None            # None -> derived from waypoints
    estimated_duration_min: float = 0.0
    average_energy_kwh: float = 0.0
    elevation_gain: float = 0.0
    stops: int = 0

    def position_at(self, progress: float) -> Optional[Location]:
        """
        Interpolate a position for a lap fraction in [0, 1).
        Returns None when there are fewer than two waypoints.
        """
        if len(self.waypoints) < 2:
            return None

        total_segments = len(self.waypoints) - 1
        scaled = progress * total_segments
        segment_index = min(int(math.floor(scaled)), total_segments)
        ratio = scaled - segment_index
        next_index = min(segment_index + 1, total_segments)

        return self.waypoints[segment_index].lerp(self.waypoints[next_index], ratio)

    @property
    def length_km(self) -> float:
        if self.distance_km is not None:
            return self.distance_km
        return sum(
            a.distance_km(b) for a, b in zip(self.waypoints, self.waypoints[1:])
        )

    def __len__(self) -> int:
        return len(self.waypoints)

    def __str__(self) -> str:
        return f"Route {self.route_id} - {self.name} ({len(self)} waypoints)"
