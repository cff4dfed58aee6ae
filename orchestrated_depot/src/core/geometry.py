# src/core/geometry.py
from dataclasses import dataclass
from typing import Tuple

from geopy.distance import geodesic


@dataclass(frozen=True)
class Location:
    lat: float
    lon: float

    @property
    def tuple_latlon(self) -> Tuple[float, float]:
        return (self.lat, self.lon)

    def distance_km(self, other: "Location") -> float:
        return geodesic(self.tuple_latlon, other.tuple_latlon).kilometers

    def lerp(self, other: "Location", ratio: float) -> "Location":
        """Straight-line interpolation in lat/lon space (fine at depot scale)."""
        return Location(
            lat=self.lat + (other.lat - self.lat) * ratio,
            lon=self.lon + (other.lon - self.lon) * ratio,
        )
