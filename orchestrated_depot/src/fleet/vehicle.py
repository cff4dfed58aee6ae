# src/fleet/vehicle.py
"""
Electric bus record: charge state, position, battery telemetry and duty linkage.
Vehicles are treated as values; the clock and executor produce updated copies.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from orchestrated_depot.src.core.geometry import Location


class VehicleStatus(str, Enum):
    CHARGING = "Charging"
    IDLE = "Idle"
    DRIVING = "Driving"
    FAULTED = "Faulted"
    MAINTENANCE = "Maintenance"


URGENT_SERVICE = "Urgent"


@dataclass
class Vehicle:
    vehicle_id: str
    depot_id: str
    model: str = "eCitaro"
    manufacturer: str = "Mercedes"

    # State of charge (percent)
    soc: float = 100.0
    required_soc: float = 90.0          # For the next duty
    target_soc: float = 100.0           # Charging target

    status: VehicleStatus = VehicleStatus.IDLE
    charger_id: Optional[str] = None
    location: str = ""
    assigned_duty: Optional[str] = None

    # Position
    lat: float = 0.0
    lng: float = 0.0
    route: Optional[str] = None         # Route name while driving
    progress: float = 0.0               # Lap fraction in [0, 1)

    # Telemetry
    soh: float = 100.0                  # State of health, percent
    odometer: float = 0.0               # km
    efficiency: float = 1.2             # kWh/km
    driver_score: float = 90.0
    cycles: int = 0
    battery_temp: float = 25.0
    ambient_temp: float = 10.0
    hvac_load: float = 0.0              # kW

    # Service
    next_service: str = "30d"
    connection_type: str = "CCS2"

    # Predictions
    predicted_soc_at_departure: float = 0.0
    charging_time_remaining: float = 0.0    # minutes
    range_remaining: float = 0.0            # km

    def __post_init__(self):
        if not 0 <= self.soc <= 100:
            raise ValueError(f"{self.vehicle_id}: soc must be within 0-100, got {self.soc}")

    @property
    def position(self) -> Location:
        return Location(self.lat, self.lng)

    @property
    def needs_urgent_service(self) -> bool:
        return self.next_service == URGENT_SERVICE

    @property
    def is_out_of_service(self) -> bool:
        return self.status in (VehicleStatus.FAULTED, VehicleStatus.MAINTENANCE)
