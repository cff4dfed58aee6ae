# src/core/charging.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ChargerStatus(str, Enum):
    ACTIVE = "Active"
    AVAILABLE = "Available"
    FAULTED = "Faulted"
    OFFLINE = "Offline"
    SCHEDULED = "Scheduled"


@dataclass
class Charger:
    charger_id: str
    depot_id: str
    zone: str = "A"
    power_kw: float = 150.0
    connection_type: str = "CCS2"

    status: ChargerStatus = ChargerStatus.AVAILABLE
    connected_vehicle: Optional[str] = None
    fault_code: Optional[str] = None
    fault_description: Optional[str] = None

    # Real-time metrics
    voltage: float = 0.0            # V
    current: float = 0.0            # A
    power_delivery: float = 0.0     # kW actually delivered
    temperature: float = 25.0       # Celsius
    session_energy: float = 0.0     # kWh delivered this session

    @property
    def is_active(self) -> bool:
        return self.status == ChargerStatus.ACTIVE

    @property
    def is_working(self) -> bool:
        return self.status not in (ChargerStatus.FAULTED, ChargerStatus.OFFLINE)

    @property
    def is_high_power(self) -> bool:
        return self.power_kw > 100
