# src/simulation/state.py
"""
Central state container for the depot simulation.
Holds every domain object plus the simulated clock. Clock ticks and alert
resolution return a new DepotState instead of mutating the one they receive.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from orchestrated_depot.src.core.alert import Alert, AlertIdFactory
from orchestrated_depot.src.core.charging import Charger
from orchestrated_depot.src.core.depot import Depot
from orchestrated_depot.src.core.route import Route
from orchestrated_depot.src.core.tariff import EnergyTariff
from orchestrated_depot.src.fleet.schedule import ScheduledDuty
from orchestrated_depot.src.fleet.vehicle import Vehicle


@dataclass
class DepotState:
    vehicles: List[Vehicle]
    chargers: List[Charger]
    depots: List[Depot]
    schedule: List[ScheduledDuty]
    routes: List[Route]
    tariff: EnergyTariff
    current_time: datetime

    alerts: List[Alert] = field(default_factory=list)
    resolved_alerts: List[Alert] = field(default_factory=list)
    event_log: List[str] = field(default_factory=list)

    # Simulation control
    speed_multiplier: int = 1
    is_running: bool = True
    elapsed_minutes: int = 0

    # Shared across every copy derived from this state
    alert_ids: AlertIdFactory = field(default_factory=AlertIdFactory, compare=False, repr=False)

    def vehicle(self, vehicle_id: Optional[str]) -> Optional[Vehicle]:
        return next((v for v in self.vehicles if v.vehicle_id == vehicle_id), None)

    def charger(self, charger_id: Optional[str]) -> Optional[Charger]:
        return next((c for c in self.chargers if c.charger_id == charger_id), None)

    def depot(self, depot_id: Optional[str]) -> Optional[Depot]:
        return next((d for d in self.depots if d.depot_id == depot_id), None)

    def duty(self, duty_id: Optional[str]) -> Optional[ScheduledDuty]:
        return next((d for d in self.schedule if d.duty_id == duty_id), None)

    def route_by_name(self, name: Optional[str]) -> Optional[Route]:
        return next((r for r in self.routes if r.name == name), None)

    def alert(self, alert_id: str) -> Optional[Alert]:
        return next((a for a in self.alerts if a.alert_id == alert_id), None)

    @property
    def unresolved_alerts(self) -> List[Alert]:
        return [a for a in self.alerts if not a.is_resolved]

    def summary(self) -> Dict[str, int]:
        return {
            "vehicles": len(self.vehicles),
            "chargers": len(self.chargers),
            "depots": len(self.depots),
            "duties": len(self.schedule),
            "routes": len(self.routes),
            "alerts": len(self.unresolved_alerts),
        }
