# src/analytics/kpis.py
"""
Dashboard aggregates for one depot or the whole network.
"""

import math
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Optional

from orchestrated_depot.src.config.settings import OrchestrationSettings
from orchestrated_depot.src.fleet.vehicle import VehicleStatus
from orchestrated_depot.src.simulation.state import DepotState


@dataclass
class DashboardStats:
    fleet_readiness: int            # % of duties whose vehicle is within the readiness margin
    charger_uptime: int             # % of chargers not Faulted/Offline
    current_load_kw: float
    max_load_kw: float
    active_alerts: int
    vehicles_charging: int
    vehicles_driving: int
    vehicles_at_risk: int
    today_energy_cost: float
    today_savings: float
    co2_saved_kg: float
    vehicles_by_status: Dict[str, int] = field(default_factory=dict)


def compute_dashboard_stats(state: DepotState, depot_id: Optional[str] = None) -> DashboardStats:
    """
    Aggregate KPIs over `depot_id`, or over every depot when it is None.
    Empty duty or charger sets report 100%.
    """
    def in_scope(item_depot_id: str) -> bool:
        return depot_id is None or item_depot_id == depot_id

    depots = [d for d in state.depots if in_scope(d.depot_id)]
    vehicles = [v for v in state.vehicles if in_scope(v.depot_id)]
    chargers = [c for c in state.chargers if in_scope(c.depot_id)]
    schedule = [d for d in state.schedule if in_scope(d.depot_id)]

    # Readiness
    ready = 0
    for duty in schedule:
        vehicle = state.vehicle(duty.vehicle_id)
        if vehicle and vehicle.soc >= duty.required_soc - OrchestrationSettings.READINESS_MARGIN:
            ready += 1
    readiness = _percent(ready, len(schedule))

    working = sum(1 for c in chargers if c.is_working)
    uptime = _percent(working, len(chargers))

    # At risk: under-charged for a live duty and not on a charger
    required_by_vehicle: Dict[str, float] = {}
    for duty in schedule:
        if not duty.is_terminal:
            required_by_vehicle.setdefault(duty.vehicle_id, duty.required_soc)
    at_risk = sum(
        1 for v in vehicles
        if v.vehicle_id in required_by_vehicle
        and v.soc < required_by_vehicle[v.vehicle_id]
        and v.status != VehicleStatus.CHARGING
    )

    # Energy
    rate = state.tariff.rate_for_hour(state.current_time.hour).rate
    energy_kwh = sum(c.session_energy for c in chargers)
    cost = energy_kwh * rate
    savings = max(0.0, energy_kwh * state.tariff.peak_rate - cost)

    total_km = sum(v.odometer for v in vehicles) / 1000
    status_counts = Counter(v.status.value for v in vehicles)

    return DashboardStats(
        fleet_readiness=readiness,
        charger_uptime=uptime,
        current_load_kw=sum(d.current_load_kw for d in depots),
        max_load_kw=sum(d.max_capacity_kw for d in depots),
        active_alerts=sum(1 for a in state.unresolved_alerts if in_scope(a.depot_id)),
        vehicles_charging=status_counts.get(VehicleStatus.CHARGING.value, 0),
        vehicles_driving=status_counts.get(VehicleStatus.DRIVING.value, 0),
        vehicles_at_risk=at_risk,
        today_energy_cost=cost,
        today_savings=savings,
        co2_saved_kg=total_km * OrchestrationSettings.CO2_KG_PER_KM,
        vehicles_by_status=dict(status_counts),
    )


def _percent(part: int, whole: int) -> int:
    if whole == 0:
        return 100
    return int(math.floor(part / whole * 100 + 0.5))
