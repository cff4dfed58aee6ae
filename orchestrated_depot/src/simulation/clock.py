# src/simulation/clock.py
"""
Simulated-time physics.
One tick moves the clock by TICK_MINUTES * speed and updates, in order:
vehicles (route progress, drain, charging) → charger telemetry → depot load.
"""

from dataclasses import replace
from datetime import timedelta
from typing import Dict, List, Optional

from orchestrated_depot.src.config.settings import SimulationSettings
from orchestrated_depot.src.core.charging import Charger
from orchestrated_depot.src.core.depot import Depot
from orchestrated_depot.src.core.route import Route
from orchestrated_depot.src.fleet.vehicle import Vehicle, VehicleStatus
from orchestrated_depot.src.orchestration.aggregation import run_orchestration_check
from orchestrated_depot.src.orchestration.engine import charge_rate_per_minute
from orchestrated_depot.src.simulation.noise import NoiseSource, RandomNoise
from orchestrated_depot.src.simulation.state import DepotState


def advance_clock(
    state: DepotState,
    speed_multiplier: Optional[int] = None,
    noise: Optional[NoiseSource] = None
) -> DepotState:
    """
    Advance physical state by one tick without touching alerts.
    A paused state is returned as-is (same object).
    """
    if not state.is_running:
        return state

    speed = speed_multiplier if speed_multiplier is not None else state.speed_multiplier
    if speed <= 0:
        raise ValueError(f"Speed multiplier must be positive, got {speed}")
    noise = noise or RandomNoise()

    delta = SimulationSettings.TICK_MINUTES * speed
    routes = {r.name: r for r in state.routes}
    chargers_by_id = {c.charger_id: c for c in state.chargers}

    vehicles = [_step_vehicle(v, speed, delta, routes, chargers_by_id) for v in state.vehicles]
    chargers = [_step_charger(c, speed, noise) for c in state.chargers]
    depots = refresh_depots(state.depots, vehicles, chargers)

    return replace(
        state,
        vehicles=vehicles,
        chargers=chargers,
        depots=depots,
        current_time=state.current_time + timedelta(minutes=delta),
        elapsed_minutes=state.elapsed_minutes + delta,
    )


def tick(
    state: DepotState,
    speed_multiplier: Optional[int] = None,
    noise: Optional[NoiseSource] = None
) -> DepotState:
    """Advance the clock, then bring alerts in line with the new state."""
    advanced = advance_clock(state, speed_multiplier, noise)
    if advanced is state:
        return state
    return run_orchestration_check(advanced)


def _step_vehicle(
    vehicle: Vehicle,
    speed: int,
    delta: int,
    routes: Dict[str, Route],
    chargers: Dict[str, Charger]
) -> Vehicle:
    if vehicle.status == VehicleStatus.DRIVING and vehicle.route:
        progress = (vehicle.progress + SimulationSettings.PROGRESS_PER_MINUTE * speed) % 1
        soc = round(max(0.0, vehicle.soc - SimulationSettings.SOC_DRAIN_PER_MINUTE * speed), 1)

        lat, lng = vehicle.lat, vehicle.lng
        route = routes.get(vehicle.route)
        position = route.position_at(progress) if route else None
        if position is not None:
            lat, lng = position.lat, position.lon

        return replace(vehicle, progress=progress, soc=soc, lat=lat, lng=lng)

    if vehicle.status == VehicleStatus.CHARGING:
        charger = chargers.get(vehicle.charger_id)
        if charger is None or not charger.is_active:
            return vehicle

        rate = charge_rate_per_minute(charger.power_kw)
        if rate <= 0:
            return vehicle
        soc = round(min(100.0, vehicle.soc + rate * delta), 1)
        remaining = round(max(0.0, (vehicle.target_soc - soc) / rate))
        return replace(
            vehicle,
            soc=soc,
            charging_time_remaining=remaining,
            predicted_soc_at_departure=round(min(100.0, soc + rate * remaining)),
        )

    return vehicle


def _step_charger(charger: Charger, speed: int, noise: NoiseSource) -> Charger:
    if not (charger.is_active and charger.connected_vehicle):
        return charger

    s = SimulationSettings
    if charger.power_kw > s.HIGH_POWER_THRESHOLD_KW:
        current = s.HIGH_POWER_CURRENT_A + s.CURRENT_JITTER_A * noise.uniform()
        voltage = s.HIGH_POWER_VOLTAGE_V + s.HIGH_POWER_VOLTAGE_JITTER_V * noise.uniform()
    else:
        current = s.LOW_POWER_CURRENT_A + s.CURRENT_JITTER_A * noise.uniform()
        voltage = s.LOW_POWER_VOLTAGE_V + s.LOW_POWER_VOLTAGE_JITTER_V * noise.uniform()
    fraction = s.MIN_DELIVERY_FRACTION + (1 - s.MIN_DELIVERY_FRACTION) * noise.uniform()

    return replace(
        charger,
        current=round(current),
        voltage=round(voltage),
        power_delivery=round(charger.power_kw * fraction),
        session_energy=round(charger.session_energy + charger.power_kw / 60 * speed, 1),
    )


def _refresh_depot(depot: Depot, vehicles: List[Vehicle], chargers: List[Charger]) -> Depot:
    own_chargers = [c for c in chargers if c.depot_id == depot.depot_id]
    active = [c for c in own_chargers if c.is_active]
    own_vehicles = [v for v in vehicles if v.depot_id == depot.depot_id]
    on_site = [
        v for v in own_vehicles
        if v.status != VehicleStatus.DRIVING
        and v.position.distance_km(depot.location) <= SimulationSettings.DEPOT_ON_SITE_RADIUS_KM
    ]

    return replace(
        depot,
        current_load_kw=sum(c.power_delivery for c in active),
        active_chargers=len(active),
        total_chargers=len(own_chargers),
        total_vehicles=len(own_vehicles),
        vehicles_on_site=len(on_site),
    )


def refresh_depots(depots: List[Depot], vehicles: List[Vehicle], chargers: List[Charger]) -> List[Depot]:
    """Recompute load and head counts for every depot from its chargers and vehicles."""
    return [_refresh_depot(d, vehicles, chargers) for d in depots]
