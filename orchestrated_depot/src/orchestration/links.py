# src/orchestration/links.py
"""
Single place that edits bidirectional references:
    vehicle.charger_id    <-> charger.connected_vehicle
    vehicle.assigned_duty <-> duty.vehicle_id
Every helper returns new lists and leaves its inputs untouched.
"""

from dataclasses import replace
from typing import Callable, List, Optional, Tuple, TypeVar

from orchestrated_depot.src.core.charging import Charger, ChargerStatus
from orchestrated_depot.src.fleet.schedule import DutyStatus, ScheduledDuty
from orchestrated_depot.src.fleet.vehicle import Vehicle, VehicleStatus
from orchestrated_depot.src.simulation.state import DepotState

T = TypeVar("T")


def replace_where(items: List[T], predicate: Callable[[T], bool], **changes) -> List[T]:
    return [replace(item, **changes) if predicate(item) else item for item in items]


def reassign_duty(
    vehicles: List[Vehicle],
    schedule: List[ScheduledDuty],
    duty_id: str,
    source_vehicle_id: Optional[str],
    target_vehicle_id: str
) -> Tuple[List[Vehicle], List[ScheduledDuty]]:
    """Hand `duty_id` to the target vehicle and release it from the source."""
    schedule = replace_where(
        schedule, lambda d: d.duty_id == duty_id,
        vehicle_id=target_vehicle_id, status=DutyStatus.SCHEDULED,
    )
    vehicles = [
        replace(v, assigned_duty=None) if v.vehicle_id == source_vehicle_id
        else replace(v, assigned_duty=duty_id) if v.vehicle_id == target_vehicle_id
        else v
        for v in vehicles
    ]
    return vehicles, schedule


def disconnect_vehicle(
    vehicles: List[Vehicle],
    chargers: List[Charger],
    vehicle_id: str
) -> Tuple[List[Vehicle], List[Charger]]:
    """Unplug a vehicle. Active chargers fall back to Available; faulted ones stay faulted."""
    chargers = [
        replace(
            c,
            connected_vehicle=None,
            status=ChargerStatus.AVAILABLE if c.is_active else c.status,
            power_delivery=0.0, current=0.0, voltage=0.0,
        ) if c.connected_vehicle == vehicle_id else c
        for c in chargers
    ]
    vehicles = replace_where(
        vehicles, lambda v: v.vehicle_id == vehicle_id,
        charger_id=None, charging_time_remaining=0.0,
    )
    return vehicles, chargers


def connect_vehicle(
    vehicles: List[Vehicle],
    chargers: List[Charger],
    vehicle_id: str,
    charger_id: str
) -> Tuple[List[Vehicle], List[Charger]]:
    """Plug a vehicle into a charger, dropping any previous link on either side."""
    vehicles, chargers = disconnect_vehicle(vehicles, chargers, vehicle_id)
    previous = next((c.connected_vehicle for c in chargers if c.charger_id == charger_id), None)
    if previous:
        vehicles, chargers = disconnect_vehicle(vehicles, chargers, previous)

    chargers = replace_where(
        chargers, lambda c: c.charger_id == charger_id,
        connected_vehicle=vehicle_id, status=ChargerStatus.ACTIVE, session_energy=0.0,
    )
    vehicles = replace_where(
        vehicles, lambda v: v.vehicle_id == vehicle_id,
        charger_id=charger_id, status=VehicleStatus.CHARGING,
    )
    return vehicles, chargers


def check_consistency(state: DepotState) -> List[str]:
    """Describe every broken back-reference. An empty list means the links agree."""
    problems: List[str] = []

    for vehicle in state.vehicles:
        if vehicle.assigned_duty:
            duty = state.duty(vehicle.assigned_duty)
            if duty is None:
                problems.append(f"{vehicle.vehicle_id} assigned to missing duty {vehicle.assigned_duty}")
            elif duty.vehicle_id != vehicle.vehicle_id:
                problems.append(
                    f"{vehicle.vehicle_id} assigned to {duty.duty_id}, "
                    f"but the duty names {duty.vehicle_id}"
                )
        if vehicle.charger_id:
            charger = state.charger(vehicle.charger_id)
            if charger is None:
                problems.append(f"{vehicle.vehicle_id} linked to missing charger {vehicle.charger_id}")
            elif charger.connected_vehicle != vehicle.vehicle_id:
                problems.append(
                    f"{vehicle.vehicle_id} linked to {charger.charger_id}, "
                    f"but the charger reports {charger.connected_vehicle}"
                )

    for charger in state.chargers:
        if charger.connected_vehicle:
            vehicle = state.vehicle(charger.connected_vehicle)
            if vehicle is None or vehicle.charger_id != charger.charger_id:
                problems.append(
                    f"{charger.charger_id} reports {charger.connected_vehicle}, "
                    f"which does not point back"
                )

    # Finished duties keep their vehicle id as history
    for duty in state.schedule:
        if duty.is_terminal:
            continue
        vehicle = state.vehicle(duty.vehicle_id)
        if vehicle is None or vehicle.assigned_duty != duty.duty_id:
            problems.append(
                f"{duty.duty_id} names {duty.vehicle_id}, "
                f"which does not point back"
            )

    return problems
