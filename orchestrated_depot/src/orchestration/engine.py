# src/orchestration/engine.py
"""
Risk scan over the current depot state.

evaluate() runs three passes in a fixed order and never short-circuits:
    1. per-duty pull-out risks (charger fault, idle under-charge, slow charging)
    2. depot grid load against the active grid constraint
    3. urgent maintenance on vehicles whose duty has not yet departed
Each alert carries ranked remediation actions. The function is pure: inputs are
not modified and alert ids come from the caller-supplied id factory.
"""

import math
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, TypeVar

from orchestrated_depot.src.config.settings import OrchestrationSettings, SimulationSettings
from orchestrated_depot.src.core.alert import (
    ActionType,
    Alert,
    AlertCategory,
    AlertIdFactory,
    AlertSeverity,
    ProposedAction,
)
from orchestrated_depot.src.core.charging import Charger, ChargerStatus
from orchestrated_depot.src.core.depot import Depot
from orchestrated_depot.src.fleet.schedule import DutyStatus, ScheduledDuty
from orchestrated_depot.src.fleet.vehicle import Vehicle, VehicleStatus

T = TypeVar("T")
IdFactory = Callable[[], str]

S = OrchestrationSettings


def evaluate(
    vehicles: List[Vehicle],
    chargers: List[Charger],
    schedule: List[ScheduledDuty],
    depots: List[Depot],
    current_time: datetime,
    id_factory: Optional[IdFactory] = None
) -> List[Alert]:
    """
    Scan the state and return a fresh alert list.

    Args:
        vehicles, chargers, schedule, depots: current domain state (read only)
        current_time: simulated time; only hour/minute (and month for grid
            constraints) are used
        id_factory: callable returning a new alert id; a private sequential
            factory is used when omitted

    Returns:
        Alerts in pass order, each pass in input iteration order
    """
    next_id = id_factory or AlertIdFactory()

    alerts: List[Alert] = []
    alerts.extend(_scan_pull_out_risks(vehicles, chargers, schedule, current_time, next_id))
    alerts.extend(_scan_grid_constraints(depots, current_time, next_id))
    alerts.extend(_scan_maintenance(vehicles, schedule, current_time, next_id))
    return alerts


# -----------------------------
# Swap candidates
# -----------------------------

def find_swap_candidates(
    vehicles: List[Vehicle],
    duty: ScheduledDuty,
    schedule: List[ScheduledDuty],
    at_risk_vehicle_id: Optional[str] = None
) -> List[Vehicle]:
    """
    Vehicles that could take over `duty`, best first (highest SoC), at most three.
    """
    at_risk_id = at_risk_vehicle_id or duty.vehicle_id
    duties = _index(schedule, lambda d: d.duty_id)

    def eligible(v: Vehicle) -> bool:
        if v.depot_id != duty.depot_id:
            return False
        if v.soc < duty.required_soc:
            return False
        if v.assigned_duty and v.assigned_duty != duty.duty_id:
            other = duties.get(v.assigned_duty)
            if other is not None and other.departure_minutes <= duty.departure_minutes:
                return False
        if v.is_out_of_service:
            return False
        if v.status == VehicleStatus.DRIVING:
            return False
        if v.vehicle_id in (at_risk_id, duty.vehicle_id):
            return False
        return True

    candidates = sorted(filter(eligible, vehicles), key=lambda v: v.soc, reverse=True)
    return candidates[:S.MAX_SWAP_CANDIDATES]


def calculate_swap_confidence(candidate: Vehicle, duty: ScheduledDuty) -> int:
    confidence = S.SWAP_BASE_CONFIDENCE

    # Higher SoC surplus = higher confidence
    surplus = candidate.soc - duty.required_soc
    confidence += min(surplus / 2, S.SWAP_SURPLUS_CAP)

    if candidate.soh > 95:
        confidence += 10
    elif candidate.soh > 90:
        confidence += 5

    if candidate.efficiency < 1.3:
        confidence += 10
    elif candidate.efficiency < 1.5:
        confidence += 5

    if not candidate.assigned_duty:
        confidence += 10

    return max(0, min(_round_half_up(confidence), S.MAX_CONFIDENCE))


def _swap_actions(
    vehicle: Vehicle,
    duty: ScheduledDuty,
    candidates: List[Vehicle]
) -> List[ProposedAction]:
    return [
        ProposedAction(
            action_id=f"action-swap-{i}",
            label=f"Swap with {c.vehicle_id}",
            description=(
                f"{c.vehicle_id} has {_fmt(c.soc)}% SoC "
                f"({_fmt(c.soc - duty.required_soc)}% surplus). "
                f"Available in {c.location or 'depot'}."
            ),
            action_type=ActionType.SWAP,
            source_vehicle_id=vehicle.vehicle_id,
            target_vehicle_id=c.vehicle_id,
            confidence=calculate_swap_confidence(c, duty),
            is_recommended=i == 0,
        )
        for i, c in enumerate(candidates)
    ]


def _top_confidence(actions: List[ProposedAction], fallback: int) -> int:
    swaps = [a for a in actions if a.action_type == ActionType.SWAP and a.target_vehicle_id]
    return swaps[0].confidence if swaps else fallback


# -----------------------------
# Pass 1: pull-out risks
# -----------------------------

def _scan_pull_out_risks(
    vehicles: List[Vehicle],
    chargers: List[Charger],
    schedule: List[ScheduledDuty],
    current_time: datetime,
    next_id: IdFactory
) -> List[Alert]:
    alerts: List[Alert] = []
    vehicle_map = _index(vehicles, lambda v: v.vehicle_id)
    charger_map = _index(chargers, lambda c: c.charger_id)

    for duty in schedule:
        if duty.is_terminal:
            continue

        vehicle = vehicle_map.get(duty.vehicle_id)
        if vehicle is None:
            continue
        charger = charger_map.get(vehicle.charger_id) if vehicle.charger_id else None

        minutes = duty.minutes_until_departure(current_time)
        if minutes < 0:
            continue
        deadline = current_time + timedelta(minutes=minutes)

        if (
            charger is not None
            and charger.status == ChargerStatus.FAULTED
            and vehicle.soc < duty.required_soc
        ):
            alerts.append(_charging_fault_alert(
                vehicle, charger, duty, vehicles, schedule, current_time, deadline, next_id
            ))

        if (
            vehicle.status == VehicleStatus.IDLE
            and vehicle.soc < duty.required_soc - S.NOT_CHARGING_DEFICIT
            and minutes < S.NOT_CHARGING_WINDOW_MINUTES
        ):
            alerts.append(_not_charging_alert(
                vehicle, duty, vehicles, schedule, current_time, deadline, minutes, next_id
            ))

        if (
            vehicle.status == VehicleStatus.CHARGING
            and charger is not None
            and charger.is_active
        ):
            alert = _behind_schedule_alert(
                vehicle, charger, duty, vehicles, schedule, current_time, deadline, minutes, next_id
            )
            if alert is not None:
                alerts.append(alert)

    return alerts


def _charging_fault_alert(vehicle, charger, duty, vehicles, schedule, current_time, deadline, next_id) -> Alert:
    candidates = find_swap_candidates(vehicles, duty, schedule, vehicle.vehicle_id)
    actions = _swap_actions(vehicle, duty, candidates)
    actions.append(ProposedAction(
        action_id="action-reconnect",
        label="Move to Available Charger",
        description=f"Reconnect {vehicle.vehicle_id} to a working charger and escalate the fault on {charger.charger_id}.",
        action_type=ActionType.PRIORITIZE,
        confidence=S.CHARGING_FAULT_FALLBACK,
        is_recommended=not candidates,
    ))

    fault = charger.fault_code or "fault"
    return Alert(
        alert_id=next_id(),
        severity=AlertSeverity.CRITICAL,
        category=AlertCategory.CHARGING_FAULT,
        title="Charger Fault - Pull-out at Risk",
        message=(
            f"{charger.charger_id} offline ({fault}). {vehicle.vehicle_id} stuck at "
            f"{_fmt(vehicle.soc)}% SoC. Requires {_fmt(duty.required_soc)}% for "
            f"{duty.departure_time} departure."
        ),
        vehicle_id=vehicle.vehicle_id,
        charger_id=charger.charger_id,
        duty_id=duty.duty_id,
        depot_id=duty.depot_id,
        timestamp=current_time,
        deadline_time=deadline,
        impact_description=(
            f"Service {duty.route_name or duty.route_id} may fail. "
            f"Driver {duty.driver or 'unassigned'} assignment affected."
        ),
        affected_services=1,
        penalty_risk=S.PENALTY_CHARGING_FAULT,
        proposed_actions=actions,
        confidence_score=_top_confidence(actions, S.CHARGING_FAULT_FALLBACK),
    )


def _not_charging_alert(vehicle, duty, vehicles, schedule, current_time, deadline, minutes, next_id) -> Alert:
    candidates = find_swap_candidates(vehicles, duty, schedule, vehicle.vehicle_id)
    actions = [ProposedAction(
        action_id="action-prioritize",
        label="Prioritize Charging",
        description=f"Move {vehicle.vehicle_id} to available charger immediately.",
        action_type=ActionType.PRIORITIZE,
        confidence=S.PULL_OUT_FALLBACK,
        is_recommended=not candidates,
    )]
    actions.extend(_swap_actions(vehicle, duty, candidates))

    critical = vehicle.soc < duty.required_soc - S.CRITICAL_DEFICIT
    return Alert(
        alert_id=next_id(),
        severity=AlertSeverity.CRITICAL if critical else AlertSeverity.WARNING,
        category=AlertCategory.PULL_OUT_RISK,
        title="Vehicle Not Charging",
        message=(
            f"{vehicle.vehicle_id} is idle at {_fmt(vehicle.soc)}% SoC but needs "
            f"{_fmt(duty.required_soc)}% for {duty.departure_time}."
        ),
        vehicle_id=vehicle.vehicle_id,
        duty_id=duty.duty_id,
        depot_id=duty.depot_id,
        timestamp=current_time,
        deadline_time=deadline,
        impact_description=(
            f"{minutes} minutes until departure. "
            f"{_fmt(duty.required_soc - vehicle.soc)}% charge deficit."
        ),
        affected_services=1,
        penalty_risk=S.PENALTY_PULL_OUT_RISK,
        proposed_actions=actions,
        confidence_score=_top_confidence(actions, S.PULL_OUT_FALLBACK),
    )


def _behind_schedule_alert(vehicle, charger, duty, vehicles, schedule, current_time, deadline, minutes, next_id) -> Optional[Alert]:
    rate = charge_rate_per_minute(charger.power_kw)
    if rate <= 0:
        # Zero-rated charger: no projection, matching the clock which leaves the vehicle as-is
        return None
    minutes_needed = (duty.required_soc - vehicle.soc) / rate
    if minutes_needed <= minutes + S.CHARGE_SAFETY_BUFFER_MINUTES:
        return None

    candidates = find_swap_candidates(vehicles, duty, schedule, vehicle.vehicle_id)
    actions = _swap_actions(vehicle, duty, candidates)
    actions.append(ProposedAction(
        action_id="action-boost",
        label="Boost Charging Priority",
        description=f"Increase {charger.charger_id} power allocation if grid allows.",
        action_type=ActionType.PRIORITIZE,
        confidence=S.SOC_DEVIATION_FALLBACK,
        is_recommended=not candidates,
    ))
    actions.append(ProposedAction(
        action_id="action-accept",
        label="Accept Partial Charge",
        description="Depart at projected SoC. Route may require opportunity charging.",
        action_type=ActionType.ACKNOWLEDGE,
        confidence=S.ACCEPT_PARTIAL_CONFIDENCE,
    ))

    projected = _round_half_up(vehicle.soc + rate * minutes)
    return Alert(
        alert_id=next_id(),
        severity=AlertSeverity.WARNING,
        category=AlertCategory.SOC_DEVIATION,
        title="Charging Behind Schedule",
        message=(
            f"{vehicle.vehicle_id} projected to reach {projected}% by "
            f"{duty.departure_time}. Needs {_fmt(duty.required_soc)}%."
        ),
        vehicle_id=vehicle.vehicle_id,
        charger_id=charger.charger_id,
        duty_id=duty.duty_id,
        depot_id=duty.depot_id,
        timestamp=current_time,
        deadline_time=deadline,
        impact_description=(
            f"Charging at {_fmt(charger.power_kw)}kW. Estimated "
            f"{_round_half_up(minutes_needed - minutes)} minutes short."
        ),
        affected_services=1,
        penalty_risk=S.PENALTY_SOC_DEVIATION,
        proposed_actions=actions,
        confidence_score=_top_confidence(actions, S.SOC_DEVIATION_FALLBACK),
    )


def charge_rate_per_minute(power_kw: float) -> float:
    """SoC percentage points per minute on the reference 300 kWh pack."""
    return (power_kw / SimulationSettings.REFERENCE_BATTERY_KWH) * 100 / 60


# -----------------------------
# Pass 2: grid constraints
# -----------------------------

def _scan_grid_constraints(depots: List[Depot], current_time: datetime, next_id: IdFactory) -> List[Alert]:
    alerts: List[Alert] = []
    hour, month = current_time.hour, current_time.month

    for depot in depots:
        constraint = depot.active_constraint(hour, month)
        effective_max = depot.effective_capacity_kw(hour, month)

        if effective_max > 0:
            load_percent = depot.current_load_kw / effective_max * 100
        else:
            # Charging forbidden in this window: any draw is over the cap
            load_percent = math.inf if depot.current_load_kw > 0 else 0.0

        if load_percent <= S.GRID_WARNING_PERCENT:
            continue

        critical = load_percent > S.GRID_CRITICAL_PERCENT
        if math.isinf(load_percent):
            message = (
                f"{depot.name} drawing {_round_half_up(depot.current_load_kw)}kW while "
                f"charging is capped at 0kW."
            )
        else:
            message = (
                f"{depot.name} at {_round_half_up(load_percent)}% of allowed capacity "
                f"({_round_half_up(depot.current_load_kw)}kW / {_round_half_up(effective_max)}kW)."
            )

        alerts.append(Alert(
            alert_id=next_id(),
            severity=AlertSeverity.CRITICAL if critical else AlertSeverity.WARNING,
            category=AlertCategory.GRID_CONSTRAINT,
            title="Grid Capacity Critical" if critical else "Grid Load High",
            message=message,
            depot_id=depot.depot_id,
            timestamp=current_time,
            impact_description=(
                f"Constraint active: {constraint.description}"
                if constraint else "Approaching maximum grid connection capacity."
            ),
            affected_services=0,
            penalty_risk=S.PENALTY_GRID_CRITICAL if critical else S.PENALTY_GRID_WARNING,
            proposed_actions=[
                ProposedAction(
                    action_id="action-reduce",
                    label="Reduce Charging Load",
                    description="Temporarily reduce power to non-priority vehicles.",
                    action_type=ActionType.PRIORITIZE,
                    confidence=S.GRID_SHED_CONFIDENCE,
                    estimated_savings=S.GRID_SHED_SAVINGS,
                    is_recommended=True,
                ),
                ProposedAction(
                    action_id="action-monitor",
                    label="Monitor Only",
                    description="Continue monitoring. Alert again if 95% exceeded.",
                    action_type=ActionType.ACKNOWLEDGE,
                    confidence=S.GRID_MONITOR_CONFIDENCE,
                ),
            ],
            confidence_score=S.GRID_SHED_CONFIDENCE,
        ))

    return alerts


# -----------------------------
# Pass 3: maintenance
# -----------------------------

def _scan_maintenance(
    vehicles: List[Vehicle],
    schedule: List[ScheduledDuty],
    current_time: datetime,
    next_id: IdFactory
) -> List[Alert]:
    alerts: List[Alert] = []
    duties = _index(schedule, lambda d: d.duty_id)

    for vehicle in vehicles:
        if not (vehicle.needs_urgent_service and vehicle.assigned_duty):
            continue
        duty = duties.get(vehicle.assigned_duty)
        if duty is None or duty.status == DutyStatus.DEPARTED:
            continue

        candidates = find_swap_candidates(vehicles, duty, schedule, vehicle.vehicle_id)
        actions = _swap_actions(vehicle, duty, candidates)
        if not candidates:
            actions.append(ProposedAction(
                action_id="action-replace",
                label="Assign Reserve Vehicle",
                description="Replace with available maintenance-clear vehicle.",
                action_type=ActionType.SWAP,
                source_vehicle_id=vehicle.vehicle_id,
                confidence=S.MAINTENANCE_SWAP_CONFIDENCE,
                is_recommended=True,
            ))
        actions.append(ProposedAction(
            action_id="action-clear",
            label="Clear for Service",
            description="Engineering confirms vehicle safe for one more duty.",
            action_type=ActionType.ACKNOWLEDGE,
            confidence=S.MAINTENANCE_CLEAR_CONFIDENCE,
        ))

        alerts.append(Alert(
            alert_id=next_id(),
            severity=AlertSeverity.WARNING,
            category=AlertCategory.MAINTENANCE,
            title="Maintenance Overdue",
            message=(
                f"{vehicle.vehicle_id} has overdue maintenance but is assigned to "
                f"{duty.duty_id} at {duty.departure_time}."
            ),
            vehicle_id=vehicle.vehicle_id,
            duty_id=duty.duty_id,
            depot_id=vehicle.depot_id,
            timestamp=current_time,
            impact_description="Vehicle may not be safe for service. Consider replacement.",
            affected_services=1,
            penalty_risk=S.PENALTY_MAINTENANCE,
            proposed_actions=actions,
            confidence_score=_top_confidence(actions, S.MAINTENANCE_SWAP_CONFIDENCE),
        ))

    return alerts


# -----------------------------
# Helpers
# -----------------------------

def _index(items: Iterable[T], key: Callable[[T], str]) -> Dict[str, T]:
    """Id lookup keeping the first occurrence of duplicated ids."""
    index: Dict[str, T] = {}
    for item in items:
        index.setdefault(key(item), item)
    return index


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _fmt(value: float) -> str:
    return f"{round(value, 1):g}"
