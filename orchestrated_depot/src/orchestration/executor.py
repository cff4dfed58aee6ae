# src/orchestration/executor.py
"""
Apply a dispatcher-chosen remediation to the depot state.
Stale references (alert, action, duty or vehicle gone) are ignored quietly:
the consumer may be acting on a snapshot that is a tick or two old.
"""

from dataclasses import replace
from typing import List, Optional, Tuple

from orchestrated_depot.src.config.settings import SimulationSettings
from orchestrated_depot.src.core.alert import ActionType, ProposedAction
from orchestrated_depot.src.fleet.schedule import ScheduledDuty
from orchestrated_depot.src.fleet.vehicle import Vehicle
from orchestrated_depot.src.orchestration.aggregation import run_orchestration_check
from orchestrated_depot.src.orchestration.links import check_consistency, reassign_duty
from orchestrated_depot.src.simulation.state import DepotState

ACKNOWLEDGED = "Acknowledged"


def resolve(
    alert_id: str,
    action_id: str,
    state: DepotState,
    resolved_by: str = "dispatcher"
) -> DepotState:
    """
    Apply one proposed action, mark its alert resolved and re-run orchestration.

    Returns the input state object itself when the alert or action is unknown.
    """
    alert = state.alert(alert_id)
    if alert is None or alert.is_resolved:
        return state
    action = alert.find_action(action_id)
    if action is None:
        return state

    vehicles, schedule = state.vehicles, state.schedule

    if action.action_type == ActionType.SWAP:
        vehicles, schedule = _apply_swap(action, vehicles, schedule)
        resolution = action.label
    elif action.action_type == ActionType.ACKNOWLEDGE:
        resolution = ACKNOWLEDGED
    else:
        # reassign / prioritize / escalate carry no state change of their own
        resolution = action.label

    resolved = replace(
        alert,
        is_resolved=True,
        resolved_at=state.current_time,
        resolved_by=resolved_by,
        resolution=resolution,
    )
    print(f"[{state.current_time.strftime('%H:%M')}] {alert.alert_id} ({alert.category.value}) "
          f"resolved by {resolved_by}: {resolution}")

    history = (state.resolved_alerts + [resolved])[-SimulationSettings.RESOLVED_HISTORY_LIMIT:]
    updated = replace(
        state,
        vehicles=vehicles,
        schedule=schedule,
        alerts=[resolved if a.alert_id == alert_id else a for a in state.alerts],
        resolved_alerts=history,
    )
    updated = run_orchestration_check(updated)

    if SimulationSettings.DEBUG_CONSISTENCY_CHECKS:
        for problem in check_consistency(updated):
            print(f"  → Link check: {problem}")

    return updated


def _apply_swap(
    action: ProposedAction,
    vehicles: List[Vehicle],
    schedule: List[ScheduledDuty]
) -> Tuple[List[Vehicle], List[ScheduledDuty]]:
    source_id, target_id = action.source_vehicle_id, action.target_vehicle_id
    if not source_id or not target_id:
        print(f"  → Swap '{action.label}' has no concrete vehicle pair → nothing reassigned")
        return vehicles, schedule

    # Re-resolve the duty now: the alert's duty id may be stale
    duty = _live_duty_for(schedule, source_id)
    if duty is None:
        print(f"  → {source_id} no longer holds a live duty → ignoring swap")
        return vehicles, schedule
    if not any(v.vehicle_id == target_id for v in vehicles):
        print(f"  → Target vehicle {target_id} not found → ignoring swap")
        return vehicles, schedule

    print(f"  → {duty.duty_id}: {source_id} → {target_id}")
    return reassign_duty(vehicles, schedule, duty.duty_id, source_id, target_id)


def _live_duty_for(schedule: List[ScheduledDuty], vehicle_id: str) -> Optional[ScheduledDuty]:
    return next(
        (d for d in schedule if d.vehicle_id == vehicle_id and not d.is_terminal),
        None,
    )
