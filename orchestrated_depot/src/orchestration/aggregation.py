# src/orchestration/aggregation.py
"""
Merge a fresh engine pass into the live alert set.
Unresolved alerts carry forward untouched so recommendations do not flicker;
fresh alerts are only added for keys that are not already live.
"""

from dataclasses import replace
from typing import List, Optional

from orchestrated_depot.src.core.alert import Alert
from orchestrated_depot.src.orchestration.engine import IdFactory, evaluate
from orchestrated_depot.src.simulation.state import DepotState


def merge_alerts(previous: List[Alert], fresh: List[Alert]) -> List[Alert]:
    carried = [a for a in previous if not a.is_resolved]
    live_keys = {a.dedup_key for a in carried}
    return carried + [a for a in fresh if a.dedup_key not in live_keys]


def run_orchestration_check(state: DepotState, id_factory: Optional[IdFactory] = None) -> DepotState:
    """Evaluate the state and return a copy whose alert list reflects it."""
    fresh = evaluate(
        vehicles=state.vehicles,
        chargers=state.chargers,
        schedule=state.schedule,
        depots=state.depots,
        current_time=state.current_time,
        id_factory=id_factory or state.alert_ids,
    )
    return replace(state, alerts=merge_alerts(state.alerts, fresh))
