# src/scenarios/manager.py
"""
Central scenario manager.
Positions the clock at a scenario's start and applies its timeline events
as simulated time passes them.
"""

from dataclasses import replace
from datetime import datetime
from typing import List

from orchestrated_depot.src.core.charging import ChargerStatus
from orchestrated_depot.src.fleet.schedule import DutyStatus, hhmm_to_minutes, minute_of_day
from orchestrated_depot.src.fleet.vehicle import VehicleStatus
from orchestrated_depot.src.orchestration.links import connect_vehicle, disconnect_vehicle, replace_where
from orchestrated_depot.src.scenarios.events import EventQueue, EventType, Scenario, ScenarioEvent
from orchestrated_depot.src.simulation.state import DepotState


class ScenarioManager:
    def __init__(self, scenario: Scenario):
        self.scenario = scenario
        self.queue = EventQueue()
        self.applied: List[ScenarioEvent] = []

    def start(self, state: DepotState) -> DepotState:
        """
        Jump the clock to the scenario start, apply the initial conditions and
        every event scheduled for the opening minute.
        """
        self.queue.clear()
        self.queue.add_events(self.scenario.events)
        self.applied = []

        start_minutes = hhmm_to_minutes(self.scenario.start_time)
        start = state.current_time.replace(
            hour=start_minutes // 60, minute=start_minutes % 60, second=0, microsecond=0
        )
        state = replace(state, current_time=start)

        if self.scenario.initial_temperature is not None:
            state = replace(state, vehicles=[
                replace(v, ambient_temp=self.scenario.initial_temperature) for v in state.vehicles
            ])

        print(f"\n>>> Scenario '{self.scenario.name}' ({self.scenario.start_time}-{self.scenario.end_time}, "
              f"{len(self.scenario.events)} events)")

        for event in self.queue.pop_due(start_minutes):
            state = self._apply(state, event)
        return state

    def update(self, state: DepotState, previous_time: datetime) -> DepotState:
        """
        Apply every queued event whose time falls in (previous_time, current_time].
        Events left behind by a clock jump backwards are dropped.
        """
        previous_minutes = minute_of_day(previous_time)
        for event in self.queue.pop_due(minute_of_day(state.current_time)):
            if event.minutes <= previous_minutes:
                print(f"  → Skipping stale event {event.event_id} at {event.time}")
                continue
            state = self._apply(state, event)
        return state

    @property
    def is_finished(self) -> bool:
        return self.queue.is_empty()

    def _apply(self, state: DepotState, event: ScenarioEvent) -> DepotState:
        print(f"[{event.time}] {event.event_type.value.upper()}: {event.title}")

        if event.event_type == EventType.FAULT:
            state = self._apply_fault(state, event)
        elif event.event_type == EventType.WEATHER:
            state = replace(state, vehicles=[
                replace(v, ambient_temp=v.ambient_temp + event.temperature_change)
                for v in state.vehicles
            ])
        elif event.event_type == EventType.DEPARTURE:
            for vehicle_id in event.vehicle_ids:
                state = self._depart(state, vehicle_id)
        elif event.event_type == EventType.ARRIVAL:
            for vehicle_id in event.vehicle_ids:
                state = self._arrive(state, vehicle_id)
        # delay / alert / resolution events are narrative only

        self.applied.append(event)
        return replace(state, event_log=state.event_log + [f"{event.time} {event.title}"])

    def _apply_fault(self, state: DepotState, event: ScenarioEvent) -> DepotState:
        # The vehicle link is kept: a plugged-in bus on a dead charger is what the engine looks for
        chargers = replace_where(
            state.chargers, lambda c: c.charger_id in event.charger_ids,
            status=ChargerStatus.FAULTED,
            fault_code=event.fault_type,
            fault_description=event.description or event.title,
            power_delivery=0.0, current=0.0, voltage=0.0,
        )
        missing = set(event.charger_ids) - {c.charger_id for c in state.chargers}
        if missing:
            print(f"  → Unknown chargers ignored: {', '.join(sorted(missing))}")
        return replace(state, chargers=chargers)

    def _depart(self, state: DepotState, vehicle_id: str) -> DepotState:
        duty = next(
            (d for d in state.schedule if d.vehicle_id == vehicle_id and not d.is_terminal),
            None,
        )
        if duty is None or state.vehicle(vehicle_id) is None:
            print(f"  → {vehicle_id} has no live duty → stays in depot")
            return state

        vehicles, chargers = disconnect_vehicle(state.vehicles, state.chargers, vehicle_id)
        vehicles = replace_where(
            vehicles, lambda v: v.vehicle_id == vehicle_id,
            status=VehicleStatus.DRIVING, route=duty.route_name or None, progress=0.0,
        )
        schedule = replace_where(
            state.schedule, lambda d: d.duty_id == duty.duty_id, status=DutyStatus.DEPARTED,
        )
        print(f"  → {vehicle_id} departs on {duty.duty_id} ({duty.route_name})")
        return replace(state, vehicles=vehicles, chargers=chargers, schedule=schedule)

    def _arrive(self, state: DepotState, vehicle_id: str) -> DepotState:
        vehicle = state.vehicle(vehicle_id)
        if vehicle is None:
            return state

        schedule = replace_where(
            state.schedule,
            lambda d: d.vehicle_id == vehicle_id and d.status == DutyStatus.DEPARTED,
            status=DutyStatus.COMPLETED,
        )
        depot = state.depot(vehicle.depot_id)
        lat, lng = (depot.location.lat, depot.location.lon) if depot else (vehicle.lat, vehicle.lng)
        vehicles = replace_where(
            state.vehicles, lambda v: v.vehicle_id == vehicle_id,
            status=VehicleStatus.IDLE, route=None, progress=0.0,
            assigned_duty=None, lat=lat, lng=lng,
        )

        chargers = state.chargers
        free = next(
            (c for c in chargers
             if c.depot_id == vehicle.depot_id and c.status == ChargerStatus.AVAILABLE
             and not c.connected_vehicle),
            None,
        )
        if free is not None:
            vehicles, chargers = connect_vehicle(vehicles, chargers, vehicle_id, free.charger_id)
            print(f"  → {vehicle_id} back at depot, plugged into {free.charger_id}")
        else:
            print(f"  → {vehicle_id} back at depot, no free charger")
        return replace(state, vehicles=vehicles, chargers=chargers, schedule=schedule)
