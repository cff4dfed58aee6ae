# src/simulation/engine.py
"""
Main simulation engine.
Orchestrates: clock tick → scenario events → orchestration check → logging
"""

import threading
import time
from dataclasses import replace
from typing import Optional

from orchestrated_depot.src.analytics.kpis import DashboardStats, compute_dashboard_stats
from orchestrated_depot.src.config.settings import SimulationSettings
from orchestrated_depot.src.orchestration.aggregation import run_orchestration_check
from orchestrated_depot.src.orchestration.executor import resolve
from orchestrated_depot.src.scenarios.events import Scenario
from orchestrated_depot.src.scenarios.manager import ScenarioManager
from orchestrated_depot.src.simulation.clock import advance_clock
from orchestrated_depot.src.simulation.logger import SimulationLogger
from orchestrated_depot.src.simulation.noise import NoiseSource, RandomNoise
from orchestrated_depot.src.simulation.state import DepotState


class SimulationEngine:
    """
    Owns the current DepotState and serialises every change to it.
    step() and resolve_alert() take the same lock, so a resolution never
    interleaves with a half-applied tick.
    """

    def __init__(
        self,
        state: DepotState,
        logger: Optional[SimulationLogger] = None,
        noise: Optional[NoiseSource] = None,
        scenario: Optional[Scenario] = None
    ):
        self.state = state
        self.logger = logger
        self.noise = noise or RandomNoise()
        self.scenario_manager = ScenarioManager(scenario) if scenario else None
        self._lock = threading.Lock()

        if self.scenario_manager:
            self.state = run_orchestration_check(self.scenario_manager.start(self.state))

    def step(self) -> DepotState:
        with self._lock:
            if not self.state.is_running:
                return self.state

            previous_time = self.state.current_time
            state = advance_clock(self.state, noise=self.noise)
            if self.scenario_manager:
                state = self.scenario_manager.update(state, previous_time)
            state = run_orchestration_check(state)

            new_alerts = len(state.unresolved_alerts) - len(self.state.unresolved_alerts)
            if new_alerts > 0:
                print(f"[{state.current_time.strftime('%H:%M')}] {new_alerts} new alert(s), "
                      f"{len(state.unresolved_alerts)} active")

            self.state = state
            if self.logger:
                self.logger.log_step(state)
            return state

    def run(self, n_ticks: int, realtime: bool = False) -> DepotState:
        """Run `n_ticks` steps; with `realtime` each step waits the configured tick interval."""
        print(f"\n{'='*60}")
        print(f"SIMULATION START: {self.state.current_time.strftime('%Y-%m-%d %H:%M')}")
        print(f"Ticks: {n_ticks} | Speed: {self.state.speed_multiplier}x")
        print(f"{'='*60}\n")

        for _ in range(n_ticks):
            self.step()
            if realtime:
                time.sleep(SimulationSettings.TICK_INTERVAL_SECONDS)

        print(f"\n{'='*60}")
        print(f"SIMULATION COMPLETE at {self.state.current_time.strftime('%H:%M')}")
        print(f"Active alerts: {len(self.state.unresolved_alerts)} | "
              f"Resolved: {len(self.state.resolved_alerts)}")
        if self.logger:
            print(f"Log saved to: {self.logger.log_path}")
        print(f"{'='*60}")
        return self.state

    def resolve_alert(self, alert_id: str, action_id: str, resolved_by: str = "dispatcher") -> DepotState:
        with self._lock:
            self.state = resolve(alert_id, action_id, self.state, resolved_by)
            return self.state

    def set_speed(self, multiplier: int) -> None:
        if multiplier not in SimulationSettings.ALLOWED_SPEEDS:
            raise ValueError(
                f"Speed must be one of {SimulationSettings.ALLOWED_SPEEDS}, got {multiplier}"
            )
        with self._lock:
            self.state = replace(self.state, speed_multiplier=multiplier)
        print(f"Speed set to {multiplier}x")

    def pause(self) -> None:
        self._set_running(False)

    def resume(self) -> None:
        self._set_running(True)

    def toggle(self) -> None:
        self._set_running(None)

    def stats(self, depot_id: Optional[str] = None) -> DashboardStats:
        with self._lock:
            return compute_dashboard_stats(self.state, depot_id)

    def _set_running(self, running: Optional[bool]) -> None:
        """Set the run flag; None flips it. Read and write happen under one lock."""
        with self._lock:
            if running is None:
                running = not self.state.is_running
            self.state = replace(self.state, is_running=running)
        print("Simulation resumed" if running else "Simulation paused")
