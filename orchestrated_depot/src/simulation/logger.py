# src/simulation/logger.py
"""
Simple CSV logger for vehicle states over time.
"""

import csv
from datetime import datetime

from orchestrated_depot.src.config.paths import output_path
from orchestrated_depot.src.config.settings import SimulationSettings
from orchestrated_depot.src.simulation.state import DepotState


class SimulationLogger:
    def __init__(self, log_file: str = SimulationSettings.LOG_FILE_NAME):
        self.log_path = output_path(log_file)
        self.fieldnames = [
            "timestamp",
            "sim_time",
            "vehicle_id",
            "depot_id",
            "status",
            "latitude",
            "longitude",
            "soc",
            "route",
            "progress",
            "charger_id",
            "charger_power_kw",
            "assigned_duty",
            "depot_load_kw",
            "active_alerts"
        ]

        # Write header
        with open(self.log_path, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=self.fieldnames)
            writer.writeheader()

    def log_step(self, state: DepotState):
        depot_loads = {d.depot_id: d.current_load_kw for d in state.depots}
        active_alerts = len(state.unresolved_alerts)

        with open(self.log_path, "a", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=self.fieldnames)
            for vehicle in state.vehicles:
                charger = state.charger(vehicle.charger_id)
                writer.writerow({
                    "timestamp": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
                    "sim_time": state.current_time.strftime("%H:%M"),
                    "vehicle_id": vehicle.vehicle_id,
                    "depot_id": vehicle.depot_id,
                    "status": vehicle.status.value,
                    "latitude": round(vehicle.lat, 6),
                    "longitude": round(vehicle.lng, 6),
                    "soc": vehicle.soc,
                    "route": vehicle.route or "None",
                    "progress": round(vehicle.progress, 3),
                    "charger_id": vehicle.charger_id or "None",
                    "charger_power_kw": charger.power_delivery if charger else 0,
                    "assigned_duty": vehicle.assigned_duty or "None",
                    "depot_load_kw": depot_loads.get(vehicle.depot_id, 0),
                    "active_alerts": active_alerts
                })
