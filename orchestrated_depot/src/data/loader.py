# src/data/loader.py
"""
Data loading module.
Loads the bundled CSV files and constructs the core depot objects:
- Depots with their grid constraints
- Chargers, vehicles and scheduled duties
- Routes with ordered waypoints
- The energy tariff and scripted scenarios
- Returns a fully initialized DepotState ready for simulation
"""

from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional, Tuple

import pandas as pd

from orchestrated_depot.src.config.paths import data_path
from orchestrated_depot.src.config.settings import Paths, SimulationSettings
from orchestrated_depot.src.core.charging import Charger, ChargerStatus
from orchestrated_depot.src.core.depot import Depot, GridConstraint
from orchestrated_depot.src.core.geometry import Location
from orchestrated_depot.src.core.route import Route
from orchestrated_depot.src.core.tariff import EnergyTariff, TariffPeriod
from orchestrated_depot.src.fleet.schedule import DutyStatus, ScheduledDuty, hhmm_to_minutes
from orchestrated_depot.src.fleet.vehicle import Vehicle, VehicleStatus
from orchestrated_depot.src.orchestration.aggregation import run_orchestration_check
from orchestrated_depot.src.scenarios.events import EventType, Scenario, ScenarioEvent
from orchestrated_depot.src.simulation.clock import refresh_depots
from orchestrated_depot.src.simulation.state import DepotState


def load_depots(
    depots_csv: str = Paths.DEPOTS_CSV,
    constraints_csv: str = Paths.GRID_CONSTRAINTS_CSV
) -> Dict[str, Depot]:
    """
    Load depots and attach their grid constraints.
    Returns dict: depot id -> Depot
    """
    df = pd.read_csv(data_path(depots_csv))

    depots: Dict[str, Depot] = {}
    for _, row in df.iterrows():
        depot = Depot(
            depot_id=str(row["Depot Id"]).strip(),
            name=str(row["Depot Name"]).strip(),
            location=Location(
                lat=float(row["Latitude"]),
                lon=float(row["Longitude"])
            ),
            address=_opt_str(row.get("Address")) or "",
            max_capacity_mw=float(row.get("Max Capacity (MW)", 1.0))
        )
        depots[depot.depot_id] = depot

    cf = pd.read_csv(data_path(constraints_csv))
    for _, row in cf.iterrows():
        depot_id = str(row["Depot Id"]).strip()
        if depot_id not in depots:
            print(f"Warning: grid constraint for unknown depot '{depot_id}' skipped")
            continue
        months = _opt_str(row.get("Months"))
        depots[depot_id].constraints.append(GridConstraint(
            start_hour=int(row["Start Hour"]),
            end_hour=int(row["End Hour"]),
            max_capacity_percent=float(row["Max Capacity (%)"]),
            description=_opt_str(row.get("Description")) or "",
            months=tuple(int(m) for m in months.split("|")) if months else None
        ))

    return depots


def load_chargers(
    depots: Dict[str, Depot],
    chargers_csv: str = Paths.CHARGERS_CSV
) -> List[Charger]:
    df = pd.read_csv(data_path(chargers_csv))

    chargers: List[Charger] = []
    for _, row in df.iterrows():
        charger_id = str(row["Charger Id"]).strip()
        depot_id = str(row["Depot Id"]).strip()
        if depot_id not in depots:
            print(f"Warning: charger {charger_id} references unknown depot '{depot_id}' → skipped")
            continue

        chargers.append(Charger(
            charger_id=charger_id,
            depot_id=depot_id,
            zone=_opt_str(row.get("Zone")) or "A",
            power_kw=float(row.get("Power (kW)", 150.0)),
            connection_type=_opt_str(row.get("Connection Type")) or "CCS2",
            status=ChargerStatus(str(row["Status"]).strip()),
            connected_vehicle=_opt_str(row.get("Connected Vehicle")),
            fault_code=_opt_str(row.get("Fault Code")),
            fault_description=_opt_str(row.get("Fault Description")),
            temperature=_opt_float(row.get("Temperature"), 25.0),
            session_energy=_opt_float(row.get("Session Energy (kWh)"), 0.0),
            power_delivery=_opt_float(row.get("Power Delivery (kW)"), 0.0)
        ))

    return chargers


def load_vehicles(
    depots: Dict[str, Depot],
    vehicles_csv: str = Paths.VEHICLES_CSV
) -> List[Vehicle]:
    """
    Load the fleet. SoC values outside 0-100 raise ValueError.
    """
    df = pd.read_csv(data_path(vehicles_csv))

    vehicles: List[Vehicle] = []
    for _, row in df.iterrows():
        vehicle_id = str(row["Vehicle Id"]).strip()
        depot_id = str(row["Depot Id"]).strip()
        if depot_id not in depots:
            print(f"Warning: vehicle {vehicle_id} references unknown depot '{depot_id}' → skipped")
            continue

        vehicles.append(Vehicle(
            vehicle_id=vehicle_id,
            depot_id=depot_id,
            model=str(row["Model"]).strip(),
            manufacturer=str(row["Manufacturer"]).strip(),
            soc=float(row["SoC"]),
            required_soc=_opt_float(row.get("Required SoC"), 90.0),
            target_soc=_opt_float(row.get("Target SoC"), 100.0),
            status=VehicleStatus(str(row["Status"]).strip()),
            charger_id=_opt_str(row.get("Charger Id")),
            location=_opt_str(row.get("Location")) or "",
            assigned_duty=_opt_str(row.get("Assigned Duty")),
            lat=float(row["Latitude"]),
            lng=float(row["Longitude"]),
            route=_opt_str(row.get("Route")),
            progress=_opt_float(row.get("Progress"), 0.0),
            soh=_opt_float(row.get("SoH"), 100.0),
            odometer=_opt_float(row.get("Odometer (km)"), 0.0),
            efficiency=_opt_float(row.get("Efficiency (kWh/km)"), 1.2),
            driver_score=_opt_float(row.get("Driver Score"), 90.0),
            cycles=int(_opt_float(row.get("Cycles"), 0)),
            battery_temp=_opt_float(row.get("Battery Temp"), 25.0),
            ambient_temp=_opt_float(row.get("Ambient Temp"), 10.0),
            hvac_load=_opt_float(row.get("HVAC Load (kW)"), 0.0),
            next_service=_opt_str(row.get("Next Service")) or "30d",
            connection_type=_opt_str(row.get("Connection Type")) or "CCS2"
        ))

    return vehicles


def load_schedule(
    depots: Dict[str, Depot],
    schedule_csv: str = Paths.SCHEDULE_CSV
) -> List[ScheduledDuty]:
    df = pd.read_csv(data_path(schedule_csv), dtype={"Departure Time": str, "Return Time": str})

    schedule: List[ScheduledDuty] = []
    for _, row in df.iterrows():
        duty_id = str(row["Duty Id"]).strip()
        depot_id = str(row["Depot Id"]).strip()
        if depot_id not in depots:
            print(f"Warning: duty {duty_id} references unknown depot '{depot_id}' → skipped")
            continue

        schedule.append(ScheduledDuty(
            duty_id=duty_id,
            depot_id=depot_id,
            vehicle_id=str(row["Vehicle Id"]).strip(),
            departure_time=str(row["Departure Time"]).strip(),
            return_time=_opt_str(row.get("Return Time")) or "",
            route_id=_opt_str(row.get("Route Id")) or "",
            route_name=_opt_str(row.get("Route Name")) or "",
            distance_km=_opt_float(row.get("Distance (km)"), 0.0),
            estimated_energy_kwh=_opt_float(row.get("Energy (kWh)"), 0.0),
            driver=_opt_str(row.get("Driver")) or "",
            driver_id=_opt_str(row.get("Driver Id")) or "",
            required_soc=_opt_float(row.get("Required SoC"), 90.0),
            status=DutyStatus(_opt_str(row.get("Status")) or DutyStatus.SCHEDULED.value)
        ))

    # Departure order keeps the risk scan readable top to bottom
    schedule.sort(key=lambda d: hhmm_to_minutes(d.departure_time))
    return schedule


def load_routes(routes_csv: str = Paths.ROUTES_CSV) -> List[Route]:
    """
    Load routes from the long-format waypoint CSV (one row per waypoint).
    Waypoints are ordered by sequence number.
    """
    df = pd.read_csv(data_path(routes_csv))

    routes: Dict[str, Route] = {}
    points: Dict[str, List[Tuple[int, Location]]] = defaultdict(list)
    for _, row in df.iterrows():
        route_id = str(row["Route Id"]).strip()
        if route_id not in routes:
            routes[route_id] = Route(
                route_id=route_id,
                name=str(row["Route Name"]).strip(),
                depot_id=str(row["Depot Id"]).strip(),
                distance_km=_opt_float(row.get("Distance (km)"), None),
                estimated_duration_min=_opt_float(row.get("Duration (min)"), 0.0),
                average_energy_kwh=_opt_float(row.get("Energy (kWh)"), 0.0),
                elevation_gain=_opt_float(row.get("Elevation Gain (m)"), 0.0),
                stops=int(_opt_float(row.get("Stops"), 0))
            )

        points[route_id].append((
            int(row["Seq Number"]),
            Location(lat=float(row["Waypoint Lat"]), lon=float(row["Waypoint Lon"]))
        ))

    for route_id, route in routes.items():
        route.waypoints = [loc for _, loc in sorted(points[route_id], key=lambda p: p[0])]

    return list(routes.values())


def load_tariff(tariff_csv: str = Paths.TARIFF_CSV) -> EnergyTariff:
    df = pd.read_csv(data_path(tariff_csv))
    if df.empty:
        return EnergyTariff(name="Flat")

    first = df.iloc[0]
    return EnergyTariff(
        name=str(first["Tariff Name"]).strip(),
        currency=_opt_str(first.get("Currency")) or "£",
        periods=[
            TariffPeriod(
                start_hour=int(row["Start Hour"]),
                end_hour=int(row["End Hour"]),
                rate=float(row["Rate"]),
                period_type=str(row["Period Type"]).strip()
            )
            for _, row in df.iterrows()
        ]
    )


def load_scenarios(
    scenarios_csv: str = Paths.SCENARIOS_CSV,
    events_csv: str = Paths.SCENARIO_EVENTS_CSV
) -> List[Scenario]:
    sf = pd.read_csv(data_path(scenarios_csv), dtype={"Start Time": str, "End Time": str})
    ef = pd.read_csv(data_path(events_csv), dtype={"Time": str})

    events: Dict[str, List[ScenarioEvent]] = defaultdict(list)
    for sequence, (_, row) in enumerate(ef.iterrows()):
        scenario_id = str(row["Scenario Id"]).strip()
        events[scenario_id].append(ScenarioEvent(
            event_id=str(row["Event Id"]).strip(),
            time=str(row["Time"]).strip(),
            event_type=EventType(str(row["Type"]).strip()),
            title=str(row["Title"]).strip(),
            description=_opt_str(row.get("Description")) or "",
            sequence=sequence,
            vehicle_ids=_split_ids(row.get("Vehicle Ids")),
            charger_ids=_split_ids(row.get("Charger Ids")),
            fault_type=_opt_str(row.get("Fault Type")),
            temperature_change=_opt_float(row.get("Temperature Change"), 0.0),
            highlight=_opt_bool(row.get("Highlight"))
        ))

    scenarios: List[Scenario] = []
    for _, row in sf.iterrows():
        scenario_id = str(row["Scenario Id"]).strip()
        tags = _opt_str(row.get("Tags"))
        scenarios.append(Scenario(
            scenario_id=scenario_id,
            name=str(row["Name"]).strip(),
            description=_opt_str(row.get("Description")) or "",
            start_time=str(row["Start Time"]).strip(),
            end_time=str(row["End Time"]).strip(),
            difficulty=_opt_str(row.get("Difficulty")) or "Medium",
            tags=tags.split("|") if tags else [],
            initial_temperature=_opt_float(row.get("Initial Temperature"), None),
            events=events.get(scenario_id, [])
        ))

    return scenarios


def load_all_network_data() -> dict:
    """
    Convenience function to load everything at once.
    Returns a dictionary compatible with the rest of the simulation modules.
    """
    print("Loading depot data...")

    depots = load_depots()
    chargers = load_chargers(depots)
    vehicles = load_vehicles(depots)
    schedule = load_schedule(depots)
    routes = load_routes()
    tariff = load_tariff()
    scenarios = load_scenarios()

    print(f"Loaded:")
    print(f"  - {len(depots)} depots")
    print(f"  - {len(chargers)} chargers")
    print(f"  - {len(vehicles)} vehicles")
    print(f"  - {len(schedule)} scheduled duties")
    print(f"  - {len(routes)} routes")
    print(f"  - {len(tariff.periods)} tariff periods")
    print(f"  - {len(scenarios)} scenarios")

    return {
        "depots": depots,
        "chargers": chargers,
        "vehicles": vehicles,
        "schedule": schedule,
        "routes": routes,
        "tariff": tariff,
        "scenarios": scenarios
    }


def build_initial_state(start_time: Optional[datetime] = None, data: Optional[dict] = None) -> DepotState:
    """
    Assemble a DepotState at the configured start time (today, 05:30 by default)
    with depot statistics refreshed and a first orchestration pass already run.
    """
    data = data or load_all_network_data()

    if start_time is None:
        minutes = hhmm_to_minutes(SimulationSettings.SIM_START_TIME)
        start_time = datetime.now().replace(
            hour=minutes // 60, minute=minutes % 60, second=0, microsecond=0
        )

    vehicles = data["vehicles"]
    chargers = data["chargers"]
    state = DepotState(
        vehicles=vehicles,
        chargers=chargers,
        depots=refresh_depots(list(data["depots"].values()), vehicles, chargers),
        schedule=data["schedule"],
        routes=data["routes"],
        tariff=data["tariff"],
        current_time=start_time,
    )
    return run_orchestration_check(state)


def _opt_str(value) -> Optional[str]:
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _opt_float(value, default: Optional[float]) -> Optional[float]:
    if value is None or pd.isna(value):
        return default
    return float(value)


def _opt_bool(value) -> bool:
    if value is None or pd.isna(value):
        return False
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return bool(value)


def _split_ids(value) -> Tuple[str, ...]:
    text = _opt_str(value)
    if not text:
        return ()
    return tuple(part.strip() for part in text.split("|") if part.strip())
