"""
Shared pytest fixtures for the orchestrated depot test suite.

Builders are exposed as factory fixtures so each test states only the
fields it cares about.
"""

from datetime import datetime

import pytest

from orchestrated_depot.src.core.alert import AlertIdFactory
from orchestrated_depot.src.core.charging import Charger, ChargerStatus
from orchestrated_depot.src.core.depot import Depot
from orchestrated_depot.src.core.geometry import Location
from orchestrated_depot.src.core.route import Route
from orchestrated_depot.src.core.tariff import EnergyTariff, TariffPeriod
from orchestrated_depot.src.fleet.schedule import ScheduledDuty
from orchestrated_depot.src.fleet.vehicle import Vehicle, VehicleStatus
from orchestrated_depot.src.simulation.state import DepotState

CENTRAL = Location(51.532, -0.124)


@pytest.fixture
def now():
    """04:00 on a June morning (no seasonal grid constraints apply)."""
    return datetime(2024, 6, 3, 4, 0)


@pytest.fixture
def depot():
    """Central depot, 1 MW connection, no constraints."""
    return Depot(depot_id="central", name="Central Depot", location=CENTRAL, max_capacity_mw=1.0)


@pytest.fixture
def tariff():
    return EnergyTariff(
        name="Test Tariff",
        periods=[
            TariffPeriod(0, 5, 0.08, "super-off-peak"),
            TariffPeriod(5, 7, 0.12, "off-peak"),
            TariffPeriod(7, 9, 0.28, "peak"),
            TariffPeriod(9, 16, 0.15, "standard"),
            TariffPeriod(16, 19, 0.32, "peak"),
        ],
    )


@pytest.fixture
def line_route():
    """Three waypoints one degree of longitude apart on the equator."""
    return Route(
        route_id="route-line",
        name="Route Line",
        depot_id="central",
        waypoints=[Location(0.0, 0.0), Location(0.0, 1.0), Location(0.0, 2.0)],
    )


@pytest.fixture
def make_vehicle():
    def _make(vehicle_id="BUS-101", **overrides) -> Vehicle:
        fields = dict(
            vehicle_id=vehicle_id,
            depot_id="central",
            soc=95.0,
            required_soc=90.0,
            status=VehicleStatus.IDLE,
            lat=CENTRAL.lat,
            lng=CENTRAL.lon,
            soh=90.0,
            efficiency=1.6,
        )
        fields.update(overrides)
        return Vehicle(**fields)
    return _make


@pytest.fixture
def make_charger():
    def _make(charger_id="CH-C01", **overrides) -> Charger:
        fields = dict(charger_id=charger_id, depot_id="central", power_kw=150.0,
                      status=ChargerStatus.AVAILABLE)
        fields.update(overrides)
        return Charger(**fields)
    return _make


@pytest.fixture
def make_duty():
    def _make(duty_id="DUTY-001", vehicle_id="BUS-101", departure_time="06:15", **overrides) -> ScheduledDuty:
        fields = dict(
            duty_id=duty_id,
            depot_id="central",
            vehicle_id=vehicle_id,
            departure_time=departure_time,
            route_id="route-line",
            route_name="Route Line",
            driver="J. Smith",
            required_soc=90.0,
        )
        fields.update(overrides)
        return ScheduledDuty(**fields)
    return _make


@pytest.fixture
def make_state(now, depot, tariff, line_route):
    def _make(vehicles=(), chargers=(), schedule=(), depots=None, **overrides) -> DepotState:
        fields = dict(
            vehicles=list(vehicles),
            chargers=list(chargers),
            depots=list(depots) if depots is not None else [depot],
            schedule=list(schedule),
            routes=[line_route],
            tariff=tariff,
            current_time=now,
            alert_ids=AlertIdFactory(),
        )
        fields.update(overrides)
        return DepotState(**fields)
    return _make


@pytest.fixture
def faulted_pullout(make_vehicle, make_charger, make_duty, make_state):
    """
    BUS-101 plugged into a faulted charger at 32% with a 06:15 duty needing 90%,
    and BUS-105 idle at 98% with no duty.
    """
    vehicles = [
        make_vehicle("BUS-101", soc=32.0, status=VehicleStatus.CHARGING,
                     charger_id="CH-C01", assigned_duty="DUTY-001"),
        make_vehicle("BUS-105", soc=98.0, soh=99.0, efficiency=1.0, location="Depot Lane 3"),
    ]
    chargers = [
        make_charger("CH-C01", status=ChargerStatus.FAULTED, connected_vehicle="BUS-101",
                     fault_code="communication-timeout"),
    ]
    return make_state(vehicles=vehicles, chargers=chargers, schedule=[make_duty()])
