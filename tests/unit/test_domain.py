"""
Unit tests for the domain model: geometry, routes, depots, tariffs, duties,
vehicles, alerts and noise sources.
"""

import pytest

from orchestrated_depot.src.core.alert import AlertIdFactory
from orchestrated_depot.src.core.depot import Depot, GridConstraint
from orchestrated_depot.src.core.geometry import Location
from orchestrated_depot.src.core.route import Route
from orchestrated_depot.src.core.tariff import EnergyTariff
from orchestrated_depot.src.fleet.schedule import hhmm_to_minutes
from orchestrated_depot.src.fleet.vehicle import Vehicle
from orchestrated_depot.src.simulation.noise import ConstantNoise, RandomNoise


# ---------------------------------------------------------------------------
# Geometry and routes
# ---------------------------------------------------------------------------

class TestRoute:
    def test_position_at_start_and_segment_boundary(self, line_route):
        assert line_route.position_at(0.0) == Location(0.0, 0.0)
        assert line_route.position_at(0.5) == Location(0.0, 1.0)

    def test_position_interpolates_second_segment(self, line_route):
        position = line_route.position_at(0.75)
        assert position.lon == pytest.approx(1.5)

    def test_short_route_has_no_position(self):
        route = Route("r", "Stub", "central", waypoints=[Location(0.0, 0.0)])
        assert route.position_at(0.3) is None

    def test_length_falls_back_to_geodesic(self, line_route):
        # two degrees of longitude on the equator
        assert line_route.length_km == pytest.approx(222.6, abs=0.5)

    def test_declared_length_wins(self, line_route):
        line_route.distance_km = 145.0
        assert line_route.length_km == 145.0


# ---------------------------------------------------------------------------
# Depot constraints
# ---------------------------------------------------------------------------

class TestDepotConstraints:
    @pytest.fixture
    def depot(self):
        return Depot(
            depot_id="north", name="North", location=Location(51.564, -0.106), max_capacity_mw=1.8,
            constraints=[
                GridConstraint(0, 24, 100, "No restrictions"),
                GridConstraint(16, 19, 50, "Evening peak"),
                GridConstraint(17, 18, 30, "Substation works"),
                GridConstraint(7, 9, 70, "Winter mornings", months=(12, 1)),
            ],
        )

    def test_unrestricted_entries_ignored(self, depot):
        assert depot.active_constraint(10, 6) is None
        assert depot.effective_capacity_kw(10, 6) == 1800

    def test_most_restrictive_wins(self, depot):
        assert depot.active_constraint(17, 6).description == "Substation works"
        assert depot.effective_capacity_kw(17, 6) == pytest.approx(540)

    def test_end_hour_exclusive(self, depot):
        assert depot.active_constraint(19, 6) is None

    def test_month_filter(self, depot):
        assert depot.active_constraint(8, 1).description == "Winter mornings"
        assert depot.active_constraint(8, 6) is None


# ---------------------------------------------------------------------------
# Tariff
# ---------------------------------------------------------------------------

class TestTariff:
    def test_matching_period(self, tariff):
        period = tariff.rate_for_hour(8)
        assert period.period_type == "peak"
        assert period.rate == 0.28

    def test_gap_falls_back_to_standard(self, tariff):
        period = tariff.rate_for_hour(22)
        assert period.period_type == "standard"
        assert period.rate == 0.15

    def test_peak_rate(self, tariff):
        assert tariff.peak_rate == 0.32

    def test_empty_tariff_peak_rate(self):
        assert EnergyTariff(name="Flat").peak_rate == 0.15


# ---------------------------------------------------------------------------
# Duties, vehicles, alerts
# ---------------------------------------------------------------------------

class TestValidation:
    @pytest.mark.parametrize("value,expected", [("06:15", 375), ("00:00", 0), (" 23:59 ", 1439)])
    def test_hhmm_parsing(self, value, expected):
        assert hhmm_to_minutes(value) == expected

    @pytest.mark.parametrize("value", ["6", "24:00", "06:60", "ab:cd", ""])
    def test_hhmm_rejects_malformed(self, value):
        with pytest.raises(ValueError):
            hhmm_to_minutes(value)

    def test_duty_with_bad_departure_rejected(self, make_duty):
        with pytest.raises(ValueError):
            make_duty(departure_time="6.15")

    @pytest.mark.parametrize("soc", [-1.0, 100.5])
    def test_vehicle_soc_out_of_range_rejected(self, soc):
        with pytest.raises(ValueError):
            Vehicle(vehicle_id="BUS-999", depot_id="central", soc=soc)

    def test_minutes_until_departure_does_not_wrap(self, make_duty, now):
        late = now.replace(hour=23, minute=50)
        assert make_duty(departure_time="00:10").minutes_until_departure(late) == -1420


class TestAlertIds:
    def test_sequential_zero_padded(self):
        ids = AlertIdFactory()
        assert [ids(), ids()] == ["ALERT-00001", "ALERT-00002"]

    def test_independent_factories(self):
        a, b = AlertIdFactory(), AlertIdFactory()
        a()
        assert b() == "ALERT-00001"


class TestNoise:
    def test_constant(self):
        assert ConstantNoise(0.25).uniform() == 0.25

    @pytest.mark.parametrize("value", [-0.1, 1.0])
    def test_constant_out_of_range(self, value):
        with pytest.raises(ValueError):
            ConstantNoise(value)

    def test_seeded_random_is_reproducible(self):
        a, b = RandomNoise(seed=7), RandomNoise(seed=7)
        samples = [a.uniform() for _ in range(5)]
        assert samples == [b.uniform() for _ in range(5)]
        assert all(0.0 <= s < 1.0 for s in samples)
