"""
Unit tests for swap-candidate search and swap confidence scoring.
"""

import pytest

from orchestrated_depot.src.fleet.vehicle import VehicleStatus
from orchestrated_depot.src.orchestration.engine import calculate_swap_confidence, find_swap_candidates


# ---------------------------------------------------------------------------
# find_swap_candidates
# ---------------------------------------------------------------------------

class TestFindSwapCandidates:
    @pytest.fixture
    def duty(self, make_duty):
        return make_duty("DUTY-001", "BUS-101", "06:15")

    def ids(self, vehicles, duty, schedule=None):
        return [v.vehicle_id for v in find_swap_candidates(vehicles, duty, schedule or [duty])]

    def test_sorted_by_soc_descending_and_capped_at_three(self, make_vehicle, duty):
        vehicles = [
            make_vehicle("BUS-201", soc=91.0),
            make_vehicle("BUS-202", soc=99.0),
            make_vehicle("BUS-203", soc=95.0),
            make_vehicle("BUS-204", soc=97.0),
        ]
        assert self.ids(vehicles, duty) == ["BUS-202", "BUS-204", "BUS-203"]

    def test_ties_keep_input_order(self, make_vehicle, duty):
        vehicles = [make_vehicle("BUS-301", soc=95.0), make_vehicle("BUS-302", soc=95.0)]
        assert self.ids(vehicles, duty) == ["BUS-301", "BUS-302"]

    def test_other_depot_excluded(self, make_vehicle, duty):
        assert self.ids([make_vehicle("BUS-401", depot_id="north")], duty) == []

    def test_insufficient_soc_excluded(self, make_vehicle, duty):
        assert self.ids([make_vehicle("BUS-402", soc=89.9)], duty) == []

    def test_soc_equal_to_requirement_included(self, make_vehicle, duty):
        assert self.ids([make_vehicle("BUS-403", soc=90.0)], duty) == ["BUS-403"]

    @pytest.mark.parametrize("status", [VehicleStatus.FAULTED, VehicleStatus.MAINTENANCE, VehicleStatus.DRIVING])
    def test_unavailable_status_excluded(self, make_vehicle, duty, status):
        assert self.ids([make_vehicle("BUS-404", status=status)], duty) == []

    def test_charging_vehicle_included(self, make_vehicle, duty):
        assert self.ids([make_vehicle("BUS-405", status=VehicleStatus.CHARGING)], duty) == ["BUS-405"]

    def test_at_risk_vehicle_excluded(self, make_vehicle, duty):
        assert self.ids([make_vehicle("BUS-101", soc=99.0)], duty) == []

    def test_vehicle_committed_to_earlier_duty_excluded(self, make_vehicle, make_duty, duty):
        earlier = make_duty("DUTY-010", "BUS-501", "06:00")
        vehicles = [make_vehicle("BUS-501", assigned_duty="DUTY-010")]
        assert self.ids(vehicles, duty, [duty, earlier]) == []

    def test_vehicle_committed_to_same_time_duty_excluded(self, make_vehicle, make_duty, duty):
        same = make_duty("DUTY-011", "BUS-502", "06:15")
        vehicles = [make_vehicle("BUS-502", assigned_duty="DUTY-011")]
        assert self.ids(vehicles, duty, [duty, same]) == []

    def test_vehicle_committed_to_later_duty_included(self, make_vehicle, make_duty, duty):
        later = make_duty("DUTY-012", "BUS-503", "09:00")
        vehicles = [make_vehicle("BUS-503", assigned_duty="DUTY-012")]
        assert self.ids(vehicles, duty, [duty, later]) == ["BUS-503"]

    def test_dangling_duty_reference_does_not_exclude(self, make_vehicle, duty):
        vehicles = [make_vehicle("BUS-504", assigned_duty="DUTY-GONE")]
        assert self.ids(vehicles, duty) == ["BUS-504"]


# ---------------------------------------------------------------------------
# calculate_swap_confidence
# ---------------------------------------------------------------------------

class TestSwapConfidence:
    @pytest.fixture
    def duty(self, make_duty):
        return make_duty(required_soc=90.0)

    def test_full_bonus_stack(self, make_vehicle, duty):
        candidate = make_vehicle("BUS-105", soc=98.0, soh=99.0, efficiency=1.0)
        assert calculate_swap_confidence(candidate, duty) == 84

    def test_middle_tiers(self, make_vehicle, duty):
        candidate = make_vehicle("BUS-106", soc=94.0, soh=92.0, efficiency=1.4, assigned_duty="DUTY-009")
        # 50 + 2 + 5 + 5
        assert calculate_swap_confidence(candidate, duty) == 62

    def test_capped_at_99(self, make_vehicle, make_duty):
        candidate = make_vehicle("BUS-107", soc=100.0, soh=100.0, efficiency=0.9)
        assert calculate_swap_confidence(candidate, make_duty(required_soc=50.0)) == 99

    def test_surplus_bonus_capped_at_20(self, make_vehicle, make_duty):
        candidate = make_vehicle("BUS-108", soc=100.0, soh=80.0, efficiency=2.0, assigned_duty="DUTY-009")
        assert calculate_swap_confidence(candidate, make_duty(required_soc=10.0)) == 70

    def test_half_points_round_up(self, make_vehicle, duty):
        candidate = make_vehicle("BUS-109", soc=91.0, soh=80.0, efficiency=2.0, assigned_duty="DUTY-009")
        assert calculate_swap_confidence(candidate, duty) == 51

    def test_floored_at_zero(self, make_vehicle, make_duty):
        candidate = make_vehicle("BUS-110", soc=0.0, soh=80.0, efficiency=2.0, assigned_duty="DUTY-009")
        assert calculate_swap_confidence(candidate, make_duty(required_soc=100.0)) == 0

    def test_returns_int(self, make_vehicle, duty):
        assert isinstance(calculate_swap_confidence(make_vehicle(soc=93.0), duty), int)
