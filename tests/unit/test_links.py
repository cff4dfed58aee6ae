"""
Unit tests for bidirectional reference maintenance.
"""

from orchestrated_depot.src.core.charging import ChargerStatus
from orchestrated_depot.src.fleet.schedule import DutyStatus
from orchestrated_depot.src.fleet.vehicle import VehicleStatus
from orchestrated_depot.src.orchestration.links import (
    check_consistency,
    connect_vehicle,
    disconnect_vehicle,
    reassign_duty,
)


def by_id(items, attr, value):
    return next(i for i in items if getattr(i, attr) == value)


class TestReassignDuty:
    def test_both_sides_updated(self, make_vehicle, make_duty):
        vehicles = [make_vehicle("BUS-101", assigned_duty="DUTY-001"), make_vehicle("BUS-105")]
        schedule = [make_duty()]
        new_vehicles, new_schedule = reassign_duty(vehicles, schedule, "DUTY-001", "BUS-101", "BUS-105")
        assert new_schedule[0].vehicle_id == "BUS-105"
        assert by_id(new_vehicles, "vehicle_id", "BUS-105").assigned_duty == "DUTY-001"
        assert by_id(new_vehicles, "vehicle_id", "BUS-101").assigned_duty is None

    def test_inputs_untouched(self, make_vehicle, make_duty):
        vehicles = [make_vehicle("BUS-101", assigned_duty="DUTY-001"), make_vehicle("BUS-105")]
        schedule = [make_duty()]
        reassign_duty(vehicles, schedule, "DUTY-001", "BUS-101", "BUS-105")
        assert schedule[0].vehicle_id == "BUS-101"
        assert vehicles[0].assigned_duty == "DUTY-001"


class TestChargerLinks:
    def test_connect_links_both_sides(self, make_vehicle, make_charger):
        vehicles, chargers = connect_vehicle([make_vehicle("BUS-105")], [make_charger("CH-C05")],
                                             "BUS-105", "CH-C05")
        assert chargers[0].connected_vehicle == "BUS-105"
        assert chargers[0].status == ChargerStatus.ACTIVE
        assert vehicles[0].charger_id == "CH-C05"
        assert vehicles[0].status == VehicleStatus.CHARGING

    def test_connect_releases_previous_occupant(self, make_vehicle, make_charger):
        vehicles = [
            make_vehicle("BUS-101", charger_id="CH-C01", status=VehicleStatus.CHARGING),
            make_vehicle("BUS-105"),
        ]
        chargers = [make_charger("CH-C01", status=ChargerStatus.ACTIVE, connected_vehicle="BUS-101")]
        vehicles, chargers = connect_vehicle(vehicles, chargers, "BUS-105", "CH-C01")
        assert chargers[0].connected_vehicle == "BUS-105"
        assert by_id(vehicles, "vehicle_id", "BUS-101").charger_id is None

    def test_disconnect_frees_active_charger(self, make_vehicle, make_charger):
        vehicles = [make_vehicle("BUS-101", charger_id="CH-C01", status=VehicleStatus.CHARGING)]
        chargers = [make_charger("CH-C01", status=ChargerStatus.ACTIVE, connected_vehicle="BUS-101",
                                 power_delivery=140.0)]
        vehicles, chargers = disconnect_vehicle(vehicles, chargers, "BUS-101")
        assert chargers[0].status == ChargerStatus.AVAILABLE
        assert chargers[0].connected_vehicle is None
        assert chargers[0].power_delivery == 0.0
        assert vehicles[0].charger_id is None

    def test_disconnect_keeps_fault(self, make_vehicle, make_charger):
        vehicles = [make_vehicle("BUS-101", charger_id="CH-C01")]
        chargers = [make_charger("CH-C01", status=ChargerStatus.FAULTED, connected_vehicle="BUS-101")]
        _, chargers = disconnect_vehicle(vehicles, chargers, "BUS-101")
        assert chargers[0].status == ChargerStatus.FAULTED


class TestCheckConsistency:
    def test_consistent_state_is_clean(self, faulted_pullout):
        assert check_consistency(faulted_pullout) == []

    def test_duty_pointing_elsewhere_is_reported(self, faulted_pullout):
        faulted_pullout.schedule[0].vehicle_id = "BUS-105"
        problems = check_consistency(faulted_pullout)
        assert len(problems) == 2
        assert "BUS-101 assigned to DUTY-001" in problems[0]
        assert "DUTY-001 names BUS-105" in problems[1]

    def test_duty_left_on_swap_target_is_reported(self, make_vehicle, make_duty, make_state):
        vehicles = [make_vehicle("BUS-101", assigned_duty="DUTY-001"),
                    make_vehicle("BUS-105", assigned_duty="DUTY-005")]
        schedule = [make_duty("DUTY-001", "BUS-101", "06:15"),
                    make_duty("DUTY-005", "BUS-105", "07:40")]
        vehicles, schedule = reassign_duty(vehicles, schedule, "DUTY-001", "BUS-101", "BUS-105")
        problems = check_consistency(make_state(vehicles=vehicles, schedule=schedule))
        assert problems == ["DUTY-005 names BUS-105, which does not point back"]

    def test_finished_duty_is_not_reported(self, faulted_pullout):
        faulted_pullout.schedule[0].status = DutyStatus.COMPLETED
        faulted_pullout.vehicles[0].assigned_duty = None
        assert check_consistency(faulted_pullout) == []

    def test_one_sided_charger_link_is_reported(self, faulted_pullout):
        faulted_pullout.chargers[0].connected_vehicle = None
        problems = check_consistency(faulted_pullout)
        assert any("CH-C01" in p for p in problems)

    def test_missing_duty_is_reported(self, faulted_pullout):
        faulted_pullout.vehicles[1].assigned_duty = "DUTY-404"
        assert any("DUTY-404" in p for p in check_consistency(faulted_pullout))
