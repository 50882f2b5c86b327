"""Tests for domain models and snapshot loading."""

import dataclasses
from datetime import date, time

import pytest

from shiftassign.domain.errors import SnapshotError
from shiftassign.domain.models import (
    AssignmentRecord,
    AssignmentRequest,
    Availability,
    CoverageGap,
    Employee,
    GapType,
    PositionRole,
    SchedulingRule,
    ShiftDefinition,
    ShiftPattern,
    TimeBlock,
    day_of_week,
    parse_bool,
    parse_time,
)


class TestPositionRole:
    """Tests for collapsing position labels."""

    @pytest.mark.parametrize(
        "label",
        ["supervisor", "shift_supervisor", "Shift Supervisor", "management", "MANAGER", "shift-supervisor"],
    )
    def test_supervisor_labels(self, label):
        assert PositionRole.from_label(label) is PositionRole.SUPERVISOR_CAPABLE

    @pytest.mark.parametrize("label", ["dispatcher", "", None, "call_taker"])
    def test_general_labels(self, label):
        assert PositionRole.from_label(label) is PositionRole.GENERAL_STAFF

    def test_employee_role_computed_once(self):
        employee = Employee(id="E1", first_name="Ana", last_name="Ruiz", position="management")
        assert employee.is_supervisor
        assert employee.full_name == "Ana Ruiz"

    def test_employee_from_dict_camel_case(self):
        employee = Employee.from_dict(
            {"id": 7, "firstName": "Li", "lastName": "Wei", "position": "dispatcher", "isActive": False}
        )
        assert employee.id == "7"
        assert not employee.is_active
        assert not employee.is_supervisor

    def test_employee_is_immutable(self):
        employee = Employee(id="E1", position="dispatcher")
        with pytest.raises(dataclasses.FrozenInstanceError):
            employee.position = "supervisor"
        assert not employee.is_supervisor

    def test_employee_string_flags(self):
        employee = Employee.from_dict({"id": "E1", "isActive": "false"})
        assert employee.is_active is False


class TestShiftDefinition:
    """Tests for shift duration and midnight handling."""

    def test_day_shift(self):
        shift = ShiftDefinition("d", "Day", time(9, 0), time(21, 0))
        assert shift.duration_hours == 12.0
        assert not shift.crosses_midnight

    def test_overnight_shift(self):
        shift = ShiftDefinition("g", "Graveyard", time(17, 0), time(5, 0))
        assert shift.duration_hours == 12.0
        assert shift.crosses_midnight
        assert shift.end_datetime(date(2025, 1, 6)).date() == date(2025, 1, 7)

    def test_equal_times_is_full_day(self):
        shift = ShiftDefinition("x", "All day", time(6, 0), time(6, 0))
        assert shift.duration_hours == 24.0
        assert shift.crosses_midnight

    def test_explicit_duration_kept(self):
        shift = ShiftDefinition("p", "Paid", time(9, 0), time(19, 30), duration_hours=10.0)
        assert shift.duration_hours == 10.0

    def test_from_dict_with_seconds(self):
        shift = ShiftDefinition.from_dict(
            {"id": "s1", "name": "Swing", "startTime": "15:00:00", "endTime": "01:00:00"}
        )
        assert shift.start_time == time(15, 0)
        assert shift.duration_hours == 10.0
        assert shift.crosses_midnight

    def test_bad_time_rejected(self):
        with pytest.raises(SnapshotError):
            parse_time("25")
        with pytest.raises(ValueError):
            parse_time("ab:cd")


class TestShiftPattern:
    """Tests for pattern labels and day plans."""

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("4x10", ShiftPattern.FOUR_TEN),
            ("FourTen", ShiftPattern.FOUR_TEN),
            ("3x12plus4", ShiftPattern.THREE_TWELVE_PLUS_FOUR),
            ("3x12_1x4", ShiftPattern.THREE_TWELVE_PLUS_FOUR),
            ("ThreeTwelvePlusFour", ShiftPattern.THREE_TWELVE_PLUS_FOUR),
        ],
    )
    def test_from_label(self, label, expected):
        assert ShiftPattern.from_label(label) is expected

    def test_unknown_label(self):
        with pytest.raises(SnapshotError):
            ShiftPattern.from_label("5x8")

    def test_day_hours(self):
        assert ShiftPattern.FOUR_TEN.day_hours == (10.0, 10.0, 10.0, 10.0)
        assert ShiftPattern.THREE_TWELVE_PLUS_FOUR.day_hours == (12.0, 12.0, 12.0, 4.0)
        assert ShiftPattern.THREE_TWELVE_PLUS_FOUR.length == 4

    def test_rule_from_dict(self):
        rule = SchedulingRule.from_dict(
            {"employee_id": "E1", "preferred_shift_pattern": "3x12_1x4", "min_rest_hours": 8}
        )
        assert rule.preferred_pattern is ShiftPattern.THREE_TWELVE_PLUS_FOUR
        assert rule.min_rest_hours == 8.0
        assert rule.max_consecutive_days is None


class TestTimeBlock:
    """Tests for coverage windows."""

    def test_default_blocks(self):
        blocks = TimeBlock.create_default_blocks()
        assert [b.id for b in blocks] == ["05:00-09:00", "09:00-21:00", "21:00-01:00", "01:00-05:00"]
        assert [b.min_total_staff for b in blocks] == [6, 8, 7, 6]
        assert all(b.min_supervisors == 1 for b in blocks)
        assert [b.crosses_midnight for b in blocks] == [False, False, True, False]

    def test_wrapping_block_end(self):
        block = TimeBlock(time(21, 0), time(1, 0))
        assert block.end_minutes == 25 * 60

    def test_supervisors_cannot_exceed_total(self):
        with pytest.raises(ValueError):
            TimeBlock(time(9, 0), time(21, 0), min_total_staff=1, min_supervisors=2)

    def test_negative_minimum_rejected(self):
        with pytest.raises(ValueError):
            TimeBlock(time(9, 0), time(21, 0), min_total_staff=-1)

    def test_from_dict(self):
        block = TimeBlock.from_dict(
            {"startTime": "21:00", "endTime": "01:00", "crossesMidnight": True, "minTotalStaff": 7, "minSupervisors": 1}
        )
        assert block.crosses_midnight
        assert block.id == "21:00-01:00"


class TestAvailability:
    """Tests for weekday availability records."""

    def test_sunday_is_zero(self):
        assert day_of_week(date(2025, 1, 5)) == 0
        assert day_of_week(date(2025, 1, 6)) == 1
        assert day_of_week(date(2025, 1, 11)) == 6

    def test_day_range_checked(self):
        with pytest.raises(ValueError):
            Availability(employee_id="E1", day_of_week=7)


class TestAssignmentRecord:
    """Tests for output records."""

    def test_for_shift_copies_times(self):
        shift = ShiftDefinition("g", "Graveyard", time(17, 0), time(5, 0))
        record = AssignmentRecord.for_shift("sched", "E1", shift, date(2025, 1, 6), True)
        assert record.start_time == time(17, 0)
        assert record.key == ("sched", "E1", "2025-01-06")
        assert record.to_dict() == {
            "schedule_id": "sched",
            "employee_id": "E1",
            "shift_id": "g",
            "date": "2025-01-06",
            "is_supervisor_shift": True,
            "start_time": "17:00",
            "end_time": "05:00",
        }

    def test_gap_shortfall(self):
        gap = CoverageGap(date(2025, 1, 6), "09:00-21:00", time(9, 0), time(21, 0), 8, 5, GapType.TOTAL)
        assert gap.shortfall == 3
        assert "short 3" in str(gap)


class TestAssignmentRequest:
    """Tests for building a run request from snapshots."""

    def test_from_snapshot(self):
        request = AssignmentRequest.from_snapshot(
            schedule_id="sched-1",
            start_date="2025-01-06",
            end_date="2025-01-19T00:00:00Z",
            employees=[
                {"id": "S1", "firstName": "Sam", "lastName": "Lee", "position": "supervisor"},
                {"id": "G1", "firstName": "Gus", "lastName": "Fry", "position": "dispatcher", "isActive": False},
            ],
            shifts=[{"id": "d", "name": "Day", "startTime": "09:00", "endTime": "21:00", "durationHours": 12}],
            availability=[{"employeeId": "S1", "dayOfWeek": 0, "isAvailable": False}],
            rules=[{"employeeId": "S1", "preferredPattern": "4x10"}],
        )
        assert request.num_days == 14
        assert len(request.schedule_dates) == 14
        assert [e.id for e in request.active_employees] == ["S1"]
        assert request.availability_map()[("S1", 0)].is_available is False
        assert request.rules_map()["S1"].preferred_pattern is ShiftPattern.FOUR_TEN
        assert len(request.requirements) == 4

    def test_missing_field(self):
        with pytest.raises(SnapshotError):
            ShiftDefinition.from_dict({"id": "x", "startTime": "09:00"})


class TestParseBool:
    """Tests for snapshot flag parsing."""

    @pytest.mark.parametrize("value", [True, 1, "true", "TRUE", " yes ", "1", "t"])
    def test_true_values(self, value):
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", [False, 0, "false", "False", "no", "0", "f"])
    def test_false_values(self, value):
        assert parse_bool(value) is False

    @pytest.mark.parametrize("value", ["maybe", "", 2, None, 1.5])
    def test_invalid_values(self, value):
        with pytest.raises(SnapshotError):
            parse_bool(value)

    def test_snapshot_flags(self):
        availability = Availability.from_dict({"employeeId": "E1", "dayOfWeek": 3, "isAvailable": "false"})
        block = TimeBlock.from_dict(
            {"startTime": "09:00", "endTime": "21:00", "crossesMidnight": "false", "minTotalStaff": 1}
        )
        assert availability.is_available is False
        assert block.crosses_midnight is False

    def test_bad_flag_rejected(self):
        with pytest.raises(SnapshotError):
            Employee.from_dict({"id": "E1", "isActive": "sometimes"})
