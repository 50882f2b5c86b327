"""
Property-Based Tests with Hypothesis
====================================
Invariants that must hold for arbitrary rosters, availability, patterns
and staffing levels.
"""

from collections import Counter
from datetime import date, time, timedelta

from hypothesis import given, settings, strategies as st

from shiftassign.domain.models import (
    AssignmentRequest,
    Availability,
    Employee,
    GapType,
    SchedulingRule,
    ShiftDefinition,
    ShiftPattern,
    TimeBlock,
)
from shiftassign.scheduling.assignment_engine import AssignmentEngine
from shiftassign.scheduling.overlap import overlaps
from shiftassign.validation.coverage_report import validate_coverage
from shiftassign.validation.validator import AssignmentValidator, ScheduleValidator

START = date(2025, 1, 6)  # Monday

SHIFTS = [
    ShiftDefinition("early-10", "Early (10h)", time(5, 0), time(15, 0)),
    ShiftDefinition("day-12", "Day (12h)", time(9, 0), time(21, 0)),
    ShiftDefinition("swing-10", "Swing (10h)", time(15, 0), time(1, 0)),
    ShiftDefinition("graveyard-12", "Graveyard (12h)", time(17, 0), time(5, 0)),
    ShiftDefinition("short-4", "Early (4h)", time(5, 0), time(9, 0)),
]
HOURS = {s.id: s.duration_hours for s in SHIFTS}

times = st.builds(time, hour=st.integers(0, 23), minute=st.sampled_from([0, 15, 30, 45]))


@st.composite
def employees_with_rules(draw):
    count = draw(st.integers(min_value=1, max_value=10))
    employees = []
    rules = []
    availability = []
    for i in range(count):
        position = draw(st.sampled_from(["dispatcher", "supervisor", "management", ""]))
        employees.append(Employee(id=f"E{i}", position=position))
        pattern = draw(st.sampled_from([None, ShiftPattern.FOUR_TEN, ShiftPattern.THREE_TWELVE_PLUS_FOUR]))
        if pattern is not None:
            rules.append(SchedulingRule(employee_id=f"E{i}", preferred_pattern=pattern))
        for dow in draw(st.sets(st.integers(0, 6), max_size=3)):
            availability.append(Availability(employee_id=f"E{i}", day_of_week=dow, is_available=False))
    return employees, rules, availability


@st.composite
def blocks(draw):
    result = []
    for start, end in [((5, 0), (9, 0)), ((9, 0), (21, 0)), ((21, 0), (1, 0)), ((1, 0), (5, 0))]:
        total = draw(st.integers(min_value=0, max_value=4))
        supervisors = draw(st.integers(min_value=0, max_value=min(total, 2)))
        result.append(TimeBlock(time(*start), time(*end), total, supervisors))
    return result


@st.composite
def assignment_requests(draw):
    employees, rules, availability = draw(employees_with_rules())
    days = draw(st.integers(min_value=1, max_value=14))
    return AssignmentRequest(
        schedule_id="sched-prop",
        start_date=START,
        end_date=START + timedelta(days=days - 1),
        employees=employees,
        shifts=SHIFTS,
        availability=availability,
        rules=rules,
        requirements=draw(blocks()),
    )


def consecutive_runs(dates):
    runs = []
    for d in sorted(dates):
        if runs and runs[-1][-1] + timedelta(days=1) == d:
            runs[-1].append(d)
        else:
            runs.append([d])
    return runs


class TestEngineProperties:
    """Invariants of generated schedules."""

    @given(run=assignment_requests())
    @settings(max_examples=60, deadline=None)
    def test_no_double_booking(self, run):
        result = AssignmentEngine().generate_assignments(run)
        counts = Counter((r.employee_id, r.assignment_date) for r in result.assignments)
        assert all(n == 1 for n in counts.values())

    @given(run=assignment_requests())
    @settings(max_examples=60, deadline=None)
    def test_schedule_invariants_hold(self, run):
        result = AssignmentEngine().generate_assignments(run)
        check = ScheduleValidator().validate_schedule(result.assignments, run.shifts)
        assert check.is_valid, [str(e) for e in check.errors]

    @given(run=assignment_requests())
    @settings(max_examples=60, deadline=None)
    def test_records_always_valid(self, run):
        result = AssignmentEngine().generate_assignments(run)
        valid, rejected = AssignmentValidator().validate_batch(result.assignments)
        assert rejected == []
        assert valid == result.assignments

    @given(run=assignment_requests())
    @settings(max_examples=60, deadline=None)
    def test_patterns_complete(self, run):
        result = AssignmentEngine().generate_assignments(run)
        patterns = {r.employee_id: r.preferred_pattern for r in run.rules}
        for employee_id, pattern in patterns.items():
            by_date = {
                r.assignment_date: HOURS[r.shift_id]
                for r in result.assignments
                if r.employee_id == employee_id
            }
            for streak in consecutive_runs(by_date):
                assert [by_date[d] for d in streak] == list(pattern.day_hours)

    @given(run=assignment_requests())
    @settings(max_examples=60, deadline=None)
    def test_gaps_match_recomputed_coverage(self, run):
        result = AssignmentEngine().generate_assignments(run)
        supervisor_ids = {e.id for e in run.employees if e.is_supervisor}
        recomputed = validate_coverage(
            result.assignments,
            run.shifts,
            run.requirements,
            dates=run.schedule_dates,
            supervisor_ids=supervisor_ids,
        )
        assert set(recomputed.gaps) == set(result.gaps)
        assert recomputed.is_valid == result.is_fully_covered

    @given(run=assignment_requests())
    @settings(max_examples=60, deadline=None)
    def test_supervisor_presence(self, run):
        result = AssignmentEngine().generate_assignments(run)
        shifts = {s.id: s for s in run.shifts}
        for d in run.schedule_dates:
            flagged = [
                shifts[r.shift_id]
                for r in result.assignments
                if r.assignment_date == d and r.is_supervisor_shift
            ]
            supervisor_gaps = {
                g.block_id for g in result.gaps_for(d) if g.gap_type is GapType.SUPERVISOR
            }
            for block in run.requirements:
                if block.min_supervisors == 0:
                    continue
                covered = any(overlaps(shift, block) for shift in flagged)
                assert covered or block.id in supervisor_gaps, (d, block.id)

    @given(run=assignment_requests())
    @settings(max_examples=60, deadline=None)
    def test_gaps_only_when_candidates_run_out(self, run, gap_candidates):
        engine = AssignmentEngine()
        result = engine.generate_assignments(run)
        for gap in result.gaps:
            assert gap_candidates(engine, run, result, gap) == [], str(gap)


class TestOverlapProperties:
    """Invariants of the overlap rules."""

    @given(start=times, end=times, block_start=times, block_end=times)
    def test_same_day_shift_never_covers_wrapping_block(self, start, end, block_start, block_end):
        shift = ShiftDefinition("s", "", start, end)
        block = TimeBlock(block_start, block_end)
        if not shift.crosses_midnight and block.crosses_midnight:
            assert not overlaps(shift, block)

    @given(start=times, end=times)
    def test_same_day_shift_covers_itself(self, start, end):
        shift = ShiftDefinition("s", "", start, end)
        if not shift.crosses_midnight:
            assert overlaps(shift, TimeBlock(start, end))
