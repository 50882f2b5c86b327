"""Shared fixtures for shift assignment tests."""

from datetime import date, time

import pytest

from shiftassign.domain.models import Employee, GapType, ShiftDefinition, TimeBlock
from shiftassign.scheduling.overlap import overlaps


@pytest.fixture
def sunday():
    """First day of a Sunday-anchored week."""
    return date(2025, 1, 5)


@pytest.fixture
def monday():
    return date(2025, 1, 6)


@pytest.fixture
def early_10():
    return ShiftDefinition("early-10", "Early (10h)", time(5, 0), time(15, 0))


@pytest.fixture
def day_12():
    return ShiftDefinition("day-12", "Day (12h)", time(9, 0), time(21, 0))


@pytest.fixture
def swing_10():
    return ShiftDefinition("swing-10", "Swing (10h)", time(15, 0), time(1, 0))


@pytest.fixture
def graveyard_12():
    return ShiftDefinition("graveyard-12", "Graveyard (12h)", time(17, 0), time(5, 0))


@pytest.fixture
def short_4():
    return ShiftDefinition("short-4", "Early (4h)", time(5, 0), time(9, 0))


@pytest.fixture
def shift_catalogue(early_10, day_12, swing_10, graveyard_12, short_4):
    """Catalogue with 10h, 12h and 4h variants, as seeded in production."""
    return [early_10, day_12, swing_10, graveyard_12, short_4]


@pytest.fixture
def day_block():
    return TimeBlock(time(9, 0), time(21, 0), min_total_staff=1, min_supervisors=0)


@pytest.fixture
def default_blocks():
    return TimeBlock.create_default_blocks()


def make_staff(count: int, prefix: str = "G", position: str = "dispatcher") -> list[Employee]:
    return [
        Employee(id=f"{prefix}{i}", first_name=prefix, last_name=str(i), position=position)
        for i in range(1, count + 1)
    ]


@pytest.fixture
def staff_factory():
    """Build numbered employees, e.g. ``staff_factory(3, "S", "supervisor")``."""
    return make_staff


def remaining_candidates(engine, request, result, gap):
    """Employee/shift pairs that could still fill a reported gap once the run is over."""
    context = result.context
    block = next(b for b in request.requirements if b.id == gap.block_id)
    shifts = [
        s for s in request.shifts
        if engine.staffing_policy.is_coverage_shift(s) and overlaps(s, block)
    ]
    employees = request.active_employees
    if gap.gap_type is GapType.SUPERVISOR:
        employees = [e for e in employees if e.is_supervisor]
    elif engine.config.exclusive_general_shifts:
        claimed = context.claimed_shift_ids(gap.gap_date)
        shifts = [s for s in shifts if s.id not in claimed]
    return [
        (employee.id, shift.id)
        for employee in employees
        for shift in shifts
        if engine.eligibility.is_eligible(employee, gap.gap_date, shift, context)
    ]


@pytest.fixture(scope="session")
def gap_candidates():
    """Check a gap against the final run state, e.g. ``gap_candidates(engine, request, result, gap)``."""
    return remaining_candidates
