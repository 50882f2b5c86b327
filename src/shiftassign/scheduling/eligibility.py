"""Eligibility filtering for candidate assignments.

This module holds the per-run employee state (assignments, weekly hours,
pattern progress) and the EligibilityFilter that decides whether an
employee may work a given shift on a given date:
1. At most one shift per employee per date
2. Weekday availability (permissive when no record exists)
3. Weekly-hour cap per Sunday-anchored week
4. Multi-day pattern continuation and rest gaps
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from shiftassign.domain.models import (
    AssignmentRecord,
    AssignmentRequest,
    Employee,
    SchedulingRule,
    ShiftDefinition,
    ShiftPattern,
    day_of_week,
)
from shiftassign.domain.policies import (
    DefaultHoursPolicy,
    DefaultPatternPolicy,
    HoursPolicy,
    PatternPolicy,
)

HOURS_EPSILON = 1e-6


def hours_match(shift: ShiftDefinition, hours: float) -> bool:
    return abs(shift.duration_hours - hours) < HOURS_EPSILON


def rest_hours_between(
    first: ShiftDefinition,
    first_date: date,
    second: ShiftDefinition,
    second_date: date,
) -> float:
    """Hours between the end of one shift and the start of the next."""
    gap = second.start_datetime(second_date) - first.end_datetime(first_date)
    return gap.total_seconds() / 3600.0


@dataclass
class PatternState:
    """Progress through one multi-day pattern.

    Attributes:
        pattern: The pattern being worked.
        start_date: First day of the pattern.
        plan: Shift IDs planned for each day of the pattern.
        is_supervisor_shift: Whether the pattern began as a supervisor shift.
        days_done: Pattern days assigned so far.
    """

    pattern: ShiftPattern
    start_date: date
    plan: list[str]
    is_supervisor_shift: bool = False
    days_done: int = 0

    @property
    def next_date(self) -> date:
        """Date the next pattern day falls on."""
        return self.start_date + timedelta(days=self.days_done)

    @property
    def end_date(self) -> date:
        return self.start_date + timedelta(days=self.pattern.length - 1)

    @property
    def is_complete(self) -> bool:
        return self.days_done >= self.pattern.length

    @property
    def next_shift_id(self) -> Optional[str]:
        if self.is_complete:
            return None
        return self.plan[self.days_done]

    def is_active_on(self, d: date) -> bool:
        """Pattern started on or before ``d`` and still has days to go."""
        return not self.is_complete and self.start_date <= d <= self.end_date


@dataclass
class EmployeeRunState:
    """Tracks one employee's state throughout a run.

    Attributes:
        employee_id: ID of the employee.
        hours_by_week: Hours scheduled per week, keyed by week start.
        shifts_by_date: Shift worked on each assigned date.
        active_pattern: Pattern in progress, if any.
        last_pattern_start: First day of the most recent finished pattern.
        last_pattern_end: Last day of the most recent finished pattern.
    """

    employee_id: str
    hours_by_week: dict[date, float] = field(default_factory=dict)
    shifts_by_date: dict[date, ShiftDefinition] = field(default_factory=dict)
    active_pattern: Optional[PatternState] = None
    last_pattern_start: Optional[date] = None
    last_pattern_end: Optional[date] = None

    def worked_on(self, d: date) -> bool:
        return d in self.shifts_by_date

    def hours_in_week(self, week_start: date) -> float:
        return self.hours_by_week.get(week_start, 0.0)

    @property
    def total_hours(self) -> float:
        return sum(self.hours_by_week.values())

    def add_shift(self, d: date, shift: ShiftDefinition, week_start: date) -> None:
        """Record a shift being added."""
        self.shifts_by_date[d] = shift
        self.hours_by_week[week_start] = self.hours_in_week(week_start) + shift.duration_hours

    def consecutive_days_before(self, d: date) -> int:
        """Number of worked days immediately preceding ``d``."""
        count = 0
        current = d - timedelta(days=1)
        while current in self.shifts_by_date:
            count += 1
            current -= timedelta(days=1)
        return count

    def consecutive_days_after(self, d: date) -> int:
        count = 0
        current = d + timedelta(days=1)
        while current in self.shifts_by_date:
            count += 1
            current += timedelta(days=1)
        return count

    def finish_pattern(self, last_day: Optional[date] = None) -> None:
        """Close the active pattern, remembering it for rest-gap checks."""
        if self.active_pattern is None:
            return
        state = self.active_pattern
        self.last_pattern_start = state.start_date
        if last_day is None:
            last_day = state.start_date + timedelta(days=max(state.days_done, 1) - 1)
        self.last_pattern_end = last_day
        self.active_pattern = None


class RunContext:
    """Mutable state owned by a single assignment run.

    Bundles the assignments made so far, each employee's weekly hours and
    pattern progress, and read-only lookups built from the request.
    """

    def __init__(self, request: AssignmentRequest, hours_policy: Optional[HoursPolicy] = None):
        self.schedule_id = request.schedule_id
        self.start_date = request.start_date
        self.end_date = request.end_date
        self.hours_policy = hours_policy or DefaultHoursPolicy()
        self.shifts = list(request.shifts)
        self.shifts_by_id = {s.id: s for s in self.shifts}
        self.availability = request.availability_map()
        self.rules = request.rules_map()
        self.assignments: list[AssignmentRecord] = []
        self.states: dict[str, EmployeeRunState] = {}
        self._general_claims: dict[date, set[str]] = {}

    def state(self, employee_id: str) -> EmployeeRunState:
        if employee_id not in self.states:
            self.states[employee_id] = EmployeeRunState(employee_id=employee_id)
        return self.states[employee_id]

    def rule_for(self, employee_id: str) -> Optional[SchedulingRule]:
        return self.rules.get(employee_id)

    def pattern_for(self, employee_id: str) -> Optional[ShiftPattern]:
        rule = self.rule_for(employee_id)
        return rule.preferred_pattern if rule else None

    def weekly_hours(self, employee_id: str, d: date) -> float:
        return self.state(employee_id).hours_in_week(self.hours_policy.week_start(d))

    def is_available(self, employee_id: str, d: date) -> bool:
        """Weekday availability; no record means available."""
        record = self.availability.get((employee_id, day_of_week(d)))
        if record is None:
            return True
        return record.is_available

    def in_period(self, d: date) -> bool:
        return self.start_date <= d <= self.end_date

    def claimed_shift_ids(self, d: date) -> set[str]:
        """Shifts already taken by a general (non-supervisor) record on a date."""
        return self._general_claims.get(d, set())

    def add_assignment(self, record: AssignmentRecord, shift: ShiftDefinition) -> None:
        """Append a record and update the employee's trackers."""
        d = record.assignment_date
        self.assignments.append(record)
        self.state(record.employee_id).add_shift(d, shift, self.hours_policy.week_start(d))
        if not record.is_supervisor_shift:
            self._general_claims.setdefault(d, set()).add(shift.id)

    def hours_by_employee(self) -> dict[str, float]:
        return {eid: state.total_hours for eid, state in self.states.items() if state.shifts_by_date}


class EligibilityFilter:
    """Decides whether an employee may be assigned a shift on a date.

    Checks run in a fixed order and stop at the first failure. ``reason``
    reports which check failed, ``is_eligible`` only whether one did.

    Example:
        >>> eligibility = EligibilityFilter()
        >>> if eligibility.is_eligible(employee, day, shift, context):
        ...     context.add_assignment(record, shift)
    """

    ALREADY_ASSIGNED = "already_assigned"
    UNAVAILABLE = "unavailable"
    WEEKLY_HOURS = "weekly_hours"
    PATTERN_CONTINUATION = "pattern_continuation"
    PATTERN_REST = "pattern_rest"
    PATTERN_SPAN = "pattern_span"
    MIN_REST = "min_rest"
    MAX_CONSECUTIVE_DAYS = "max_consecutive_days"

    def __init__(
        self,
        hours_policy: Optional[HoursPolicy] = None,
        pattern_policy: Optional[PatternPolicy] = None,
    ):
        self.hours_policy = hours_policy or DefaultHoursPolicy()
        self.pattern_policy = pattern_policy or DefaultPatternPolicy()

    def is_eligible(
        self,
        employee: Employee,
        d: date,
        shift: ShiftDefinition,
        context: RunContext,
    ) -> bool:
        return self.reason(employee, d, shift, context) is None

    def reason(
        self,
        employee: Employee,
        d: date,
        shift: ShiftDefinition,
        context: RunContext,
    ) -> Optional[str]:
        """Name of the first failing check, or None if the employee is eligible."""
        state = context.state(employee.id)

        if state.worked_on(d):
            return self.ALREADY_ASSIGNED

        if not context.is_available(employee.id, d):
            return self.UNAVAILABLE

        week_hours = state.hours_in_week(self.hours_policy.week_start(d))
        if week_hours + shift.duration_hours > self.hours_policy.max_weekly_hours() + HOURS_EPSILON:
            return self.WEEKLY_HOURS

        active = state.active_pattern
        if active is not None and active.is_active_on(d):
            if d != active.next_date or shift.id != active.next_shift_id:
                return self.PATTERN_CONTINUATION
            return None

        rule = context.rule_for(employee.id)
        pattern = rule.preferred_pattern if rule else None
        span = 1
        if pattern is not None:
            if not self.pattern_policy.can_start_pattern(
                d, state.last_pattern_start, state.last_pattern_end
            ):
                return self.PATTERN_REST
            if self.plan_pattern(employee, d, shift, context) is None:
                return self.PATTERN_SPAN
            span = pattern.length

        min_rest = rule.min_rest_hours if rule and rule.min_rest_hours else 0.0
        if not self._rest_satisfied(state, d, shift, min_rest):
            return self.MIN_REST

        if rule and rule.max_consecutive_days:
            streak = (
                state.consecutive_days_before(d)
                + span
                + state.consecutive_days_after(d + timedelta(days=span - 1))
            )
            if streak > rule.max_consecutive_days:
                return self.MAX_CONSECUTIVE_DAYS

        return None

    def plan_pattern(
        self,
        employee: Employee,
        d: date,
        shift: ShiftDefinition,
        context: RunContext,
    ) -> Optional[list[ShiftDefinition]]:
        """Plan every day of a new pattern starting with ``shift`` on ``d``.

        Repeated days reuse the starting shift. A shorter closing day uses
        the first catalogue shift of the right length that leaves enough
        rest after the previous day.

        Returns:
            Shifts for each pattern day, or None if the pattern cannot be
            completed inside the run (wrong shift length, past the end date,
            unavailable or already working on a later day, weekly cap, rest).
        """
        pattern = context.pattern_for(employee.id)
        if pattern is None:
            return None

        day_hours = pattern.day_hours
        if not hours_match(shift, day_hours[0]):
            return None
        if not context.in_period(d + timedelta(days=pattern.length - 1)):
            return None

        state = context.state(employee.id)
        rule = context.rule_for(employee.id)
        min_rest = rule.min_rest_hours if rule and rule.min_rest_hours else 0.0

        plan = [shift]
        for offset in range(1, pattern.length):
            day = d + timedelta(days=offset)
            if state.worked_on(day) or not context.is_available(employee.id, day):
                return None

            prev_shift = plan[-1]
            prev_day = day - timedelta(days=1)
            if hours_match(shift, day_hours[offset]):
                options = [shift]
            else:
                options = [s for s in context.shifts if hours_match(s, day_hours[offset])]

            chosen = None
            for option in options:
                if rest_hours_between(prev_shift, prev_day, option, day) + HOURS_EPSILON >= min_rest:
                    chosen = option
                    break
            if chosen is None:
                return None
            plan.append(chosen)

        added: dict[date, float] = {}
        for offset, planned in enumerate(plan):
            week = self.hours_policy.week_start(d + timedelta(days=offset))
            added[week] = added.get(week, 0.0) + planned.duration_hours
        max_hours = self.hours_policy.max_weekly_hours()
        for week, hours in added.items():
            if state.hours_in_week(week) + hours > max_hours + HOURS_EPSILON:
                return None

        return plan

    def _rest_satisfied(
        self,
        state: EmployeeRunState,
        d: date,
        shift: ShiftDefinition,
        min_rest_hours: float,
    ) -> bool:
        """Check rest against the neighbouring days' shifts.

        With no rule, ``min_rest_hours`` is 0, which still stops a shift
        from starting before the previous overnight shift has ended.
        """
        prev_day = d - timedelta(days=1)
        prev_shift = state.shifts_by_date.get(prev_day)
        if prev_shift is not None:
            if rest_hours_between(prev_shift, prev_day, shift, d) + HOURS_EPSILON < min_rest_hours:
                return False

        next_day = d + timedelta(days=1)
        next_shift = state.shifts_by_date.get(next_day)
        if next_shift is not None:
            if rest_hours_between(shift, d, next_shift, next_day) + HOURS_EPSILON < min_rest_hours:
                return False

        return True
