"""Assignment engine for multi-day shift assignment.

This module provides the AssignmentEngine that walks the scheduling period
date by date and, for each date:
1. Continues multi-day patterns already in progress
2. Fills supervisor minimums block by block (hardest blocks first)
3. Fills total-staff minimums block by block
4. Records whatever coverage is still short as a gap

Assignment decisions depend on weekly hours and pattern progress built up
on earlier dates, so dates are processed strictly in order.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Optional

from shiftassign.domain.errors import (
    InvalidDateRangeError,
    NoActiveEmployeesError,
    NoShiftsDefinedError,
)
from shiftassign.domain.models import (
    AssignmentRecord,
    AssignmentRequest,
    CoverageGap,
    Employee,
    ShiftDefinition,
    TimeBlock,
)
from shiftassign.domain.policies import (
    DefaultHoursPolicy,
    DefaultPatternPolicy,
    DefaultStaffingPolicy,
    HoursPolicy,
    PatternPolicy,
    StaffingPolicy,
)
from shiftassign.scheduling.coverage import CoverageTracker
from shiftassign.scheduling.eligibility import EligibilityFilter, PatternState, RunContext
from shiftassign.scheduling.overlap import overlaps
from shiftassign.utils.logging_setup import get_logger

logger = get_logger(__name__)


class CandidateOrder(Enum):
    """Order in which candidates are tried for a slot."""

    LOAD_BALANCED = "load_balanced"  # Fewest hours this week first, ties in roster order
    ROSTER = "roster"  # Plain roster order


@dataclass
class EngineConfig:
    """Configuration for the assignment engine.

    Attributes:
        candidate_order: How candidates are ordered for each slot.
        exclusive_general_shifts: If True, a shift already given to one
            general-staff record on a date is not handed out again that date.
        block_order: Optional explicit block IDs, hardest-to-fill first.
            Blocks not listed follow in staffing-policy order.
        batch_size: Records per persistence batch.
    """

    candidate_order: CandidateOrder = CandidateOrder.LOAD_BALANCED
    exclusive_general_shifts: bool = True
    block_order: Optional[list[str]] = None
    batch_size: int = 20


@dataclass
class EngineResult:
    """Output of one assignment run.

    Attributes:
        schedule_id: Schedule the records belong to.
        start_date: First date of the period.
        end_date: Last date of the period.
        assignments: Records in the order they were made.
        gaps: Coverage still short once each date was processed.
        hours_by_employee: Total hours assigned per employee.
        context: Run state as it stood when the run finished.
    """

    schedule_id: str
    start_date: date
    end_date: date
    assignments: list[AssignmentRecord] = field(default_factory=list)
    gaps: list[CoverageGap] = field(default_factory=list)
    hours_by_employee: dict[str, float] = field(default_factory=dict)
    context: Optional[RunContext] = field(default=None, repr=False, compare=False)

    @property
    def is_fully_covered(self) -> bool:
        return not self.gaps

    def gaps_for(self, d: date) -> list[CoverageGap]:
        return [g for g in self.gaps if g.gap_date == d]


class AssignmentEngine:
    """Greedy engine producing date/shift/employee assignments.

    Example:
        >>> engine = AssignmentEngine()
        >>> result = engine.generate_assignments(request)
        >>> for gap in result.gaps:
        ...     print(gap)
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        hours_policy: Optional[HoursPolicy] = None,
        pattern_policy: Optional[PatternPolicy] = None,
        staffing_policy: Optional[StaffingPolicy] = None,
    ):
        self.config = config or EngineConfig()
        self.hours_policy = hours_policy or DefaultHoursPolicy()
        self.pattern_policy = pattern_policy or DefaultPatternPolicy()
        self.staffing_policy = staffing_policy or DefaultStaffingPolicy()
        self.eligibility = EligibilityFilter(
            hours_policy=self.hours_policy,
            pattern_policy=self.pattern_policy,
        )

    def generate_assignments(self, request: AssignmentRequest) -> EngineResult:
        """Generate assignments for every date of the request.

        Args:
            request: Snapshot of employees, shifts, availability, rules and
                requirements plus the run parameters.

        Returns:
            EngineResult with records and remaining coverage gaps.

        Raises:
            NoShiftsDefinedError: The shift catalogue is empty.
            NoActiveEmployeesError: No active employee was supplied.
            InvalidDateRangeError: The end date is before the start date.
        """
        self._check_setup(request)

        employees = request.active_employees
        supervisors = [e for e in employees if e.is_supervisor]
        general_staff = [e for e in employees if not e.is_supervisor]
        coverage_shifts = [s for s in request.shifts if self.staffing_policy.is_coverage_shift(s)]
        blocks = self._ordered_blocks(request.requirements)

        logger.info(
            "Generating assignments for schedule %s: %s to %s, %d active employees "
            "(%d supervisor-capable), %d shifts (%d for coverage), %d blocks",
            request.schedule_id,
            request.start_date.isoformat(),
            request.end_date.isoformat(),
            len(employees),
            len(supervisors),
            len(request.shifts),
            len(coverage_shifts),
            len(blocks),
        )

        context = RunContext(request, self.hours_policy)
        coverage = CoverageTracker(request.requirements)
        employees_by_id = {e.id: e for e in employees}
        gaps: list[CoverageGap] = []

        for d in request.schedule_dates:
            self._continue_patterns(d, employees_by_id, context, coverage)

            for block in blocks:
                self._fill_supervisors(d, block, supervisors, coverage_shifts, context, coverage)

            for block in blocks:
                self._fill_general(
                    d, block, general_staff, supervisors, coverage_shifts, context, coverage
                )

            day_gaps = coverage.shortfalls(d)
            for gap in day_gaps:
                logger.warning("Coverage gap %s", gap)
            gaps.extend(day_gaps)

        logger.info(
            "Schedule %s: %d assignments, %d coverage gaps",
            request.schedule_id,
            len(context.assignments),
            len(gaps),
        )

        return EngineResult(
            schedule_id=request.schedule_id,
            start_date=request.start_date,
            end_date=request.end_date,
            assignments=list(context.assignments),
            gaps=gaps,
            hours_by_employee=context.hours_by_employee(),
            context=context,
        )

    def _check_setup(self, request: AssignmentRequest) -> None:
        if not request.shifts:
            raise NoShiftsDefinedError()
        if not request.active_employees:
            raise NoActiveEmployeesError()
        if request.end_date < request.start_date:
            raise InvalidDateRangeError(
                f"End date {request.end_date.isoformat()} is before "
                f"start date {request.start_date.isoformat()}"
            )

    def _ordered_blocks(self, blocks: list[TimeBlock]) -> list[TimeBlock]:
        """Blocks hardest-to-fill first, honouring an explicit configured order."""
        ordered = self.staffing_policy.order_blocks(blocks)
        if not self.config.block_order:
            return ordered
        rank = {block_id: i for i, block_id in enumerate(self.config.block_order)}
        return sorted(ordered, key=lambda b: rank.get(b.id, len(rank)))

    def _order_candidates(
        self,
        employees: list[Employee],
        d: date,
        context: RunContext,
    ) -> list[Employee]:
        if self.config.candidate_order is CandidateOrder.ROSTER:
            return list(employees)
        # sorted() is stable, so equal hours keep roster order
        return sorted(employees, key=lambda e: context.weekly_hours(e.id, d))

    def _continue_patterns(
        self,
        d: date,
        employees_by_id: dict[str, Employee],
        context: RunContext,
        coverage: CoverageTracker,
    ) -> None:
        """Assign the next day of every pattern in progress, regardless of coverage."""
        for employee_id, state in context.states.items():
            active = state.active_pattern
            if active is None or active.next_date > d:
                continue

            employee = employees_by_id[employee_id]
            shift = context.shifts_by_id[active.next_shift_id]
            if active.next_date == d and self.eligibility.is_eligible(employee, d, shift, context):
                # Flagged while a covered block is short of flagged supervisors
                is_supervisor_shift = active.is_supervisor_shift or (
                    employee.is_supervisor and coverage.lacks_supervisor_shift(d, shift)
                )
                self._assign(d, employee, shift, is_supervisor_shift, context, coverage)
                continue

            logger.warning(
                "Pattern %s for employee %s started %s could not continue on %s",
                active.pattern.value,
                employee_id,
                active.start_date.isoformat(),
                d.isoformat(),
            )
            state.finish_pattern(active.next_date - timedelta(days=1))

    def _fill_supervisors(
        self,
        d: date,
        block: TimeBlock,
        supervisors: list[Employee],
        shifts: list[ShiftDefinition],
        context: RunContext,
        coverage: CoverageTracker,
    ) -> None:
        counter = coverage.get(d, block)
        block_shifts = [s for s in shifts if overlaps(s, block)]

        while counter.supervisors < block.min_supervisors or (
            block.min_supervisors > 0 and counter.supervisor_shifts == 0
        ):
            candidates = self._order_candidates(supervisors, d, context)
            pick = self._pick(d, candidates, block_shifts, context)
            if pick is None:
                logger.debug(
                    "%s %s: no eligible supervisor (%d/%d)",
                    d.isoformat(),
                    block.id,
                    counter.supervisors,
                    block.min_supervisors,
                )
                break
            employee, shift = pick
            self._assign(d, employee, shift, True, context, coverage)

    def _fill_general(
        self,
        d: date,
        block: TimeBlock,
        general_staff: list[Employee],
        supervisors: list[Employee],
        shifts: list[ShiftDefinition],
        context: RunContext,
        coverage: CoverageTracker,
    ) -> None:
        """Fill total-staff minimums; supervisors are used only after general staff."""
        counter = coverage.get(d, block)
        block_shifts = [s for s in shifts if overlaps(s, block)]

        while counter.total < block.min_total_staff:
            if self.config.exclusive_general_shifts:
                claimed = context.claimed_shift_ids(d)
                open_shifts = [s for s in block_shifts if s.id not in claimed]
            else:
                open_shifts = block_shifts
            if not open_shifts:
                logger.debug("%s %s: no unclaimed shift left", d.isoformat(), block.id)
                break

            candidates = self._order_candidates(general_staff, d, context)
            candidates += self._order_candidates(supervisors, d, context)
            pick = self._pick(d, candidates, open_shifts, context)
            if pick is None:
                logger.debug(
                    "%s %s: no eligible employee (%d/%d)",
                    d.isoformat(),
                    block.id,
                    counter.total,
                    block.min_total_staff,
                )
                break
            employee, shift = pick
            self._assign(d, employee, shift, False, context, coverage)

    def _pick(
        self,
        d: date,
        candidates: list[Employee],
        shifts: list[ShiftDefinition],
        context: RunContext,
    ) -> Optional[tuple[Employee, ShiftDefinition]]:
        """First eligible (employee, shift) pair, employees outermost."""
        for employee in candidates:
            for shift in shifts:
                if self.eligibility.is_eligible(employee, d, shift, context):
                    return employee, shift
        return None

    def _assign(
        self,
        d: date,
        employee: Employee,
        shift: ShiftDefinition,
        is_supervisor_shift: bool,
        context: RunContext,
        coverage: CoverageTracker,
    ) -> AssignmentRecord:
        """Append a record and update coverage, hours and pattern state."""
        state = context.state(employee.id)
        pattern = context.pattern_for(employee.id)
        active = state.active_pattern

        if pattern is not None and (active is None or not active.is_active_on(d)):
            # Plan before recording so the first day's hours are not counted twice
            plan = self.eligibility.plan_pattern(employee, d, shift, context)
            if plan is not None:
                state.active_pattern = PatternState(
                    pattern=pattern,
                    start_date=d,
                    plan=[s.id for s in plan],
                    is_supervisor_shift=is_supervisor_shift,
                )

        record = AssignmentRecord.for_shift(
            schedule_id=context.schedule_id,
            employee_id=employee.id,
            shift=shift,
            assignment_date=d,
            is_supervisor_shift=is_supervisor_shift,
        )
        context.add_assignment(record, shift)
        credited = coverage.record_shift(d, shift, employee.is_supervisor, is_supervisor_shift)

        active = state.active_pattern
        if active is not None and active.next_date == d:
            active.days_done += 1
            if active.is_complete:
                state.finish_pattern(d)

        logger.debug(
            "%s: %s -> %s%s (blocks: %s)",
            d.isoformat(),
            employee.id,
            shift.name or shift.id,
            " [supervisor]" if is_supervisor_shift else "",
            ", ".join(b.id for b in credited) or "none",
        )
        return record
