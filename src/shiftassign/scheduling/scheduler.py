"""Main scheduler interface.

This module provides the high-level Scheduler class that runs the
assignment engine, filters its records through validation and hands back
everything a caller needs to persist and report on a schedule.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from shiftassign.domain.models import AssignmentRecord, AssignmentRequest, CoverageGap, GapType
from shiftassign.domain.policies import (
    DefaultHoursPolicy,
    DefaultPatternPolicy,
    DefaultStaffingPolicy,
    HoursPolicy,
    PatternPolicy,
    StaffingPolicy,
)
from shiftassign.output.batch_writer import AssignmentStore, BatchWriter, SubmissionReport
from shiftassign.scheduling.assignment_engine import AssignmentEngine, EngineConfig
from shiftassign.utils.logging_setup import get_logger
from shiftassign.validation.coverage_report import group_assignments
from shiftassign.validation.validator import (
    AssignmentValidator,
    RecordRejection,
    ScheduleValidator,
    ValidationError,
)

logger = get_logger(__name__)


@dataclass
class ScheduleResult:
    """Validated output of one scheduling run.

    Attributes:
        schedule_id: Schedule the records belong to.
        start_date: First date of the period.
        end_date: Last date of the period.
        assignments: Records that passed validation, in generation order.
        gaps: Coverage shortfalls left after the run.
        rejections: Records excluded by validation.
        schedule_errors: Schedule-wide invariant violations, if any.
        hours_by_employee: Hours assigned per employee.
    """

    schedule_id: str
    start_date: date
    end_date: date
    assignments: list[AssignmentRecord] = field(default_factory=list)
    gaps: list[CoverageGap] = field(default_factory=list)
    rejections: list[RecordRejection] = field(default_factory=list)
    schedule_errors: list[ValidationError] = field(default_factory=list)
    hours_by_employee: dict[str, float] = field(default_factory=dict)

    @property
    def validation_errors(self) -> list[str]:
        messages = [m for r in self.rejections for m in r.messages]
        messages.extend(str(e) for e in self.schedule_errors)
        return messages

    @property
    def is_fully_covered(self) -> bool:
        return not self.gaps

    def grouped(self) -> dict[str, dict[str, list[AssignmentRecord]]]:
        """Assignments grouped by date then shift ID."""
        return group_assignments(self.assignments)

    def summary(self) -> dict:
        dates = {r.date_str for r in self.assignments}
        return {
            "schedule_id": self.schedule_id,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "assignments": len(self.assignments),
            "supervisor_shifts": sum(1 for r in self.assignments if r.is_supervisor_shift),
            "employees_scheduled": len(self.hours_by_employee),
            "dates_with_assignments": len(dates),
            "total_gaps": sum(1 for g in self.gaps if g.gap_type is GapType.TOTAL),
            "supervisor_gaps": sum(1 for g in self.gaps if g.gap_type is GapType.SUPERVISOR),
            "rejected": len(self.rejections),
            "max_hours": max(self.hours_by_employee.values(), default=0.0),
        }


class Scheduler:
    """High-level scheduler for generating multi-day assignment schedules.

    Example:
        >>> scheduler = Scheduler()
        >>> request = AssignmentRequest(
        ...     schedule_id="sched-1",
        ...     start_date=date(2025, 1, 6),
        ...     end_date=date(2025, 1, 19),
        ...     employees=employees,
        ...     shifts=shifts,
        ... )
        >>> result = scheduler.generate(request)
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        hours_policy: Optional[HoursPolicy] = None,
        pattern_policy: Optional[PatternPolicy] = None,
        staffing_policy: Optional[StaffingPolicy] = None,
    ):
        """Initialize scheduler with configuration and policies.

        Args:
            config: Engine configuration.
            hours_policy: Policy for the weekly-hour cap.
            pattern_policy: Policy for rest between multi-day patterns.
            staffing_policy: Policy for coverage shifts and block order.
        """
        self.config = config or EngineConfig()
        self.hours_policy = hours_policy or DefaultHoursPolicy()
        self.pattern_policy = pattern_policy or DefaultPatternPolicy()
        self.staffing_policy = staffing_policy or DefaultStaffingPolicy()

        self.engine = AssignmentEngine(
            config=self.config,
            hours_policy=self.hours_policy,
            pattern_policy=self.pattern_policy,
            staffing_policy=self.staffing_policy,
        )
        self.record_validator = AssignmentValidator()
        self.schedule_validator = ScheduleValidator(hours_policy=self.hours_policy)

    def generate(self, request: AssignmentRequest) -> ScheduleResult:
        """Generate and validate a schedule for the request.

        Args:
            request: Snapshot and run parameters.

        Returns:
            ScheduleResult holding only validated records.

        Raises:
            SetupError: The request cannot be scheduled at all.
        """
        engine_result = self.engine.generate_assignments(request)

        valid, rejections = self.record_validator.validate_batch(engine_result.assignments)
        schedule_check = self.schedule_validator.validate_schedule(valid, request.shifts)
        for error in schedule_check.errors:
            logger.error("Schedule invariant violated: %s", error)

        result = ScheduleResult(
            schedule_id=engine_result.schedule_id,
            start_date=engine_result.start_date,
            end_date=engine_result.end_date,
            assignments=valid,
            gaps=engine_result.gaps,
            rejections=rejections,
            schedule_errors=schedule_check.errors,
            hours_by_employee=engine_result.hours_by_employee,
        )
        logger.info("Schedule %s summary: %s", result.schedule_id, result.summary())
        return result

    def generate_and_submit(
        self,
        request: AssignmentRequest,
        store: AssignmentStore,
        max_workers: int = 1,
    ) -> tuple[ScheduleResult, SubmissionReport]:
        """Generate a schedule and write its records to a store in batches."""
        result = self.generate(request)
        writer = BatchWriter(store, batch_size=self.config.batch_size, max_workers=max_workers)
        report = writer.submit(result.assignments)
        return result, report
