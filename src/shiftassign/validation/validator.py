"""Validation module for assignment records.

Every record the engine produces passes through the AssignmentValidator
before it is handed to persistence. Records that fail are dropped from the
output and reported; they are never written half-valid.

The ScheduleValidator checks the invariants of a whole run's output:
no employee works twice on one date, and nobody exceeds the weekly-hour
cap in any Sunday-anchored week.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional

from shiftassign.domain.models import AssignmentRecord, ShiftDefinition
from shiftassign.domain.policies import DefaultHoursPolicy, HoursPolicy
from shiftassign.utils.logging_setup import get_logger

logger = get_logger(__name__)

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class ValidationErrorType(Enum):
    """Types of validation errors."""

    INVALID_SCHEDULE_ID = "invalid_schedule_id"
    INVALID_EMPLOYEE_ID = "invalid_employee_id"
    INVALID_SHIFT_ID = "invalid_shift_id"
    INVALID_DATE = "invalid_date"
    INVALID_SUPERVISOR_FLAG = "invalid_supervisor_flag"
    UNKNOWN_SHIFT = "unknown_shift"
    DOUBLE_BOOKED = "double_booked"
    MAX_WEEKLY_HOURS_EXCEEDED = "max_weekly_hours_exceeded"


@dataclass
class ValidationError:
    """A single validation error."""

    error_type: ValidationErrorType
    message: str
    employee_id: Optional[str] = None
    assignment_date: Optional[str] = None
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        parts = [f"[{self.error_type.value}]"]
        if self.employee_id:
            parts.append(f"Employee {self.employee_id}:")
        parts.append(self.message)
        if self.assignment_date:
            parts.append(f"({self.assignment_date})")
        return " ".join(parts)


@dataclass
class ValidationResult:
    """Result of validating a record or a schedule."""

    is_valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    def add_error(self, error: ValidationError) -> None:
        """Add an error and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    @property
    def messages(self) -> list[str]:
        return [str(e) for e in self.errors]


@dataclass
class RecordRejection:
    """A record excluded from output and why."""

    record: AssignmentRecord
    errors: list[ValidationError]

    @property
    def messages(self) -> list[str]:
        return [str(e) for e in self.errors]


def _is_nonempty_str(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _record_date(record: AssignmentRecord) -> date:
    if isinstance(record.assignment_date, date):
        return record.assignment_date
    return date.fromisoformat(record.assignment_date)


class AssignmentValidator:
    """Checks the shape of individual assignment records.

    All checks run; a record with several problems reports each of them.

    Example:
        >>> validator = AssignmentValidator()
        >>> valid, rejected = validator.validate_batch(records)
        >>> for rejection in rejected:
        ...     print(rejection.messages)
    """

    def validate(self, record: AssignmentRecord) -> ValidationResult:
        """Validate one record.

        Args:
            record: The assignment record to check.

        Returns:
            ValidationResult with is_valid flag and any errors.
        """
        result = ValidationResult(is_valid=True)
        employee_id = record.employee_id if isinstance(record.employee_id, str) else None

        if not _is_nonempty_str(record.schedule_id):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_SCHEDULE_ID,
                    message=f"Schedule ID must be a non-empty string, got {record.schedule_id!r}",
                    employee_id=employee_id,
                )
            )

        if not _is_nonempty_str(record.employee_id):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_EMPLOYEE_ID,
                    message=f"Employee ID must be a non-empty string, got {record.employee_id!r}",
                )
            )

        if not _is_nonempty_str(record.shift_id):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_SHIFT_ID,
                    message=f"Shift ID must be a non-empty string, got {record.shift_id!r}",
                    employee_id=employee_id,
                )
            )

        date_error = self._check_date(record.assignment_date)
        if date_error:
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_DATE,
                    message=date_error,
                    employee_id=employee_id,
                )
            )

        if not isinstance(record.is_supervisor_shift, bool):
            result.add_error(
                ValidationError(
                    error_type=ValidationErrorType.INVALID_SUPERVISOR_FLAG,
                    message=(
                        f"Supervisor flag must be a boolean, "
                        f"got {type(record.is_supervisor_shift).__name__}"
                    ),
                    employee_id=employee_id,
                )
            )

        return result

    def _check_date(self, value) -> Optional[str]:
        if isinstance(value, datetime):
            return f"Assignment date must be a date, not a datetime: {value!r}"
        if isinstance(value, date):
            return None
        if not isinstance(value, str) or not DATE_PATTERN.match(value):
            return f"Assignment date must be YYYY-MM-DD, got {value!r}"
        try:
            date.fromisoformat(value)
        except ValueError:
            return f"Assignment date is not a calendar date: {value!r}"
        return None

    def validate_batch(
        self,
        records: list[AssignmentRecord],
    ) -> tuple[list[AssignmentRecord], list[RecordRejection]]:
        """Split records into valid ones and rejections, keeping order."""
        valid: list[AssignmentRecord] = []
        rejected: list[RecordRejection] = []
        for record in records:
            result = self.validate(record)
            if result.is_valid:
                valid.append(record)
                continue
            rejection = RecordRejection(record=record, errors=result.errors)
            logger.warning(
                "Rejected assignment %s: %s", record.key, "; ".join(rejection.messages)
            )
            rejected.append(rejection)
        return valid, rejected


class ScheduleValidator:
    """Validates a run's output against the schedule-wide invariants.

    Example:
        >>> validator = ScheduleValidator()
        >>> result = validator.validate_schedule(records, shifts)
        >>> if not result.is_valid:
        ...     for error in result.errors:
        ...         print(error)
    """

    def __init__(self, hours_policy: Optional[HoursPolicy] = None):
        self.hours_policy = hours_policy or DefaultHoursPolicy()

    def validate_schedule(
        self,
        records: list[AssignmentRecord],
        shifts: list[ShiftDefinition],
    ) -> ValidationResult:
        """Check double-booking and weekly hours across all records.

        Args:
            records: Records that already passed AssignmentValidator.
            shifts: The shift catalogue the records refer to.

        Returns:
            ValidationResult for the whole schedule.
        """
        result = ValidationResult(is_valid=True)
        shifts_by_id = {s.id: s for s in shifts}

        seen: dict[tuple[str, date], str] = {}
        weekly_hours: dict[tuple[str, date], float] = {}

        for record in records:
            d = _record_date(record)
            key = (record.employee_id, d)
            if key in seen:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.DOUBLE_BOOKED,
                        message=(
                            f"Assigned both {seen[key]} and {record.shift_id} on the same date"
                        ),
                        employee_id=record.employee_id,
                        assignment_date=d.isoformat(),
                    )
                )
            else:
                seen[key] = record.shift_id

            shift = shifts_by_id.get(record.shift_id)
            if shift is None:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.UNKNOWN_SHIFT,
                        message=f"Unknown shift ID: {record.shift_id}",
                        employee_id=record.employee_id,
                        assignment_date=d.isoformat(),
                    )
                )
                continue

            week_key = (record.employee_id, self.hours_policy.week_start(d))
            weekly_hours[week_key] = weekly_hours.get(week_key, 0.0) + shift.duration_hours

        max_hours = self.hours_policy.max_weekly_hours()
        for (employee_id, week_start), hours in sorted(weekly_hours.items()):
            if hours > max_hours + 1e-6:
                result.add_error(
                    ValidationError(
                        error_type=ValidationErrorType.MAX_WEEKLY_HOURS_EXCEEDED,
                        message=f"Week of {week_start.isoformat()}: {hours:g}h exceeds max {max_hours:g}h",
                        employee_id=employee_id,
                        details={
                            "week_start": week_start.isoformat(),
                            "hours": hours,
                            "max_hours": max_hours,
                        },
                    )
                )

        return result
