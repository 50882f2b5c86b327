"""Validation of assignment records and schedule coverage."""

from shiftassign.validation.validator import (
    AssignmentValidator,
    RecordRejection,
    ScheduleValidator,
    ValidationError,
    ValidationErrorType,
    ValidationResult,
)
from shiftassign.validation.coverage_report import (
    CoverageValidation,
    RequirementStatus,
    calculate_requirement_statuses,
    group_assignments,
    validate_coverage,
)

__all__ = [
    "AssignmentValidator",
    "RecordRejection",
    "ScheduleValidator",
    "ValidationError",
    "ValidationErrorType",
    "ValidationResult",
    "CoverageValidation",
    "RequirementStatus",
    "calculate_requirement_statuses",
    "group_assignments",
    "validate_coverage",
]
