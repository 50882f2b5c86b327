"""Domain models and business rules for shift assignment."""

from shiftassign.domain.errors import (
    InvalidDateRangeError,
    NoActiveEmployeesError,
    NoShiftsDefinedError,
    SetupError,
    ShiftAssignError,
    SnapshotError,
)
from shiftassign.domain.models import (
    AssignmentRecord,
    AssignmentRequest,
    Availability,
    CoverageCounter,
    CoverageGap,
    Employee,
    GapType,
    PositionRole,
    SchedulingRule,
    ShiftDefinition,
    ShiftPattern,
    TimeBlock,
)
from shiftassign.domain.policies import (
    DefaultHoursPolicy,
    DefaultPatternPolicy,
    DefaultStaffingPolicy,
    HoursPolicy,
    PatternPolicy,
    RestAnchor,
    StaffingPolicy,
)

__all__ = [
    # Models
    "AssignmentRecord",
    "AssignmentRequest",
    "Availability",
    "CoverageCounter",
    "CoverageGap",
    "Employee",
    "GapType",
    "PositionRole",
    "SchedulingRule",
    "ShiftDefinition",
    "ShiftPattern",
    "TimeBlock",
    # Policies
    "DefaultHoursPolicy",
    "DefaultPatternPolicy",
    "DefaultStaffingPolicy",
    "HoursPolicy",
    "PatternPolicy",
    "RestAnchor",
    "StaffingPolicy",
    # Errors
    "InvalidDateRangeError",
    "NoActiveEmployeesError",
    "NoShiftsDefinedError",
    "SetupError",
    "ShiftAssignError",
    "SnapshotError",
]
