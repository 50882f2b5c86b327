"""Shift assignment engine for round-the-clock workforce scheduling."""

from shiftassign.domain import (
    AssignmentRecord,
    AssignmentRequest,
    CoverageGap,
    Employee,
    SetupError,
    ShiftDefinition,
    TimeBlock,
)
from shiftassign.scheduling import AssignmentEngine, EngineConfig, ScheduleResult, Scheduler
from shiftassign.validation import AssignmentValidator, ScheduleValidator

__version__ = "0.1.0"

__all__ = [
    "AssignmentEngine",
    "AssignmentRecord",
    "AssignmentRequest",
    "AssignmentValidator",
    "CoverageGap",
    "Employee",
    "EngineConfig",
    "ScheduleResult",
    "ScheduleValidator",
    "Scheduler",
    "SetupError",
    "ShiftDefinition",
    "TimeBlock",
]
