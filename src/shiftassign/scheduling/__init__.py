"""Scheduling engine for generating shift assignments."""

from shiftassign.scheduling.overlap import covered_blocks, overlaps
from shiftassign.scheduling.coverage import CoverageTracker
from shiftassign.scheduling.eligibility import (
    EligibilityFilter,
    EmployeeRunState,
    PatternState,
    RunContext,
)
from shiftassign.scheduling.assignment_engine import (
    AssignmentEngine,
    CandidateOrder,
    EngineConfig,
    EngineResult,
)
from shiftassign.scheduling.scheduler import ScheduleResult, Scheduler

__all__ = [
    # Facade
    "Scheduler",
    "ScheduleResult",
    # Engine
    "AssignmentEngine",
    "CandidateOrder",
    "EngineConfig",
    "EngineResult",
    # Building blocks
    "CoverageTracker",
    "EligibilityFilter",
    "EmployeeRunState",
    "PatternState",
    "RunContext",
    "covered_blocks",
    "overlaps",
]
