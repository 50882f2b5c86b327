"""Policy definitions for scheduling rules.

This module contains configurable policies for the weekly-hour cap,
multi-day pattern rest gaps, and which shifts and blocks the coverage
passes work with. Policies are kept separate from the assignment engine
to allow independent testing and easy modification.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, time, timedelta
from enum import Enum
from typing import Optional

from shiftassign.domain.models import ShiftDefinition, TimeBlock, time_to_minutes


class RestAnchor(Enum):
    """What the pattern rest gap is measured from."""

    PATTERN_END = "pattern_end"  # Days off since the last pattern day
    PATTERN_START = "pattern_start"  # Days since the last pattern began


class HoursPolicy(ABC):
    """Abstract base class for weekly-hour policies."""

    @abstractmethod
    def max_weekly_hours(self) -> float:
        """Maximum hours an employee may work in one week."""
        pass

    @abstractmethod
    def week_start(self, d: date) -> date:
        """First day of the week containing ``d``."""
        pass


class PatternPolicy(ABC):
    """Abstract base class for multi-day pattern policies."""

    @abstractmethod
    def can_start_pattern(
        self,
        candidate_date: date,
        last_start: Optional[date],
        last_end: Optional[date],
    ) -> bool:
        """Check whether enough rest has passed to begin a new pattern.

        Args:
            candidate_date: Date the new pattern would start.
            last_start: Start of the employee's previous pattern, if any.
            last_end: Last day of the employee's previous pattern, if any.
        """
        pass


class StaffingPolicy(ABC):
    """Abstract base class for coverage-pass policies."""

    @abstractmethod
    def is_coverage_shift(self, shift: ShiftDefinition) -> bool:
        """Whether the coverage passes may assign this shift."""
        pass

    @abstractmethod
    def order_blocks(self, blocks: list[TimeBlock]) -> list[TimeBlock]:
        """Order blocks hardest-to-fill first."""
        pass


@dataclass
class DefaultHoursPolicy(HoursPolicy):
    """Default hours policy.

    - 40 hours per week maximum
    - Weeks start on Sunday
    """

    max_hours: float = 40.0

    def max_weekly_hours(self) -> float:
        return self.max_hours

    def week_start(self, d: date) -> date:
        return d - timedelta(days=(d.weekday() + 1) % 7)


@dataclass
class DefaultPatternPolicy(PatternPolicy):
    """Default pattern rest policy.

    With the default ``PATTERN_END`` anchor, ``rest_days`` full days off
    must separate the last day of one pattern from the first day of the
    next. With ``PATTERN_START``, a new pattern may begin ``rest_days``
    days after the previous one began (``rest_days=7`` gives one pattern
    per rolling week).
    """

    rest_days: int = 2
    rest_anchor: RestAnchor = RestAnchor.PATTERN_END

    def can_start_pattern(
        self,
        candidate_date: date,
        last_start: Optional[date],
        last_end: Optional[date],
    ) -> bool:
        if self.rest_anchor is RestAnchor.PATTERN_START:
            if last_start is None:
                return True
            return (candidate_date - last_start).days >= self.rest_days

        if last_end is None:
            return True
        days_off = (candidate_date - last_end).days - 1
        return days_off >= self.rest_days


@dataclass
class DefaultStaffingPolicy(StaffingPolicy):
    """Default staffing policy.

    Coverage passes use 10- and 12-hour shifts only; 4-hour shifts are
    reserved for completing 3x12plus4 patterns.

    Block priority: windows crossing midnight first, then overnight windows
    starting before ``overnight_cutoff``, then the rest in their given
    order.
    """

    coverage_shift_hours: tuple[float, ...] = (10.0, 12.0)
    overnight_cutoff: time = time(5, 0)

    def is_coverage_shift(self, shift: ShiftDefinition) -> bool:
        return any(abs(shift.duration_hours - h) < 1e-6 for h in self.coverage_shift_hours)

    def order_blocks(self, blocks: list[TimeBlock]) -> list[TimeBlock]:
        cutoff = time_to_minutes(self.overnight_cutoff)

        def priority(block: TimeBlock) -> int:
            if block.crosses_midnight:
                return 0
            if block.start_minutes < cutoff:
                return 1
            return 2

        return sorted(blocks, key=priority)
