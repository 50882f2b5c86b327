"""Domain models for the shift assignment engine.

This module contains the read-only input snapshots (employees, shift
definitions, availability, scheduling rules, time blocks), the per-run
coverage counters, and the assignment records the engine produces.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Optional, Union

from shiftassign.domain.errors import SnapshotError

MINUTES_PER_DAY = 24 * 60


def time_to_minutes(t: time) -> int:
    """Minutes from midnight for a wall-clock time."""
    return t.hour * 60 + t.minute


def parse_time(value: Union[str, time]) -> time:
    """Parse an ``HH:MM`` or ``HH:MM:SS`` string into a time."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if not isinstance(value, str):
        raise SnapshotError(f"Expected a time string, got {value!r}")
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise SnapshotError(f"Invalid time string: {value!r}")
    try:
        hour, minute = int(parts[0]), int(parts[1])
        return time(hour=hour, minute=minute)
    except ValueError as e:
        raise SnapshotError(f"Invalid time string: {value!r}") from e


def parse_date(value: Union[str, date]) -> date:
    """Parse an ISO date (or the date part of an ISO datetime)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise SnapshotError(f"Expected a date string, got {value!r}")
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError as e:
        raise SnapshotError(f"Invalid date string: {value!r}") from e


TRUE_STRINGS = frozenset({"true", "t", "yes", "y", "1"})
FALSE_STRINGS = frozenset({"false", "f", "no", "n", "0"})


def parse_bool(value: Any) -> bool:
    """Parse a snapshot flag given as a bool, 0/1 or a string such as ``"false"``."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False
    raise SnapshotError(f"Invalid boolean value: {value!r}")


def format_time(t: time) -> str:
    return t.strftime("%H:%M")


def day_of_week(d: date) -> int:
    """Day of week with 0 = Sunday, as stored in availability records."""
    return (d.weekday() + 1) % 7


def _pick(data: dict, *keys: str, default: Any = None) -> Any:
    """Return the first key present in a snapshot dict (camelCase or snake_case)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _require(data: dict, *keys: str) -> Any:
    value = _pick(data, *keys)
    if value is None:
        raise SnapshotError(f"Missing required field {keys[0]!r} in {data!r}")
    return value


class PositionRole(Enum):
    """Semantic staffing role derived from a raw position label."""

    SUPERVISOR_CAPABLE = "supervisor_capable"
    GENERAL_STAFF = "general_staff"

    @classmethod
    def from_label(cls, label: Optional[str]) -> "PositionRole":
        """Collapse a raw position label into one of the two roles.

        Labels such as "supervisor", "shift_supervisor" and "management"
        can satisfy supervisor minimums. Everything else ("dispatcher",
        blank, unknown labels) is general staff.
        """
        if not label:
            return cls.GENERAL_STAFF
        normalized = label.strip().lower().replace("-", "_").replace(" ", "_")
        if normalized in SUPERVISOR_LABELS:
            return cls.SUPERVISOR_CAPABLE
        return cls.GENERAL_STAFF


SUPERVISOR_LABELS = frozenset(
    {"supervisor", "shift_supervisor", "management", "manager"}
)


class ShiftPattern(Enum):
    """Multi-day shift templates an employee can prefer."""

    FOUR_TEN = "4x10"  # Four consecutive 10-hour days
    THREE_TWELVE_PLUS_FOUR = "3x12plus4"  # Three 12-hour days plus one 4-hour day

    @classmethod
    def from_label(cls, label: Union[str, "ShiftPattern"]) -> "ShiftPattern":
        if isinstance(label, ShiftPattern):
            return label
        normalized = str(label).strip().lower().replace("_", "").replace("-", "")
        aliases = {
            "4x10": cls.FOUR_TEN,
            "fourten": cls.FOUR_TEN,
            "3x12plus4": cls.THREE_TWELVE_PLUS_FOUR,
            "3x121x4": cls.THREE_TWELVE_PLUS_FOUR,
            "threetwelveplusfour": cls.THREE_TWELVE_PLUS_FOUR,
        }
        if normalized not in aliases:
            raise SnapshotError(f"Unknown shift pattern: {label!r}")
        return aliases[normalized]

    @property
    def day_hours(self) -> tuple[float, ...]:
        """Hours worked on each consecutive day of the pattern."""
        if self is ShiftPattern.FOUR_TEN:
            return (10.0, 10.0, 10.0, 10.0)
        return (12.0, 12.0, 12.0, 4.0)

    @property
    def length(self) -> int:
        """Number of consecutive days the pattern spans."""
        return len(self.day_hours)


@dataclass(frozen=True)
class Employee:
    """A staff member as supplied by the roster snapshot.

    Attributes:
        id: Unique identifier.
        first_name: Given name.
        last_name: Family name.
        position: Raw position label (e.g. "dispatcher", "shift_supervisor").
        is_active: Inactive employees are never scheduled.
        role: Semantic role, computed once from the position label.
    """

    id: str
    first_name: str = ""
    last_name: str = ""
    position: Optional[str] = None
    is_active: bool = True
    role: PositionRole = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "role", PositionRole.from_label(self.position))

    @property
    def is_supervisor(self) -> bool:
        return self.role is PositionRole.SUPERVISOR_CAPABLE

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_dict(cls, data: dict) -> "Employee":
        return cls(
            id=str(_require(data, "id")),
            first_name=_pick(data, "firstName", "first_name", default=""),
            last_name=_pick(data, "lastName", "last_name", default=""),
            position=_pick(data, "position"),
            is_active=parse_bool(_pick(data, "isActive", "is_active", default=True)),
        )


@dataclass(frozen=True)
class ShiftDefinition:
    """A shift from the shift catalogue.

    Attributes:
        id: Unique identifier.
        name: Display name (e.g. "Graveyard (12h)").
        start_time: Wall-clock start.
        end_time: Wall-clock end; at or before the start means the shift
            ends the following day.
        duration_hours: Paid hours. Derived from the times when not given.
    """

    id: str
    name: str
    start_time: time
    end_time: time
    duration_hours: Optional[float] = None

    def __post_init__(self):
        if self.duration_hours is None:
            minutes = (self.end_minutes - self.start_minutes) % MINUTES_PER_DAY
            if minutes == 0:
                minutes = MINUTES_PER_DAY
            object.__setattr__(self, "duration_hours", minutes / 60.0)

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.end_time)

    @property
    def crosses_midnight(self) -> bool:
        """True when the end time-of-day is at or before the start."""
        return self.end_minutes <= self.start_minutes

    def start_datetime(self, on: date) -> datetime:
        return datetime.combine(on, self.start_time)

    def end_datetime(self, on: date) -> datetime:
        """When a shift starting on ``on`` ends."""
        end_day = on + timedelta(days=1) if self.crosses_midnight else on
        return datetime.combine(end_day, self.end_time)

    def __repr__(self) -> str:
        return (
            f"ShiftDefinition({self.name!r}, {format_time(self.start_time)}-"
            f"{format_time(self.end_time)}, {self.duration_hours:g}h)"
        )

    @classmethod
    def from_dict(cls, data: dict) -> "ShiftDefinition":
        duration = _pick(data, "durationHours", "duration_hours")
        return cls(
            id=str(_require(data, "id")),
            name=_pick(data, "name", default=""),
            start_time=parse_time(_require(data, "startTime", "start_time")),
            end_time=parse_time(_require(data, "endTime", "end_time")),
            duration_hours=float(duration) if duration is not None else None,
        )


@dataclass(frozen=True)
class Availability:
    """Weekly availability of an employee for one day of the week.

    Attributes:
        employee_id: Employee this record belongs to.
        day_of_week: 0-6 with 0 = Sunday.
        start_time: Earliest time the employee can work.
        end_time: Latest time the employee can work until.
        is_available: If False, the employee cannot work this weekday.
    """

    employee_id: str
    day_of_week: int
    start_time: time = time(0, 0)
    end_time: time = time(23, 59)
    is_available: bool = True

    def __post_init__(self):
        if not 0 <= self.day_of_week <= 6:
            raise ValueError(f"day_of_week must be 0-6, got {self.day_of_week}")

    @classmethod
    def from_dict(cls, data: dict) -> "Availability":
        return cls(
            employee_id=str(_require(data, "employeeId", "employee_id")),
            day_of_week=int(_require(data, "dayOfWeek", "day_of_week")),
            start_time=parse_time(_pick(data, "startTime", "start_time", default="00:00")),
            end_time=parse_time(_pick(data, "endTime", "end_time", default="23:59")),
            is_available=parse_bool(_pick(data, "isAvailable", "is_available", default=True)),
        )


@dataclass(frozen=True)
class SchedulingRule:
    """Per-employee scheduling preferences.

    Attributes:
        employee_id: Employee this rule applies to.
        preferred_pattern: Multi-day pattern the employee works, if any.
        max_consecutive_days: Upper bound on consecutive working days.
        min_rest_hours: Minimum hours between the end of one shift and the
            start of the next.
    """

    employee_id: str
    preferred_pattern: Optional[ShiftPattern] = None
    max_consecutive_days: Optional[int] = None
    min_rest_hours: Optional[float] = None

    @classmethod
    def from_dict(cls, data: dict) -> "SchedulingRule":
        pattern = _pick(data, "preferredPattern", "preferred_pattern", "preferred_shift_pattern")
        max_days = _pick(data, "maxConsecutiveDays", "max_consecutive_days")
        min_rest = _pick(data, "minRestHours", "min_rest_hours")
        return cls(
            employee_id=str(_require(data, "employeeId", "employee_id")),
            preferred_pattern=ShiftPattern.from_label(pattern) if pattern else None,
            max_consecutive_days=int(max_days) if max_days is not None else None,
            min_rest_hours=float(min_rest) if min_rest is not None else None,
        )


@dataclass(frozen=True)
class TimeBlock:
    """A daily coverage window with staffing minimums.

    Attributes:
        start_time: Start of the window.
        end_time: End of the window.
        min_total_staff: Minimum staff on duty for the whole window.
        min_supervisors: Minimum supervisor-capable staff among them.
        crosses_midnight: Derived from the times when not given.
        id: Stable identifier, "HH:MM-HH:MM" by default.
    """

    start_time: time
    end_time: time
    min_total_staff: int = 0
    min_supervisors: int = 0
    crosses_midnight: Optional[bool] = None
    id: str = ""

    def __post_init__(self):
        if self.min_total_staff < 0 or self.min_supervisors < 0:
            raise ValueError("Staffing minimums cannot be negative")
        if self.min_supervisors > self.min_total_staff:
            raise ValueError(
                f"min_supervisors ({self.min_supervisors}) exceeds "
                f"min_total_staff ({self.min_total_staff})"
            )
        if self.crosses_midnight is None:
            object.__setattr__(
                self,
                "crosses_midnight",
                time_to_minutes(self.end_time) <= time_to_minutes(self.start_time),
            )
        if not self.id:
            object.__setattr__(
                self, "id", f"{format_time(self.start_time)}-{format_time(self.end_time)}"
            )

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        """End in minutes from midnight, past 24h for windows that wrap."""
        end = time_to_minutes(self.end_time)
        if self.crosses_midnight:
            end += MINUTES_PER_DAY
        return end

    @classmethod
    def create_default_blocks(cls) -> list["TimeBlock"]:
        """Create the four standard coverage windows.

        - Early: 5 AM - 9 AM, 6 staff / 1 supervisor
        - Day: 9 AM - 9 PM, 8 staff / 1 supervisor
        - Night: 9 PM - 1 AM, 7 staff / 1 supervisor
        - Overnight: 1 AM - 5 AM, 6 staff / 1 supervisor
        """
        return [
            cls(time(5, 0), time(9, 0), min_total_staff=6, min_supervisors=1),
            cls(time(9, 0), time(21, 0), min_total_staff=8, min_supervisors=1),
            cls(time(21, 0), time(1, 0), min_total_staff=7, min_supervisors=1),
            cls(time(1, 0), time(5, 0), min_total_staff=6, min_supervisors=1),
        ]

    @classmethod
    def from_dict(cls, data: dict) -> "TimeBlock":
        crosses = _pick(data, "crossesMidnight", "crosses_midnight")
        return cls(
            start_time=parse_time(_require(data, "startTime", "start_time")),
            end_time=parse_time(_require(data, "endTime", "end_time")),
            min_total_staff=int(_pick(data, "minTotalStaff", "min_total_staff", default=0)),
            min_supervisors=int(_pick(data, "minSupervisors", "min_supervisors", default=0)),
            crosses_midnight=parse_bool(crosses) if crosses is not None else None,
            id=str(_pick(data, "id", default="")),
        )


@dataclass
class CoverageCounter:
    """Running staff counts for one time block on one date.

    ``supervisors`` counts supervisor-capable staff on duty whatever their
    record says; ``supervisor_shifts`` counts only records flagged as
    supervisor shifts.
    """

    total: int = 0
    supervisors: int = 0
    supervisor_shifts: int = 0


class GapType(Enum):
    """Which minimum a coverage gap falls short of."""

    TOTAL = "total"
    SUPERVISOR = "supervisor"


@dataclass(frozen=True)
class CoverageGap:
    """A date/block where assigned staff is below the required minimum."""

    gap_date: date
    block_id: str
    start_time: time
    end_time: time
    required: int
    actual: int
    gap_type: GapType = GapType.TOTAL

    @property
    def shortfall(self) -> int:
        return self.required - self.actual

    def __str__(self) -> str:
        return (
            f"{self.gap_date.isoformat()} {self.block_id} {self.gap_type.value}: "
            f"{self.actual}/{self.required} (short {self.shortfall})"
        )


@dataclass
class AssignmentRecord:
    """One employee working one shift on one date within a schedule.

    Attributes:
        schedule_id: Schedule the assignment belongs to.
        employee_id: Assigned employee.
        shift_id: Assigned shift definition.
        assignment_date: Date the shift starts on.
        is_supervisor_shift: True when placed to satisfy a supervisor minimum.
        start_time: Copied from the shift definition.
        end_time: Copied from the shift definition.
    """

    schedule_id: str
    employee_id: str
    shift_id: str
    assignment_date: Union[date, str]
    is_supervisor_shift: bool = False
    start_time: Optional[time] = None
    end_time: Optional[time] = None

    @classmethod
    def for_shift(
        cls,
        schedule_id: str,
        employee_id: str,
        shift: ShiftDefinition,
        assignment_date: date,
        is_supervisor_shift: bool,
    ) -> "AssignmentRecord":
        return cls(
            schedule_id=schedule_id,
            employee_id=employee_id,
            shift_id=shift.id,
            assignment_date=assignment_date,
            is_supervisor_shift=is_supervisor_shift,
            start_time=shift.start_time,
            end_time=shift.end_time,
        )

    @property
    def date_str(self) -> str:
        if isinstance(self.assignment_date, date):
            return self.assignment_date.isoformat()
        return str(self.assignment_date)

    @property
    def key(self) -> tuple[str, str, str]:
        """Unique key: one record per schedule, employee and date."""
        return (self.schedule_id, self.employee_id, self.date_str)

    def to_dict(self) -> dict:
        """Persistence payload for the assignment store."""
        return {
            "schedule_id": self.schedule_id,
            "employee_id": self.employee_id,
            "shift_id": self.shift_id,
            "date": self.date_str,
            "is_supervisor_shift": self.is_supervisor_shift,
            "start_time": format_time(self.start_time) if self.start_time else None,
            "end_time": format_time(self.end_time) if self.end_time else None,
        }


@dataclass
class AssignmentRequest:
    """Everything one assignment run needs.

    Attributes:
        schedule_id: Schedule the produced records belong to.
        start_date: First date of the scheduling period.
        end_date: Last date of the scheduling period (inclusive).
        employees: Roster snapshot, in roster order.
        shifts: Shift catalogue, in catalogue order.
        availability: Weekly availability records.
        rules: Per-employee scheduling rules (optional per employee).
        requirements: Ordered time blocks covering the day.
    """

    schedule_id: str
    start_date: date
    end_date: date
    employees: list[Employee]
    shifts: list[ShiftDefinition]
    availability: list[Availability] = field(default_factory=list)
    rules: list[SchedulingRule] = field(default_factory=list)
    requirements: list[TimeBlock] = field(default_factory=TimeBlock.create_default_blocks)

    @property
    def schedule_dates(self) -> list[date]:
        """List of all dates in the scheduling period."""
        dates = []
        current = self.start_date
        while current <= self.end_date:
            dates.append(current)
            current += timedelta(days=1)
        return dates

    @property
    def num_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    @property
    def active_employees(self) -> list[Employee]:
        return [e for e in self.employees if e.is_active]

    def availability_map(self) -> dict[tuple[str, int], Availability]:
        """Availability keyed by (employee_id, day_of_week); later records win."""
        return {(a.employee_id, a.day_of_week): a for a in self.availability}

    def rules_map(self) -> dict[str, SchedulingRule]:
        return {r.employee_id: r for r in self.rules}

    @classmethod
    def from_snapshot(
        cls,
        schedule_id: str,
        start_date: Union[str, date],
        end_date: Union[str, date],
        employees: list[dict],
        shifts: list[dict],
        availability: Optional[list[dict]] = None,
        rules: Optional[list[dict]] = None,
        requirements: Optional[list[dict]] = None,
    ) -> "AssignmentRequest":
        """Build a request from raw snapshot dicts supplied by the application."""
        blocks = (
            [TimeBlock.from_dict(r) for r in requirements]
            if requirements is not None
            else TimeBlock.create_default_blocks()
        )
        return cls(
            schedule_id=schedule_id,
            start_date=parse_date(start_date),
            end_date=parse_date(end_date),
            employees=[Employee.from_dict(e) for e in employees],
            shifts=[ShiftDefinition.from_dict(s) for s in shifts],
            availability=[Availability.from_dict(a) for a in availability or []],
            rules=[SchedulingRule.from_dict(r) for r in rules or []],
            requirements=blocks,
        )
