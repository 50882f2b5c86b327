"""Coverage reporting over finished assignment records.

Recomputes required vs. actual staffing from the records alone, using the
same overlap rules as the engine. Useful for checking a persisted schedule
or one whose records were edited after generation.
"""

from dataclasses import dataclass, field
from datetime import date, time
from typing import Iterable, Optional

from shiftassign.domain.models import (
    AssignmentRecord,
    CoverageGap,
    GapType,
    ShiftDefinition,
    TimeBlock,
    parse_date,
)
from shiftassign.scheduling.overlap import overlaps


@dataclass(frozen=True)
class RequirementStatus:
    """Required vs. actual staffing for one block, date and count type."""

    status_date: date
    block_id: str
    start_time: time
    end_time: time
    required: int
    actual: int
    status_type: GapType = GapType.TOTAL

    @property
    def is_met(self) -> bool:
        return self.actual >= self.required

    def to_gap(self) -> CoverageGap:
        return CoverageGap(
            gap_date=self.status_date,
            block_id=self.block_id,
            start_time=self.start_time,
            end_time=self.end_time,
            required=self.required,
            actual=self.actual,
            gap_type=self.status_type,
        )


@dataclass
class CoverageValidation:
    """Outcome of checking records against staffing requirements."""

    is_valid: bool
    gaps: list[CoverageGap] = field(default_factory=list)


def calculate_requirement_statuses(
    records: list[AssignmentRecord],
    shifts: list[ShiftDefinition],
    blocks: list[TimeBlock],
    dates: Optional[Iterable[date]] = None,
    supervisor_ids: Optional[set[str]] = None,
) -> list[RequirementStatus]:
    """Compute staffing status for every date and block.

    Args:
        records: Assignment records to count.
        shifts: Shift catalogue the records refer to.
        blocks: Staffing requirements.
        dates: Dates to report on. Defaults to the dates present in records.
        supervisor_ids: Supervisor-capable employee IDs. When given, any
            record for one of them counts toward the supervisor minimum, as
            the engine counts it; otherwise only records flagged
            ``is_supervisor_shift`` do.

    Returns:
        A total status and a supervisor status per (date, block), ordered
        by date then block.
    """
    shifts_by_id = {s.id: s for s in shifts}
    by_date: dict[date, list[AssignmentRecord]] = {}
    for record in records:
        by_date.setdefault(parse_date(record.assignment_date), []).append(record)

    report_dates = sorted(set(dates) if dates is not None else by_date)

    statuses = []
    for d in report_dates:
        day_records = by_date.get(d, [])
        for block in blocks:
            total = 0
            supervisors = 0
            for record in day_records:
                shift = shifts_by_id.get(record.shift_id)
                if shift is None or not overlaps(shift, block):
                    continue
                total += 1
                if supervisor_ids is not None:
                    if record.employee_id in supervisor_ids:
                        supervisors += 1
                elif record.is_supervisor_shift:
                    supervisors += 1

            statuses.append(
                RequirementStatus(
                    status_date=d,
                    block_id=block.id,
                    start_time=block.start_time,
                    end_time=block.end_time,
                    required=block.min_total_staff,
                    actual=total,
                    status_type=GapType.TOTAL,
                )
            )
            statuses.append(
                RequirementStatus(
                    status_date=d,
                    block_id=block.id,
                    start_time=block.start_time,
                    end_time=block.end_time,
                    required=block.min_supervisors,
                    actual=supervisors,
                    status_type=GapType.SUPERVISOR,
                )
            )
    return statuses


def validate_coverage(
    records: list[AssignmentRecord],
    shifts: list[ShiftDefinition],
    blocks: list[TimeBlock],
    dates: Optional[Iterable[date]] = None,
    supervisor_ids: Optional[set[str]] = None,
) -> CoverageValidation:
    statuses = calculate_requirement_statuses(records, shifts, blocks, dates, supervisor_ids)
    gaps = [s.to_gap() for s in statuses if not s.is_met]
    return CoverageValidation(is_valid=not gaps, gaps=gaps)


def group_assignments(
    records: list[AssignmentRecord],
) -> dict[str, dict[str, list[AssignmentRecord]]]:
    """Group records by date (YYYY-MM-DD) then shift ID, dates ascending."""
    grouped: dict[str, dict[str, list[AssignmentRecord]]] = {}
    for record in sorted(records, key=lambda r: r.date_str):
        grouped.setdefault(record.date_str, {}).setdefault(record.shift_id, []).append(record)
    return grouped
