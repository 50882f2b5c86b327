"""Per-date coverage counts for one assignment run."""

from datetime import date

from shiftassign.domain.models import (
    CoverageCounter,
    CoverageGap,
    GapType,
    ShiftDefinition,
    TimeBlock,
)
from shiftassign.scheduling.overlap import covered_blocks


class CoverageTracker:
    """Tracks assigned total staff and supervisors per date and time block.

    Counters for a date are created on first touch, with every block
    starting at zero. Counts only ever go up; the engine never un-assigns.
    """

    def __init__(self, blocks: list[TimeBlock]):
        self.blocks = list(blocks)
        self._counters: dict[date, dict[str, CoverageCounter]] = {}

    def _day(self, d: date) -> dict[str, CoverageCounter]:
        if d not in self._counters:
            self._counters[d] = {block.id: CoverageCounter() for block in self.blocks}
        return self._counters[d]

    def get(self, d: date, block: TimeBlock) -> CoverageCounter:
        """Get current counts for a block on a date."""
        day = self._day(d)
        if block.id not in day:
            day[block.id] = CoverageCounter()
        return day[block.id]

    def record(
        self,
        d: date,
        block: TimeBlock,
        is_supervisor: bool,
        is_supervisor_shift: bool = False,
    ) -> None:
        """Count one more person on duty for a block."""
        counter = self.get(d, block)
        counter.total += 1
        if is_supervisor:
            counter.supervisors += 1
        if is_supervisor_shift:
            counter.supervisor_shifts += 1

    def record_shift(
        self,
        d: date,
        shift: ShiftDefinition,
        is_supervisor: bool,
        is_supervisor_shift: bool = False,
    ) -> list[TimeBlock]:
        """Count a shift toward every block it overlaps on a date.

        Returns:
            The blocks that were credited.
        """
        credited = covered_blocks(shift, self.blocks)
        for block in credited:
            self.record(d, block, is_supervisor, is_supervisor_shift)
        return credited

    def lacks_supervisor_shift(self, d: date, shift: ShiftDefinition) -> bool:
        """Whether a shift covers a block still short of flagged supervisor records."""
        for block in covered_blocks(shift, self.blocks):
            if self.get(d, block).supervisor_shifts < block.min_supervisors:
                return True
        return False

    def dates(self) -> list[date]:
        return sorted(self._counters)

    def shortfalls(self, d: date) -> list[CoverageGap]:
        """Coverage gaps for a date, supervisor gaps listed before total gaps per block."""
        gaps = []
        for block in self.blocks:
            counter = self.get(d, block)
            if counter.supervisors < block.min_supervisors:
                gaps.append(
                    CoverageGap(
                        gap_date=d,
                        block_id=block.id,
                        start_time=block.start_time,
                        end_time=block.end_time,
                        required=block.min_supervisors,
                        actual=counter.supervisors,
                        gap_type=GapType.SUPERVISOR,
                    )
                )
            if counter.total < block.min_total_staff:
                gaps.append(
                    CoverageGap(
                        gap_date=d,
                        block_id=block.id,
                        start_time=block.start_time,
                        end_time=block.end_time,
                        required=block.min_total_staff,
                        actual=counter.total,
                        gap_type=GapType.TOTAL,
                    )
                )
        return gaps
