"""Shift to time-block overlap rules.

A shift that stays within one calendar day only counts toward a block it
fully contains. A shift that runs past midnight counts toward any block
whose start or end falls inside its wrapped interval. Shorter shifts that
only partially cover a block contribute nothing to it.
"""

from shiftassign.domain.models import MINUTES_PER_DAY, ShiftDefinition, TimeBlock


def overlaps(shift: ShiftDefinition, block: TimeBlock) -> bool:
    """Check if a shift contributes coverage to a time block."""
    block_start = block.start_minutes
    block_end = block.end_minutes  # Already past 24h for wrapping blocks

    if not shift.crosses_midnight:
        return shift.start_minutes <= block_start and shift.end_minutes >= block_end

    shift_start = shift.start_minutes
    shift_end = shift.end_minutes + MINUTES_PER_DAY

    # Try each block boundary as-is and one day later so that early-morning
    # blocks line up with the tail of the wrapped shift.
    for offset in (0, MINUTES_PER_DAY):
        start = block_start + offset
        end = block_end + offset
        if shift_start <= start < shift_end:
            return True
        if shift_start < end <= shift_end:
            return True
    return False


def covered_blocks(shift: ShiftDefinition, blocks: list[TimeBlock]) -> list[TimeBlock]:
    """Blocks that a shift contributes coverage to."""
    return [block for block in blocks if overlaps(shift, block)]
