"""Tests for the shift to time-block overlap rules."""

from datetime import time

import pytest

from shiftassign.domain.models import ShiftDefinition, TimeBlock
from shiftassign.scheduling.overlap import covered_blocks, overlaps


def shift(start: str, end: str) -> ShiftDefinition:
    h1, m1 = map(int, start.split(":"))
    h2, m2 = map(int, end.split(":"))
    return ShiftDefinition(f"{start}-{end}", "", time(h1, m1), time(h2, m2))


def block(start: str, end: str) -> TimeBlock:
    h1, m1 = map(int, start.split(":"))
    h2, m2 = map(int, end.split(":"))
    return TimeBlock(time(h1, m1), time(h2, m2))


class TestSameDayShifts:
    """A same-day shift must fully contain the block."""

    def test_contains_block(self):
        assert overlaps(shift("09:00", "21:00"), block("09:00", "21:00"))
        assert overlaps(shift("05:00", "15:00"), block("05:00", "09:00"))

    def test_partial_cover_does_not_count(self):
        assert not overlaps(shift("08:00", "20:00"), block("09:00", "21:00"))
        assert not overlaps(shift("06:00", "14:00"), block("05:00", "09:00"))

    def test_never_contains_wrapping_block(self):
        assert not overlaps(shift("00:00", "23:59"), block("21:00", "01:00"))


class TestMidnightCrossingShifts:
    """A wrapping shift counts when a block boundary falls inside it."""

    def test_night_shift_blocks(self):
        night = shift("22:00", "06:00")
        assert overlaps(night, block("21:00", "01:00"))
        assert overlaps(night, block("01:00", "05:00"))
        assert not overlaps(night, block("09:00", "21:00"))

    @pytest.mark.parametrize(
        "block_times,expected",
        [
            (("21:00", "01:00"), True),
            (("01:00", "05:00"), True),
            (("09:00", "21:00"), True),
            (("05:00", "09:00"), False),
        ],
    )
    def test_graveyard(self, block_times, expected):
        assert overlaps(shift("17:00", "05:00"), block(*block_times)) is expected

    def test_touching_boundary_does_not_count(self):
        swing = shift("15:00", "01:00")
        assert not overlaps(swing, block("01:00", "05:00"))
        assert overlaps(swing, block("21:00", "01:00"))

    def test_covered_blocks(self):
        blocks = TimeBlock.create_default_blocks()
        covered = covered_blocks(shift("17:00", "05:00"), blocks)
        assert [b.id for b in covered] == ["09:00-21:00", "21:00-01:00", "01:00-05:00"]
