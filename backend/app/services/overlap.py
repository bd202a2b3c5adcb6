"""Day/time overlap checks shared by the generator, the detector and the scorer.

Ranges are half-open: a meeting ending at 10:00 and one starting at 10:00 on
the same day do not overlap. Malformed time strings read as minute 0, so a
slot with a broken end time is zero-length and never conflicts.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Union

from app.schemas.conflict import SectionTimeSlot
from app.schemas.schedule import ScheduleOption, Section, TimeSlot

AnySlot = Union[TimeSlot, SectionTimeSlot]

STRICT_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


@dataclass(frozen=True)
class MinuteRange:
    days: frozenset[str]
    start: int
    end: int


def parse_days(value: str | None) -> list[str]:
    if not value:
        return []
    return value.split()


def parse_time(value: str | None) -> int:
    """Minutes past midnight for ``HH:MM``; anything unparseable is 0.

    An empty part counts as zero, so ``"10:"`` is 600 and ``":30"`` is 30.
    """
    if not value or ":" not in value:
        return 0
    # Seconds in "HH:MM:SS" are ignored.
    hours, minutes = (part.strip() or "0" for part in value.split(":")[:2])
    try:
        return int(hours) * 60 + int(minutes)
    except ValueError:
        return 0


def parse_time_strict(value: str) -> int:
    if not STRICT_TIME_PATTERN.match(value or ""):
        raise ValueError(f"Time must be in HH:MM 24-hour format, got {value!r}")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_time(value: int) -> str:
    hours = value // 60
    minutes = value % 60
    return f"{hours:02d}:{minutes:02d}"


def time_ranges_overlap(start1: int, end1: int, start2: int, end2: int) -> bool:
    return start1 < end2 and start2 < end1


def slot_bounds(slot: AnySlot) -> MinuteRange:
    if isinstance(slot, SectionTimeSlot):
        start, end = slot.start_time, slot.end_time
    else:
        start, end = slot.start, slot.end
    return MinuteRange(days=frozenset(parse_days(slot.day)), start=parse_time(start), end=parse_time(end))


def slot_minutes(slot: AnySlot) -> int:
    bounds = slot_bounds(slot)
    return max(0, bounds.end - bounds.start)


def slots_overlap(a: AnySlot, b: AnySlot) -> bool:
    first, second = slot_bounds(a), slot_bounds(b)
    if first.start >= first.end or second.start >= second.end:
        return False
    if not first.days & second.days:
        return False
    return time_ranges_overlap(first.start, first.end, second.start, second.end)


def overlaps(a: Iterable[AnySlot], b: Iterable[AnySlot]) -> bool:
    """True as soon as any slot of ``a`` shares a day and an overlapping range with one of ``b``."""
    second = list(b)
    return any(slots_overlap(slot_a, slot_b) for slot_a in a for slot_b in second)


def touches(a: Iterable[AnySlot], b: Iterable[AnySlot]) -> bool:
    """True when a slot of one list ends exactly where a slot of the other begins on a shared day."""
    second = [slot_bounds(slot) for slot in b]
    for slot_a in a:
        first = slot_bounds(slot_a)
        if first.start >= first.end:
            continue
        for other in second:
            if other.start >= other.end or not first.days & other.days:
                continue
            if first.end == other.start or other.end == first.start:
                return True
    return False


def sections_conflict(section_a: Section, section_b: Section) -> bool:
    return overlaps(section_a.times, section_b.times)


def options_conflict(option_a: ScheduleOption, option_b: ScheduleOption) -> bool:
    return any(
        sections_conflict(section_a, section_b)
        for section_a in option_a.sections
        for section_b in option_b.sections
    )


def schedule_has_conflict(options: Sequence[ScheduleOption]) -> bool:
    for index, option_a in enumerate(options):
        for option_b in options[index + 1 :]:
            if options_conflict(option_a, option_b):
                return True
    return False
