import pytest

from app.schemas.conflict import SectionTimeSlot
from app.schemas.schedule import TimeSlot
from app.services.overlap import (
    minutes_to_time,
    overlaps,
    parse_days,
    parse_time,
    parse_time_strict,
    slots_overlap,
    time_ranges_overlap,
    touches,
)


def slot(day, start, end):
    return TimeSlot(day=day, start=start, end=end)


def test_parse_time_reads_minutes_past_midnight():
    assert parse_time("08:00") == 480
    assert parse_time("14:30") == 870
    assert parse_time("16:45:00") == 1005


@pytest.mark.parametrize("value", ["", None, "0900", "nine", "ab:cd", "10:xx"])
def test_parse_time_coerces_malformed_values_to_zero(value):
    assert parse_time(value) == 0


def test_parse_time_reads_empty_parts_as_zero():
    assert parse_time("10:") == 600
    assert parse_time(":30") == 30
    # "10:" is 10:00, so it starts after a 09:00-09:30 meeting ends.
    assert not overlaps([slot("Monday", "10:", "10:30")], [slot("Monday", "09:00", "09:30")])


def test_parse_time_strict_rejects_malformed_values():
    assert parse_time_strict("09:05") == 545
    with pytest.raises(ValueError):
        parse_time_strict("9:05")
    with pytest.raises(ValueError):
        parse_time_strict("25:00")


def test_parse_days_splits_on_whitespace():
    assert parse_days("Sunday  Tuesday\tThursday") == ["Sunday", "Tuesday", "Thursday"]
    assert parse_days("") == []
    assert parse_days(None) == []


def test_minutes_to_time_pads():
    assert minutes_to_time(545) == "09:05"


def test_time_ranges_are_half_open():
    assert time_ranges_overlap(540, 600, 570, 630)
    assert not time_ranges_overlap(540, 600, 600, 660)


def test_touching_boundaries_do_not_conflict():
    a = [slot("Monday", "09:00", "10:00")]
    b = [slot("Monday", "10:00", "11:00")]
    assert not overlaps(a, b)
    assert touches(a, b)


def test_different_days_never_conflict():
    assert not overlaps([slot("Monday", "09:00", "10:00")], [slot("Tuesday", "09:00", "10:00")])


def test_multi_day_token_lists_share_a_day():
    lecture = [slot("Sunday Tuesday Thursday", "10:00", "10:50")]
    lab = [slot("Thursday", "10:30", "12:20")]
    assert overlaps(lecture, lab)


def test_overlap_is_symmetric():
    cases = [
        ([slot("Monday", "09:00", "09:50")], [slot("Monday", "09:30", "10:20")]),
        ([slot("Monday", "09:00", "09:50")], [slot("Monday", "09:50", "10:40")]),
        ([slot("Sunday Tuesday", "08:00", "09:15")], [slot("Tuesday Thursday", "09:00", "09:50")]),
        ([slot("Monday", "09:00", "bad")], [slot("Monday", "08:00", "10:00")]),
    ]
    for a, b in cases:
        assert overlaps(a, b) == overlaps(b, a)


def test_overlap_is_reflexive_for_non_empty_slots():
    a = [slot("Wednesday", "13:00", "14:15")]
    assert overlaps(a, a)


def test_zero_length_slot_never_conflicts():
    # A malformed end time reads as 00:00, leaving an empty range.
    broken = [slot("Monday", "09:00", "oops")]
    assert not overlaps(broken, broken)
    assert not overlaps(broken, [slot("Monday", "00:00", "23:59")])


def test_overlaps_accepts_scheduler_time_slots():
    a = [SectionTimeSlot(day="Monday", start_time="09:00", end_time="10:00")]
    b = [slot("Monday", "09:30", "10:30")]
    assert overlaps(a, b)
    assert slots_overlap(a[0], b[0])


def test_empty_lists_do_not_overlap():
    assert not overlaps([], [slot("Monday", "09:00", "10:00")])


def test_empty_range_inside_another_slot_does_not_conflict():
    instant = [slot("Monday", "09:00", "09:00")]
    assert not overlaps(instant, [slot("Monday", "08:00", "10:00")])
    assert not overlaps(instant, instant)
