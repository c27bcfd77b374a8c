from datetime import time

import pytest

from time_reporting.common.time_utils import (
    duration_minutes,
    format_range,
    format_time_of_day,
    from_time,
    intervals_overlap,
    parse_time_of_day,
    to_time,
)
from time_reporting.core.exceptions import InvalidFormat


@pytest.mark.parametrize(
    "value, minutes",
    [("00:00", 0), ("09:30", 570), ("12:05", 725), ("23:59", 1439)],
)
def test_parse_time_of_day(value, minutes):
    assert parse_time_of_day(value) == minutes


@pytest.mark.parametrize("value", ["24:00", "9:30", "09:60", "0930", "09:30:00", "", "ab:cd", " 09:30", None])
def test_parse_time_of_day_rejects_bad_format(value):
    with pytest.raises(InvalidFormat):
        parse_time_of_day(value)


def test_format_time_of_day_zero_pads():
    assert format_time_of_day(0) == "00:00"
    assert format_time_of_day(65) == "01:05"
    assert format_time_of_day(1439) == "23:59"


@pytest.mark.parametrize("value", ["00:00", "07:05", "13:45", "23:59"])
def test_format_inverts_parse(value):
    assert format_time_of_day(parse_time_of_day(value)) == value


def test_duration_minutes_examples():
    assert duration_minutes("09:00", "17:00") == 480
    assert duration_minutes("14:00", "09:00") == -300
    assert duration_minutes("10:00", "10:00") == 0


def test_duration_minutes_is_lenient_on_bad_input():
    assert duration_minutes("invalid", "10:00") == 0
    assert duration_minutes("10:00", "25:00") == 0


def test_identical_intervals_overlap():
    assert intervals_overlap(540, 1020, 540, 1020) is True


def test_adjacent_intervals_do_not_overlap():
    assert intervals_overlap(540, 1020, 1020, 1080) is False
    assert intervals_overlap(1020, 1080, 540, 1020) is False


def test_contained_and_partial_intervals_overlap():
    assert intervals_overlap(540, 1020, 720, 960) is True
    assert intervals_overlap(720, 960, 540, 1020) is True
    assert intervals_overlap(540, 600, 590, 700) is True


def test_disjoint_intervals_do_not_overlap():
    assert intervals_overlap(540, 600, 660, 720) is False


def test_format_range():
    assert format_range(540, 1020) == "09:00-17:00"


def test_time_column_bridge():
    assert to_time(570) == time(9, 30)
    assert to_time(None) is None
    assert from_time(time(23, 59, 30)) == 1439
    assert from_time(None) is None
