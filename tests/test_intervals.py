import math

from cutline.core.intervals import (
    all_containing,
    clamp,
    contains,
    find_containing,
    is_valid_duration,
    next_starting_after,
    overlaps,
    shift,
)
from cutline.core.models import Subtitle


def _sub(start, end, text="x"):
    return Subtitle(text=text, start_time=start, end_time=end)


def test_contains_is_half_open():
    s = _sub(2.0, 4.0)
    assert contains(s, 2.0)
    assert contains(s, 3.999)
    assert not contains(s, 4.0)
    assert not contains(s, 1.999)


def test_overlaps_ignores_touching_edges():
    assert overlaps(_sub(0, 5), _sub(4, 6))
    assert not overlaps(_sub(0, 5), _sub(5, 6))
    assert overlaps(_sub(0, 10), _sub(2, 3))


def test_clamp_and_shift():
    assert clamp(-1.0, 0.0, 3.0) == 0.0
    assert clamp(9.0, 0.0, 3.0) == 3.0
    assert clamp(1.5, 0.0, 3.0) == 1.5
    s = shift(_sub(1, 3), 2.5)
    assert (s.start_time, s.end_time) == (3.5, 5.5)


def test_is_valid_duration():
    assert is_valid_duration(0.5)
    assert not is_valid_duration(0)
    assert not is_valid_duration(-2)
    assert not is_valid_duration(math.nan)
    assert not is_valid_duration(math.inf)
    assert not is_valid_duration(None)
    assert not is_valid_duration("abc")


def test_lookup_helpers():
    subs = [_sub(0, 5, "a"), _sub(5, 10, "b"), _sub(3, 7, "c")]
    assert find_containing(subs, 5).text == "b"
    assert [s.text for s in all_containing(subs, 4)] == ["a", "c"]
    assert next_starting_after(subs, 3).text == "b"
    assert next_starting_after(subs, 5) is None
