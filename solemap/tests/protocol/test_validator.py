from __future__ import annotations

import pytest

from solemap.protocol.validator import is_non_negative_number, is_well_formed


def test_untagged_lines_are_vacuously_well_formed():
    assert is_well_formed("[INFO] Device disconnected")
    assert is_well_formed("")


def test_tagged_line_needs_eight_tokens():
    assert not is_well_formed("PRESSURE_LEFT: 1,2,3")
    assert is_well_formed("PRESSURE_LEFT: 1,2,3,4,5,6,7,8")
    assert not is_well_formed("PRESSURE_LEFT: 1,2,3,4,5,6,7,8,9")


def test_tagged_line_with_prefix_and_right_side():
    assert is_well_formed("[12:00:01] PRESSURE_RIGHT: 1, 2, 3, 4, 5, 6, 7, 8")
    assert is_well_formed("[INFO] PRESSURE_LEFT: 0,0,0,0,0,0,0,4294967295")


@pytest.mark.parametrize(
    "line",
    [
        "PRESSURE_LEFT: 1,2,3,4,5,6,7,x",
        "PRESSURE_LEFT: 1,2,3,4,5,6,7,-8",
        "PRESSURE_LEFT: 1,2,3,4,5,6,7,",
        "PRESSURE_LEFT:",
        "PRESSURE_FRONT: 1,2,3,4,5,6,7,8",
    ],
)
def test_malformed_tagged_lines(line):
    assert not is_well_formed(line)


def test_non_negative_number():
    assert is_non_negative_number("12")
    assert is_non_negative_number(" 1.5 ")
    assert is_non_negative_number("1e3")
    assert not is_non_negative_number("-1")
    assert not is_non_negative_number("nan")
    assert not is_non_negative_number("inf")
    assert not is_non_negative_number("")
