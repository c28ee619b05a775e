"""Tests for powerline segment rendering."""

from cstatus.segments import (
    RESET,
    SEPARATOR_RIGHT,
    Segment,
    ansi_color,
    hex_to_rgb,
    render_segments,
)


def test_hex_to_rgb():
    assert hex_to_rgb("#8b4513") == (139, 69, 19)
    assert hex_to_rgb("ffffff") == (255, 255, 255)


def test_hex_to_rgb_invalid():
    assert hex_to_rgb("#fff") is None
    assert hex_to_rgb("#zzzzzz") is None
    assert hex_to_rgb("") is None


def test_ansi_color_foreground_and_background():
    assert ansi_color("#8b4513") == "\x1b[38;2;139;69;19m"
    assert ansi_color("#8b4513", background=True) == "\x1b[48;2;139;69;19m"


def test_ansi_color_invalid_is_empty():
    assert ansi_color("nope") == ""


def test_render_no_segments():
    assert render_segments([]) == ""


def test_render_skips_empty_segments():
    assert render_segments([Segment("", "#000000", "#ffffff")]) == ""


def test_render_single_segment():
    line = render_segments([Segment(" a ", bg="#010203", fg="#ffffff")])
    assert line == (
        "\x1b[48;2;1;2;3m"
        "\x1b[38;2;255;255;255m"
        " a "
        + RESET
        + "\x1b[38;2;1;2;3m"
        + SEPARATOR_RIGHT
        + RESET
    )


def test_render_separator_uses_next_background():
    """The arrow is drawn in this segment's bg colour over the next segment's bg."""
    first = Segment(" a ", bg="#010203", fg="#ffffff")
    second = Segment(" b ", bg="#0a0b0c", fg="#000000")
    line = render_segments([first, second])

    expected_join = (
        " a "
        + RESET
        + "\x1b[48;2;10;11;12m"
        + "\x1b[38;2;1;2;3m"
        + SEPARATOR_RIGHT
        + "\x1b[48;2;10;11;12m"
        + "\x1b[38;2;0;0;0m"
        + " b "
    )
    assert expected_join in line
    assert line.endswith("\x1b[38;2;10;11;12m" + SEPARATOR_RIGHT + RESET)
    assert line.count(SEPARATOR_RIGHT) == 2
