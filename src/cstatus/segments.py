"""Powerline segment rendering with 24-bit ANSI colours."""

from __future__ import annotations

from dataclasses import dataclass

import click

SEPARATOR_RIGHT = "\ue0b0"
RESET = "\x1b[0m"


@dataclass
class Segment:
    """A rendered piece of the statusline. Text carries its own padding."""

    text: str
    bg: str
    fg: str

    def is_empty(self) -> bool:
        return not self.text


def hex_to_rgb(hex_color: str) -> tuple[int, int, int] | None:
    """Convert '#rrggbb' to an RGB tuple. Returns None for anything else."""
    hex_color = hex_color.removeprefix("#")
    if len(hex_color) != 6:
        return None
    try:
        return (
            int(hex_color[0:2], 16),
            int(hex_color[2:4], 16),
            int(hex_color[4:6], 16),
        )
    except ValueError:
        return None


def ansi_color(hex_color: str, background: bool = False) -> str:
    """Escape sequence selecting the colour, or '' for an invalid hex."""
    rgb = hex_to_rgb(hex_color)
    if rgb is None:
        return ""
    if background:
        return click.style("", bg=rgb, reset=False)
    return click.style("", fg=rgb, reset=False)


def render_segments(segments: list[Segment]) -> str:
    """Join segments with powerline arrows.

    Each arrow is drawn in the segment's background colour over the next
    segment's background, so the arrow appears to point into it.
    """
    segments = [s for s in segments if s is not None and not s.is_empty()]
    if not segments:
        return ""

    parts: list[str] = []
    for i, segment in enumerate(segments):
        parts.append(ansi_color(segment.bg, background=True))
        parts.append(ansi_color(segment.fg))
        parts.append(segment.text)
        parts.append(RESET)
        if i < len(segments) - 1:
            parts.append(ansi_color(segments[i + 1].bg, background=True))
        parts.append(ansi_color(segment.bg))
        parts.append(SEPARATOR_RIGHT)

    parts.append(RESET)
    return "".join(parts)
