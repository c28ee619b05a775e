"""Widgets — each turns a StatusContext into one coloured segment, or None to hide."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from cstatus.models import StatusContext
from cstatus.segments import Segment, render_segments

logger = logging.getLogger(__name__)

# Icons
BRANCH_ICON = "⎇"
GIT_CHANGES_ICON = "●"
MODEL_ICON = "⚡"
SESSION_ICON = "§"
CONTEXT_ICON = "◔"
PROJECT_ICON = "📁"
CLOCK_ICON = "🕐"
TIMER_ICON = "⏱"
VERSION_ICON = "🔧"

# Colors (foreground, background) — dark theme
PROJECT_COLORS = ("#ffffff", "#8b4513")
GIT_COLORS = ("#ffffff", "#404040")
GIT_CHANGES_COLORS = ("#ffffff", "#ff6b6b")
MODEL_COLORS = ("#ffffff", "#2d2d2d")
SESSION_COLORS = ("#00ffff", "#202020")
CONTEXT_COLORS = ("#cbd5e0", "#4a5568")
BLOCK_COLORS = ("#ffff00", "#333333")
DURATION_COLORS = ("#ffffff", "#3c3c3c")
VERSION_COLORS = ("#ffffff", "#666666")

Widget = Callable[[StatusContext], Segment | None]


def _segment(icon: str, text: str, colors: tuple[str, str]) -> Segment:
    fg, bg = colors
    return Segment(text=f" {icon} {text} ", bg=bg, fg=fg)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_cost(cost: float) -> str:
    if cost < 0.01:
        return f"{cost * 100:.1f}¢"
    return f"${cost:.2f}"


def format_tokens(tokens: int) -> str:
    if tokens > 1_000_000:
        return f"{tokens / 1_000_000:.1f}M"
    if tokens > 1000:
        return f"{tokens / 1000:.1f}K"
    return str(tokens)


def format_duration(hours: int, minutes: int) -> str:
    if hours == 0:
        return f"{minutes}m"
    if minutes == 0:
        return f"{hours}hr"
    return f"{hours}hr {minutes}m"


def format_elapsed(elapsed: timedelta) -> str:
    """Human-friendly elapsed time: '<1m', '45m', '2hr', '1hr 5m'."""
    total_minutes = int(elapsed.total_seconds() // 60)
    if total_minutes < 1:
        return "<1m"
    return format_duration(total_minutes // 60, total_minutes % 60)


# ---------------------------------------------------------------------------
# Widgets
# ---------------------------------------------------------------------------


def project_widget(ctx: StatusContext) -> Segment | None:
    if not ctx.project_name:
        return None
    return _segment(PROJECT_ICON, ctx.project_name, PROJECT_COLORS)


def git_widget(ctx: StatusContext) -> Segment | None:
    """Branch name; a dirty tree adds a dot and turns the segment red."""
    if not ctx.git_branch:
        return None
    if ctx.git_has_changes:
        return _segment(
            BRANCH_ICON, f"{ctx.git_branch} {GIT_CHANGES_ICON}", GIT_CHANGES_COLORS,
        )
    return _segment(BRANCH_ICON, ctx.git_branch, GIT_COLORS)


def model_widget(ctx: StatusContext) -> Segment | None:
    model_name = ctx.status.model.display_name or "Claude"
    return _segment(MODEL_ICON, model_name, MODEL_COLORS)


def session_widget(ctx: StatusContext) -> Segment | None:
    cost = format_cost(ctx.status.cost.total_cost_usd)
    tokens = format_tokens(ctx.token_metrics.total_tokens)
    return _segment(SESSION_ICON, f"{cost} ({tokens})", SESSION_COLORS)


def context_widget(ctx: StatusContext) -> Segment | None:
    """Tokens in the live context window and the share of the window used."""
    context_length = ctx.token_metrics.context_length
    if context_length == 0:
        return _segment(CONTEXT_ICON, "0 ctx", CONTEXT_COLORS)

    text = format_tokens(context_length)
    if ctx.context_window > 0:
        percentage = context_length / ctx.context_window * 100
        text = f"{text} ({percentage:.0f}%)"
    return _segment(CONTEXT_ICON, text, CONTEXT_COLORS)


def block_widget(ctx: StatusContext) -> Segment | None:
    """Time spent in the current 5-hour block. Hidden when no block is active."""
    if ctx.block_metrics is None:
        return None
    now = ctx.now or datetime.now(tz=timezone.utc)
    elapsed = now - ctx.block_metrics.start_time
    total_minutes = max(int(elapsed.total_seconds() // 60), 0)
    text = format_duration(total_minutes // 60, total_minutes % 60)
    return _segment(TIMER_ICON, text, BLOCK_COLORS)


def duration_widget(ctx: StatusContext) -> Segment | None:
    if ctx.session_duration is None:
        return None
    return _segment(CLOCK_ICON, format_elapsed(ctx.session_duration), DURATION_COLORS)


def version_widget(ctx: StatusContext) -> Segment | None:
    version = ctx.status.version
    if not version or version == "unknown":
        return None
    return _segment(VERSION_ICON, f"v{version}", VERSION_COLORS)


WIDGETS: dict[str, Widget] = {
    "project": project_widget,
    "git": git_widget,
    "model": model_widget,
    "session": session_widget,
    "context": context_widget,
    "block": block_widget,
    "duration": duration_widget,
    "version": version_widget,
}


def build_statusline(ctx: StatusContext, widget_names: list[str]) -> str:
    """Render the named widgets in order. Unknown names are skipped."""
    segments: list[Segment] = []
    for name in widget_names:
        widget = WIDGETS.get(name)
        if widget is None:
            logger.debug("Unknown widget %r", name)
            continue
        segment = widget(ctx)
        if segment is not None and not segment.is_empty():
            segments.append(segment)
    return render_segments(segments)
