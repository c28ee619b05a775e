"""Block-window calculator — reconstructs the current 5-hour usage block.

Usage is billed in fixed 5-hour blocks anchored to the first activity, but
the transcript only records raw event timestamps. The block start is
rebuilt from those: find the unbroken streak of activity that ends at the
most recent timestamp, floor its start to the hour, then roll forward by
whole blocks until the start lies within one block of now.

The result depends on the wall clock. Two calls at different instants may
disagree, so callers that need stable output pass ``now`` explicitly.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

from cstatus.models import BlockMetrics

BLOCK_DURATION = timedelta(hours=5)


def calculate_block_metrics(
    timestamps: Sequence[datetime],
    now: datetime | None = None,
    block_duration: timedelta = BLOCK_DURATION,
) -> BlockMetrics | None:
    """Compute the active block from ascending, timezone-aware timestamps.

    Returns None when there are no timestamps or when the most recent one
    is older than one block duration (the user has been away too long).
    Raises ValueError for a block duration that is not positive.
    """
    if block_duration <= timedelta(0):
        raise ValueError(f"block_duration must be positive, got {block_duration}")
    if not timestamps:
        return None

    if now is None:
        now = datetime.now(tz=timezone.utc)

    most_recent = timestamps[-1]
    if now - most_recent > block_duration:
        return None

    continuous_start = find_continuous_start(timestamps, block_duration)
    floored_start = floor_to_hour(continuous_start)
    block_start = current_block_start(now, floored_start, block_duration)

    return BlockMetrics(start_time=block_start, last_activity=most_recent)


def find_continuous_start(
    timestamps: Sequence[datetime], block_duration: timedelta = BLOCK_DURATION,
) -> datetime:
    """Walk backwards from the newest timestamp until a gap >= block_duration.

    Returns the earliest timestamp reachable from the newest one through
    gaps strictly smaller than the block duration.
    """
    continuous_start = timestamps[-1]
    for i in range(len(timestamps) - 2, -1, -1):
        gap = timestamps[i + 1] - timestamps[i]
        if gap >= block_duration:
            break
        continuous_start = timestamps[i]
    return continuous_start


def floor_to_hour(moment: datetime) -> datetime:
    """Zero out minutes, seconds and microseconds, keeping the tzinfo."""
    return moment.replace(minute=0, second=0, microsecond=0)


def current_block_start(
    now: datetime, floored_start: datetime, block_duration: timedelta = BLOCK_DURATION,
) -> datetime:
    """Advance a stale start by whole blocks so it lands on the current one."""
    elapsed = now - floored_start
    if elapsed > block_duration:
        completed_blocks = elapsed // block_duration
        return floored_start + completed_blocks * block_duration
    return floored_start
