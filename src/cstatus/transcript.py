"""Transcript parser — streams a JSONL session log into token and block metrics.

Every line is decoded on its own. Lines that are blank, not JSON, or do not
match the expected shape are skipped and never abort the scan. The public
entry points never raise: a missing or unreadable transcript is the normal
"no data yet" state and yields empty metrics.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Iterator
from datetime import datetime, timedelta
from pathlib import Path

from cstatus.blocks import BLOCK_DURATION, calculate_block_metrics
from cstatus.models import (
    BlockMetrics,
    TokenMetrics,
    TranscriptEntry,
    TranscriptScan,
    Usage,
)

logger = logging.getLogger(__name__)

# YYYY-MM-DDTHH:MM:SS[.frac] followed by Z or a +HH:MM offset
RFC3339_RE = re.compile(
    r"\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(?:\.\d{1,9})?(?:[Zz]|[+-]\d{2}:\d{2})"
)

# JSON field name -> Usage attribute
USAGE_FIELDS = {
    "input_tokens": "input_tokens",
    "output_tokens": "output_tokens",
    "cache_read_input_tokens": "cache_read_tokens",
    "cache_creation_input_tokens": "cache_creation_tokens",
}


class MalformedLine(ValueError):
    """A transcript line whose shape does not match a transcript entry."""


def compute_metrics(
    transcript_path: str | Path,
    now: datetime | None = None,
    block_duration: timedelta = BLOCK_DURATION,
) -> tuple[TokenMetrics, BlockMetrics | None]:
    """Token metrics and the active block for one transcript file.

    An empty path returns empty metrics without touching the filesystem.
    """
    scan = scan_transcript(transcript_path, now=now, block_duration=block_duration)
    return scan.token_metrics, scan.block_metrics


def scan_transcript(
    transcript_path: str | Path,
    now: datetime | None = None,
    block_duration: timedelta = BLOCK_DURATION,
) -> TranscriptScan:
    """Read the transcript once, reducing usage and collecting timestamps."""
    if not transcript_path:
        return TranscriptScan()

    reducer = UsageReducer()
    timestamps: list[datetime] = []

    try:
        # Undecodable bytes become U+FFFD rather than aborting the read
        with open(transcript_path, encoding="utf-8", errors="replace") as f:
            for entry in iter_entries(f):
                reducer.add(entry)
                if entry.timestamp is not None:
                    timestamps.append(entry.timestamp)
    except FileNotFoundError:
        logger.debug("Transcript %s does not exist yet", transcript_path)
        return TranscriptScan()
    except (OSError, ValueError) as exc:
        # ValueError: paths the OS can't represent, e.g. embedded NUL
        logger.warning("Failed to read transcript %s: %s", transcript_path, exc)
        return TranscriptScan()

    return TranscriptScan(
        token_metrics=reducer.metrics(),
        timestamps=timestamps,
        block_metrics=calculate_block_metrics(
            sorted(timestamps), now=now, block_duration=block_duration,
        ),
    )


class UsageReducer:
    """Running token totals plus the latest main-chain usage record.

    Every usage record counts toward the totals, side chains included. Only
    main-chain entries with a timestamp compete for "latest"; a strictly
    newer timestamp is required to replace the current winner, so the
    first of several identical timestamps wins.
    """

    def __init__(self):
        self.input_tokens = 0
        self.output_tokens = 0
        self.cache_read_tokens = 0
        self.cache_creation_tokens = 0
        self.latest_timestamp: datetime | None = None
        self.latest_usage: Usage | None = None

    def add(self, entry: TranscriptEntry) -> None:
        usage = entry.usage
        if usage is None:
            return

        self.input_tokens += usage.input_tokens
        self.output_tokens += usage.output_tokens
        self.cache_read_tokens += usage.cache_read_tokens
        self.cache_creation_tokens += usage.cache_creation_tokens

        if entry.is_sidechain or entry.timestamp is None:
            return
        if self.latest_timestamp is None or entry.timestamp > self.latest_timestamp:
            self.latest_timestamp = entry.timestamp
            self.latest_usage = usage

    def metrics(self) -> TokenMetrics:
        cached = self.cache_read_tokens + self.cache_creation_tokens
        context_length = self.latest_usage.context_tokens if self.latest_usage else 0
        return TokenMetrics(
            input_tokens=self.input_tokens,
            output_tokens=self.output_tokens,
            cached_tokens=cached,
            total_tokens=self.input_tokens + self.output_tokens + cached,
            context_length=context_length,
        )


def extract_timestamps(lines: Iterable[str]) -> list[datetime]:
    """Valid timestamps in the order they appear. Not sorted."""
    return [entry.timestamp for entry in iter_entries(lines) if entry.timestamp is not None]


def iter_entries(lines: Iterable[str]) -> Iterator[TranscriptEntry]:
    """Decode lines into entries, skipping every line that can't be decoded."""
    skipped = 0
    for line_number, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            continue
        try:
            entry = decode_entry(line)
        except MalformedLine as exc:
            skipped += 1
            logger.debug("Skipping transcript line %d: %s", line_number, exc)
            continue
        yield entry
    if skipped:
        logger.debug("Skipped %d malformed transcript lines", skipped)


def decode_entry(line: str) -> TranscriptEntry:
    """Decode one non-blank JSONL line.

    Raises MalformedLine when the line is not JSON or does not have the
    shape of a transcript entry. JSON null on an optional field counts as
    absent. An unparseable timestamp string leaves the entry valid with no
    timestamp.
    """
    try:
        data = json.loads(line)
    except (ValueError, RecursionError) as exc:
        # ValueError covers JSONDecodeError and over-long integer literals
        raise MalformedLine(f"invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise MalformedLine(f"expected an object, got {type(data).__name__}")

    raw_timestamp = data.get("timestamp")
    if raw_timestamp is not None and not isinstance(raw_timestamp, str):
        raise MalformedLine("timestamp is not a string")
    timestamp = parse_timestamp(raw_timestamp) if raw_timestamp else None
    if raw_timestamp and timestamp is None:
        logger.debug("Ignoring unparseable timestamp %r", raw_timestamp)

    is_sidechain = data.get("isSidechain")
    if is_sidechain is None:
        is_sidechain = False
    elif not isinstance(is_sidechain, bool):
        raise MalformedLine("isSidechain is not a boolean")

    return TranscriptEntry(
        timestamp=timestamp,
        is_sidechain=is_sidechain,
        usage=_decode_usage(data.get("message")),
    )


def _decode_usage(message: object) -> Usage | None:
    if message is None:
        return None
    if not isinstance(message, dict):
        raise MalformedLine("message is not an object")

    usage_data = message.get("usage")
    if usage_data is None:
        return None
    if not isinstance(usage_data, dict):
        raise MalformedLine("message.usage is not an object")

    usage = Usage()
    for json_field, attr in USAGE_FIELDS.items():
        value = usage_data.get(json_field)
        if value is None:
            continue
        # bool is an int subclass but never a token count
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise MalformedLine(f"{json_field} is not a non-negative integer")
        setattr(usage, attr, value)
    return usage


def parse_timestamp(value: object) -> datetime | None:
    """Parse an RFC 3339 timestamp into an aware datetime, or None."""
    if not isinstance(value, str) or not RFC3339_RE.fullmatch(value):
        return None
    # Handle Z suffix and a lowercase separator
    value = value[:10] + "T" + value[11:]
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    return parsed


def session_duration(timestamps: list[datetime]) -> timedelta | None:
    """Span between the first and last timestamp in file order."""
    if not timestamps:
        return None
    return timestamps[-1] - timestamps[0]
