"""Shared data models — the contract between transcript, status, and widgets.

The transcript module produces TokenMetrics and BlockMetrics. The status
module wraps them, together with the host's input, into a StatusContext.
Widgets consume StatusContext objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta


@dataclass
class Usage:
    """Token counts from one transcript line's message.usage record."""

    input_tokens: int = 0
    output_tokens: int = 0
    cache_read_tokens: int = 0
    cache_creation_tokens: int = 0

    @property
    def context_tokens(self) -> int:
        # Output tokens are not part of the input context window
        return self.input_tokens + self.cache_read_tokens + self.cache_creation_tokens


@dataclass
class TranscriptEntry:
    """A single decoded JSONL transcript line."""

    timestamp: datetime | None
    is_sidechain: bool = False
    usage: Usage | None = None


@dataclass(frozen=True)
class TokenMetrics:
    """Token totals for a whole transcript.

    The all-zero value means "no data yet".
    """

    input_tokens: int = 0
    output_tokens: int = 0
    cached_tokens: int = 0  # cache read + cache creation
    total_tokens: int = 0
    context_length: int = 0  # latest main-chain entry only


@dataclass(frozen=True)
class BlockMetrics:
    """The active 5-hour usage block.

    Absent (None) when there is no recent activity.
    """

    start_time: datetime
    last_activity: datetime


@dataclass
class TranscriptScan:
    """Everything a single pass over a transcript produces."""

    token_metrics: TokenMetrics = field(default_factory=TokenMetrics)
    timestamps: list[datetime] = field(default_factory=list)  # file order
    block_metrics: BlockMetrics | None = None


@dataclass
class ModelInfo:
    id: str = "unknown"
    display_name: str = "Unknown Model"


@dataclass
class Workspace:
    current_dir: str = ""
    project_dir: str = ""


@dataclass
class CostInfo:
    total_cost_usd: float = 0.0
    total_duration_ms: int = 0
    total_api_duration_ms: int = 0
    total_lines_added: int = 0
    total_lines_removed: int = 0


@dataclass
class StatusInput:
    """The JSON object the host writes to stdin on every refresh."""

    hook_event_name: str = ""
    session_id: str = ""
    transcript_path: str = ""
    cwd: str = ""
    model: ModelInfo = field(default_factory=ModelInfo)
    workspace: Workspace = field(default_factory=Workspace)
    version: str = "unknown"
    output_style: str = "default"
    cost: CostInfo = field(default_factory=CostInfo)


@dataclass
class StatusContext:
    """Everything a widget may render from.

    Produced by status.build_context, consumed by widgets.
    """

    status: StatusInput
    token_metrics: TokenMetrics = field(default_factory=TokenMetrics)
    block_metrics: BlockMetrics | None = None
    session_duration: timedelta | None = None
    working_dir: str = ""
    project_name: str = ""
    git_branch: str = ""
    git_has_changes: bool = False
    context_window: int = 200_000
    now: datetime | None = None
