"""Host input parsing — turns the stdin JSON into a StatusContext."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path

from cstatus.config import CstatusConfig
from cstatus.git import get_git_branch, has_git_changes
from cstatus.models import (
    CostInfo,
    ModelInfo,
    StatusContext,
    StatusInput,
    Workspace,
)
from cstatus.transcript import scan_transcript, session_duration


class StatusInputError(Exception):
    """The host's stdin payload can't be used to build a statusline."""


def _str(data: dict, key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


def _number(data: dict, key: str, kind: type):
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return kind(0)
    try:
        return kind(value)
    except (OverflowError, ValueError):
        # int() of inf or nan
        return kind(0)


def _object(data: dict, key: str) -> dict:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def parse_status_input(raw: str) -> StatusInput:
    """Parse the host's JSON payload, filling in defaults for missing fields."""
    if not raw or not raw.strip():
        raise StatusInputError("no input received")
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as exc:
        raise StatusInputError(f"invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise StatusInputError(f"invalid JSON: expected an object, got {type(data).__name__}")

    model_data = _object(data, "model")
    workspace_data = _object(data, "workspace")
    cost_data = _object(data, "cost")

    cwd = _str(data, "cwd")
    if not cwd:
        try:
            cwd = os.getcwd()
        except OSError:
            cwd = ""

    return StatusInput(
        hook_event_name=_str(data, "hook_event_name"),
        session_id=_str(data, "session_id"),
        transcript_path=_str(data, "transcript_path"),
        cwd=cwd,
        model=ModelInfo(
            id=_str(model_data, "id") or "unknown",
            display_name=_str(model_data, "display_name") or "Unknown Model",
        ),
        workspace=Workspace(
            current_dir=_str(workspace_data, "current_dir"),
            project_dir=_str(workspace_data, "project_dir"),
        ),
        version=_str(data, "version") or "unknown",
        output_style=_str(_object(data, "output_style"), "name") or "default",
        cost=CostInfo(
            total_cost_usd=_number(cost_data, "total_cost_usd", float),
            total_duration_ms=_number(cost_data, "total_duration_ms", int),
            total_api_duration_ms=_number(cost_data, "total_api_duration_ms", int),
            total_lines_added=_number(cost_data, "total_lines_added", int),
            total_lines_removed=_number(cost_data, "total_lines_removed", int),
        ),
    )


def working_dir_for(status: StatusInput) -> str:
    return status.workspace.current_dir or status.cwd


def project_name_for(status: StatusInput) -> str:
    """Base name of the first known directory: project, current, cwd."""
    for directory in (status.workspace.project_dir, status.workspace.current_dir, status.cwd):
        if directory:
            return Path(directory).name
    return ""


def build_context(
    status: StatusInput, config: CstatusConfig, now: datetime | None = None,
) -> StatusContext:
    """Read the transcript and query git to assemble the render context."""
    if now is None:
        now = datetime.now(tz=timezone.utc)

    scan = scan_transcript(
        status.transcript_path, now=now, block_duration=config.block_duration,
    )
    working_dir = working_dir_for(status)
    git_branch = get_git_branch(working_dir, timeout=config.git_timeout)
    # No branch means no repo (or detached HEAD); skip the second git call
    git_has_changes = (
        has_git_changes(working_dir, timeout=config.git_timeout) if git_branch else False
    )

    return StatusContext(
        status=status,
        token_metrics=scan.token_metrics,
        block_metrics=scan.block_metrics,
        session_duration=session_duration(scan.timestamps),
        working_dir=working_dir,
        project_name=project_name_for(status),
        git_branch=git_branch,
        git_has_changes=git_has_changes,
        context_window=config.context_window,
        now=now,
    )
