"""Tests for host input parsing and context building."""

from __future__ import annotations

import json
import os
from datetime import datetime, timedelta, timezone

import pytest

from cstatus.config import load_config
from cstatus.models import StatusInput, TokenMetrics, Workspace
from cstatus.status import (
    StatusInputError,
    build_context,
    parse_status_input,
    project_name_for,
    working_dir_for,
)

SAMPLE_INPUT = {
    "hook_event_name": "Status",
    "session_id": "session-001",
    "transcript_path": "/tmp/transcript.jsonl",
    "cwd": "/test/path",
    "model": {"id": "claude-opus-4-1", "display_name": "Opus"},
    "workspace": {"current_dir": "/test/current", "project_dir": "/test/project"},
    "version": "1.0.80",
    "output_style": {"name": "default"},
    "cost": {
        "total_cost_usd": 1.23,
        "total_duration_ms": 45000,
        "total_api_duration_ms": 2300,
        "total_lines_added": 156,
        "total_lines_removed": 23,
    },
}


@pytest.fixture
def no_git(monkeypatch):
    calls = []

    def _branch(working_dir, timeout):
        calls.append(("branch", working_dir))
        return ""

    def _changes(working_dir, timeout):
        calls.append(("changes", working_dir))
        return False

    monkeypatch.setattr("cstatus.status.get_git_branch", _branch)
    monkeypatch.setattr("cstatus.status.has_git_changes", _changes)
    return calls


class TestParseStatusInput:
    def test_full_input(self):
        status = parse_status_input(json.dumps(SAMPLE_INPUT))
        assert status.session_id == "session-001"
        assert status.transcript_path == "/tmp/transcript.jsonl"
        assert status.model.display_name == "Opus"
        assert status.model.id == "claude-opus-4-1"
        assert status.workspace.project_dir == "/test/project"
        assert status.version == "1.0.80"
        assert status.cost.total_cost_usd == 1.23
        assert status.cost.total_lines_added == 156

    def test_defaults_for_missing_fields(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        status = parse_status_input("{}")
        assert status.model.display_name == "Unknown Model"
        assert status.model.id == "unknown"
        assert status.version == "unknown"
        assert status.output_style == "default"
        assert status.cwd == os.getcwd()
        assert status.transcript_path == ""
        assert status.cost.total_cost_usd == 0.0

    def test_wrong_types_fall_back_to_defaults(self):
        status = parse_status_input(
            json.dumps({"cwd": "/x", "model": "opus", "cost": {"total_cost_usd": "lots"}})
        )
        assert status.model.display_name == "Unknown Model"
        assert status.cost.total_cost_usd == 0.0

    @pytest.mark.parametrize("raw", ["", "   \n"])
    def test_empty_input(self, raw):
        with pytest.raises(StatusInputError, match="no input received"):
            parse_status_input(raw)

    @pytest.mark.parametrize("raw", ["{oops", "[1, 2]", "null"])
    def test_invalid_json(self, raw):
        with pytest.raises(StatusInputError, match="invalid JSON"):
            parse_status_input(raw)


class TestDirectories:
    def test_working_dir_prefers_current_dir(self):
        status = parse_status_input(json.dumps(SAMPLE_INPUT))
        assert working_dir_for(status) == "/test/current"

    def test_working_dir_falls_back_to_cwd(self):
        status = StatusInput(cwd="/test/path")
        assert working_dir_for(status) == "/test/path"

    def test_project_name_from_project_dir(self):
        status = parse_status_input(json.dumps(SAMPLE_INPUT))
        assert project_name_for(status) == "project"

    def test_project_name_falls_back_to_current_dir(self):
        status = StatusInput(cwd="/a/b", workspace=Workspace(current_dir="/test/current/"))
        assert project_name_for(status) == "current"

    def test_project_name_falls_back_to_cwd(self):
        assert project_name_for(StatusInput(cwd="/a/b")) == "b"

    def test_project_name_empty(self):
        assert project_name_for(StatusInput(cwd="")) == ""


class TestBuildContext:
    def test_with_transcript(self, sample_transcript, fixture_now, tmp_path, no_git):
        config = load_config(config_path=tmp_path / "nonexistent.yaml")
        status = StatusInput(cwd="/work/my-project", transcript_path=str(sample_transcript))

        ctx = build_context(status, config, now=fixture_now)

        assert ctx.token_metrics.context_length == 3300
        assert ctx.block_metrics.start_time == datetime(2026, 1, 1, 10, tzinfo=timezone.utc)
        assert ctx.session_duration == timedelta(seconds=119)
        assert ctx.project_name == "my-project"
        assert ctx.working_dir == "/work/my-project"
        assert ctx.context_window == 200_000
        assert ctx.now == fixture_now

    def test_without_transcript(self, tmp_path, no_git):
        config = load_config(config_path=tmp_path / "nonexistent.yaml")
        ctx = build_context(StatusInput(cwd="/x"), config)
        assert ctx.token_metrics == TokenMetrics()
        assert ctx.block_metrics is None
        assert ctx.session_duration is None
        assert ctx.now is not None

    def test_skips_changes_query_without_branch(self, tmp_path, no_git):
        config = load_config(config_path=tmp_path / "nonexistent.yaml")
        build_context(StatusInput(cwd="/x"), config)
        assert no_git == [("branch", "/x")]

    def test_git_state(self, tmp_path, monkeypatch):
        monkeypatch.setattr("cstatus.status.get_git_branch", lambda d, timeout: "main")
        monkeypatch.setattr("cstatus.status.has_git_changes", lambda d, timeout: True)
        config = load_config(config_path=tmp_path / "nonexistent.yaml")
        ctx = build_context(StatusInput(cwd="/x"), config)
        assert ctx.git_branch == "main"
        assert ctx.git_has_changes is True
