"""Shared test fixtures for cstatus tests."""

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixtures_dir():
    """Path to test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def sample_transcript():
    """Path to a transcript with main-chain, side-chain and malformed lines."""
    return FIXTURES_DIR / "transcript.jsonl"


@pytest.fixture
def fixture_now():
    """A wall clock one hour after sample_transcript's first entry."""
    return datetime(2026, 1, 1, 11, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def write_transcript(tmp_path):
    """Write dicts (as JSON) or raw strings to a JSONL file and return its path."""

    def _write(lines, name="transcript.jsonl"):
        path = tmp_path / name
        rendered = [line if isinstance(line, str) else json.dumps(line) for line in lines]
        path.write_text("\n".join(rendered) + "\n")
        return path

    return _write
