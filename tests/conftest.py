"""Shared test fixtures for session-traces."""

import json
import os
from datetime import datetime, timezone

import pytest

from session_traces.backends.filesystem import FileEventStore


def _write_jsonl(path, entries, extra_lines=()):
    lines = [json.dumps(e) for e in entries]
    lines.extend(extra_lines)
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def _set_mtime(path, dt):
    ts = dt.timestamp()
    os.utime(path, (ts, ts))


@pytest.fixture
def session_events():
    """A session with a tool round-trip, thinking, a Task sub-agent and a summary."""
    return [
        {
            "type": "summary",
            "summary": "Refactored auth module into separate files",
        },
        {
            "type": "user",
            "message": {"role": "user", "content": "Help me refactor the auth module"},
            "timestamp": "2025-01-20T10:00:00Z",
            "uuid": "uuid-001",
        },
        {
            "type": "assistant",
            "message": {
                "role": "assistant",
                "model": "claude-opus-4-5-20251101",
                "content": [
                    {"type": "text", "text": "Let me look at the current auth module."},
                    {"type": "tool_use", "id": "toolu_001", "name": "Read", "input": {"file_path": "/src/auth.ts"}},
                ],
                "usage": {"input_tokens": 100, "output_tokens": 20, "cache_read_input_tokens": 5},
            },
            "timestamp": "2025-01-20T10:00:05Z",
            "uuid": "uuid-002",
        },
        {
            "type": "user",
            "message": {"role": "user", "content": [
                {"type": "tool_result", "tool_use_id": "toolu_001", "content": "export function authenticate() {}"},
            ]},
            "timestamp": "2025-01-20T10:00:06Z",
            "uuid": "uuid-003",
        },
        {
            "type": "assistant",
            "message": {
                "role": "assistant",
                "model": "claude-opus-4-5-20251101",
                "content": [
                    {"type": "thinking", "thinking": "Split validation from token refresh."},
                    {"type": "tool_use", "id": "toolu_002", "name": "Edit", "input": {"file_path": "/src/auth.ts", "old_string": "a", "new_string": "b"}},
                    {"type": "tool_use", "id": "toolu_003", "name": "Task", "input": {"description": "Write auth tests", "prompt": "..."}},
                ],
                "usage": {"input_tokens": 300, "output_tokens": 80, "cache_read_input_tokens": 50, "cache_creation_input_tokens": 1000},
            },
            "timestamp": "2025-01-20T10:01:00Z",
            "uuid": "uuid-004",
        },
        {
            "type": "user",
            "message": {"role": "user", "content": [
                {"type": "tool_result", "tool_use_id": "toolu_002", "content": "File edited successfully"},
                {"type": "tool_result", "tool_use_id": "toolu_003", "content": "Tests written.\nagentId: a1b2c3d4-0001"},
            ]},
            "timestamp": "2025-01-20T10:01:30Z",
            "uuid": "uuid-005",
        },
        {
            "type": "user",
            "message": {"role": "user", "content": [{"type": "text", "text": "Looks good, now split it into separate files"}]},
            "timestamp": "2025-01-20T10:05:00Z",
            "uuid": "uuid-006",
        },
        {
            "type": "assistant",
            "message": {
                "role": "assistant",
                "model": "claude-opus-4-5-20251101",
                "content": [
                    {"type": "tool_use", "id": "toolu_004", "name": "Write", "input": {"file_path": "/src/auth/validate.ts", "content": "..."}},
                ],
                "usage": {"input_tokens": 50, "output_tokens": 10},
            },
            "timestamp": "2025-01-20T10:05:30Z",
            "uuid": "uuid-007",
        },
        {
            "type": "assistant",
            "message": {
                "role": "assistant",
                "model": "claude-opus-4-5-20251101",
                "content": [{"type": "text", "text": "Done."}],
                "usage": {"input_tokens": 60, "output_tokens": 15},
            },
            "timestamp": "2025-01-20T10:06:00Z",
            "uuid": "uuid-008",
        },
    ]


@pytest.fixture
def tmp_projects_dir(tmp_path, session_events):
    """Create a synthetic projects tree with two projects and two sub-agents."""
    projects = tmp_path / "projects"

    myapp = projects / "-Users-testuser-dev-myapp"
    (myapp / "subagents").mkdir(parents=True)

    _write_jsonl(myapp / "session-001.jsonl", session_events, extra_lines=["{not valid json"])
    _set_mtime(myapp / "session-001.jsonl", datetime(2025, 1, 20, 10, 6, tzinfo=timezone.utc))

    _write_jsonl(myapp / "session-002.jsonl", [
        {
            "type": "user",
            "message": {"role": "user", "content": "Write tests for the API"},
            "timestamp": "2025-01-21T09:00:00Z",
        },
        {
            "type": "assistant",
            "message": {"role": "assistant", "model": "claude-sonnet-4-20250514", "content": [
                {"type": "text", "text": "Sure, starting with the users endpoint."},
            ]},
            "timestamp": "2025-01-21T09:00:10Z",
        },
    ])
    _set_mtime(myapp / "session-002.jsonl", datetime(2025, 1, 21, 9, 0, 10, tzinfo=timezone.utc))

    _write_jsonl(myapp / "subagents" / "agent-a1b2c3d4-0001.jsonl", [
        {
            "type": "user",
            "message": {"role": "user", "content": "Write auth tests"},
            "timestamp": "2025-01-20T10:01:05Z",
        },
        {
            "type": "assistant",
            "message": {"role": "assistant", "model": "claude-haiku-4-5", "content": [
                {"type": "text", "text": "Writing tests."},
            ], "usage": {"input_tokens": 1000, "output_tokens": 200}},
            "timestamp": "2025-01-20T10:01:25Z",
        },
    ])
    _write_jsonl(myapp / "subagents" / "agent-ffff0000.jsonl", [
        {"type": "summary", "summary": "Unrelated exploration"},
    ])

    api = projects / "-Users-testuser-dev-api"
    api.mkdir(parents=True)
    _write_jsonl(api / "session-003.jsonl", [
        {
            "type": "user",
            "message": {"role": "user", "content": [{"type": "text", "text": "Why does the uniquephrase endpoint fail?"}]},
            "timestamp": "2025-01-22T08:00:00Z",
        },
    ])
    _set_mtime(api / "session-003.jsonl", datetime(2025, 1, 22, 8, 0, tzinfo=timezone.utc))
    (api / ".hidden.jsonl").write_text("{}\n", encoding="utf-8")

    # Stray file at the root is not a project
    (projects / "README.txt").write_text("not a project", encoding="utf-8")

    return projects


@pytest.fixture
def store(tmp_projects_dir):
    return FileEventStore(tmp_projects_dir)
