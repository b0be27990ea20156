"""Tests for sub-agent linking and log summaries."""

from datetime import datetime, timezone

import pytest

from session_traces.agents import extract_agent_id, link_agents, mentioned_agent_ids
from session_traces.core import AgentLog
from session_traces.summary import NO_SUMMARY, extract_summary

NOW = datetime(2025, 1, 20, tzinfo=timezone.utc)


class TestExtractAgentId:
    @pytest.mark.parametrize("text,expected", [
        ("agentId: a1b2c3d4-0001", "a1b2c3d4-0001"),
        ("Done.\nAGENTID:ffff", "ffff"),
        ("agentid:   abc-def trailing", "abc-def"),
        ("no id here", None),
        ("agentId: zzzz", None),
        ("", None),
        (None, None),
        ([{"type": "text", "text": "agentId: abcd"}], None),
    ])
    def test_extract(self, text, expected):
        assert extract_agent_id(text) == expected


class TestLinkAgents:
    def test_mentioned_ids_from_string_results(self, session_events):
        assert mentioned_agent_ids(session_events) == {"a1b2c3d4-0001"}

    def test_all_logs_returned_and_flagged(self, session_events):
        logs = [
            AgentLog(id="a1b2c3d4-0001", filename="agent-a1b2c3d4-0001.jsonl", events=[
                {"type": "user", "message": {"content": "Write auth tests"}},
                {"type": "assistant", "message": {"content": "ok"}},
            ], modified=NOW),
            AgentLog(id="ffff0000", filename="agent-ffff0000.jsonl", events=[], modified=NOW),
        ]
        agents = link_agents(session_events, logs)

        assert [a.id for a in agents] == ["a1b2c3d4-0001", "ffff0000"]
        assert agents[0].linked is True
        assert agents[0].message_count == 2
        assert agents[0].summary == "Write auth tests"
        assert agents[1].linked is False
        assert agents[1].summary == NO_SUMMARY

    def test_no_logs(self, session_events):
        assert link_agents(session_events, []) == []


class TestExtractSummary:
    def test_prefers_summary_event(self):
        events = [
            {"type": "user", "message": {"content": "first prompt"}},
            {"type": "summary", "summary": "The summary"},
        ]
        assert extract_summary(events) == "The summary"

    def test_falls_back_to_first_user_string(self):
        assert extract_summary([{"type": "user", "message": {"content": "first prompt"}}]) == "first prompt"

    def test_falls_back_to_first_block_text(self):
        events = [{"type": "user", "message": {"content": [{"type": "text", "text": "block prompt"}]}}]
        assert extract_summary(events) == "block prompt"

    def test_first_block_without_text_is_empty(self):
        events = [{"type": "user", "message": {"content": [{"type": "tool_result", "tool_use_id": "t", "content": "x"}]}}]
        assert extract_summary(events) == ""

    def test_truncated_to_200(self):
        assert len(extract_summary([{"type": "summary", "summary": "x" * 500}])) == 200
        assert len(extract_summary([{"type": "user", "message": {"content": "y" * 500}}])) == 200

    def test_placeholder(self):
        assert extract_summary([]) == NO_SUMMARY
        assert extract_summary([{"type": "assistant", "message": {"content": "hi"}}]) == NO_SUMMARY
