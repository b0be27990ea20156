"""Link a parent session to the sub-agent logs stored beside it."""

import logging
import re

from .core import Agent, AgentLog, event_content, event_kind
from .summary import extract_summary

logger = logging.getLogger(__name__)

_AGENT_ID_RE = re.compile(r"agentId:\s*([a-f0-9-]+)", re.IGNORECASE)


def extract_agent_id(text) -> str | None:
    """Return the id from an "agentId: <hex-with-dashes>" mention, if any."""
    if not isinstance(text, str):
        return None
    match = _AGENT_ID_RE.search(text)
    return match.group(1) if match else None


def mentioned_agent_ids(events: list[dict]) -> set[str]:
    """Collect agent ids mentioned in string tool results of user events."""
    ids = set()
    for event in events:
        if event_kind(event) != "user":
            continue
        content = event_content(event)
        if not isinstance(content, list):
            continue
        for block in content:
            if isinstance(block, dict) and block.get("type") == "tool_result":
                agent_id = extract_agent_id(block.get("content"))
                if agent_id:
                    ids.add(agent_id)
    return ids


def link_agents(parent_events: list[dict], agent_logs: list[AgentLog]) -> list[Agent]:
    """Describe every sub-agent log, flagging the ones the parent mentions.

    All logs are returned whether or not the parent mentions them; the
    ``linked`` flag carries the match.
    """
    mentioned = mentioned_agent_ids(parent_events)
    logger.debug("Parent session mentions %d agent ids", len(mentioned))

    return [
        Agent(
            id=log.id,
            filename=log.filename,
            message_count=len(log.events),
            summary=extract_summary(log.events),
            modified=log.modified,
            linked=log.id in mentioned,
        )
        for log in agent_logs
    ]
