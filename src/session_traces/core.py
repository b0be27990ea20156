"""Core data models for session-traces.

Raw events are kept as the plain dicts parsed from JSONL. Everything here is
derived from them and recomputed on every access.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class Project:
    """A directory of session logs, keyed by its encoded filesystem path."""

    id: str  # e.g. "-Users-alice-dev-webapp"
    path: str  # decoded, e.g. "/Users/alice/dev/webapp"
    name: str
    last_modified: datetime


@dataclass
class SessionInfo:
    """Listing entry for one session log."""

    id: str
    filename: str
    modified: datetime
    message_count: int  # raw event count
    summary: str
    subagent_count: int = 0


@dataclass
class AgentLog:
    """A sub-agent log file as read from disk."""

    id: str
    filename: str
    events: list[dict]
    modified: datetime


@dataclass
class Agent:
    """A sub-agent session linked below a parent session."""

    id: str
    filename: str
    message_count: int
    summary: str
    modified: datetime
    linked: bool = False  # id was mentioned in a parent tool result


@dataclass
class Turn:
    """One reconstructed conversational step."""

    type: str  # "user" | "assistant"
    content: str = ""  # user turns only
    blocks: list[dict] = field(default_factory=list)  # assistant turns only
    model: Optional[str] = None
    usage: Optional[dict] = None
    timestamp: Optional[str] = None


@dataclass
class TokenTotals:
    input: int = 0
    output: int = 0
    cached: int = 0


@dataclass
class FileAccess:
    read: set[str] = field(default_factory=set)
    write: set[str] = field(default_factory=set)
    edit: set[str] = field(default_factory=set)


@dataclass
class SessionStats:
    """Session-level analytics."""

    duration: int  # milliseconds
    tokens: TokenTotals
    files: FileAccess
    tools: dict[str, int]
    message_count: int
    model: Optional[str]
    cost: float


@dataclass
class SessionMatch:
    """A session containing at least one event matching a search query."""

    project_id: str
    project_path: str
    session_id: str
    match_count: int
    summary: str


def event_kind(event: dict) -> str:
    """Return the event type, folding the legacy "human" type into "user"."""
    kind = event.get("type", "")
    return "user" if kind == "human" else kind


def event_content(event: dict):
    """Return ``message.content`` of an event: a string, a list of blocks, or None."""
    message = event.get("message")
    if not isinstance(message, dict):
        return None
    return message.get("content")


def parse_iso(value) -> datetime | None:
    """Parse an ISO 8601 datetime string."""
    if not value or not isinstance(value, str):
        return None
    try:
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.fromisoformat(value)
    except (ValueError, TypeError):
        return None
