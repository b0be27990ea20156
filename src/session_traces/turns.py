"""Reconstruct turn-structured conversations from raw session events.

Tool results arrive in later user events, often several events after the
``tool_use`` block they answer. Reconstruction therefore runs in two passes:

1. Collect every ``tool_result`` block in the stream into a table keyed by
   ``tool_use_id`` (a repeated id keeps the last result).
2. Fold the events into turns. Consecutive assistant events merge into one
   turn; a user event closes it. User events that only carry tool results
   never appear as turns.
"""

import logging
from enum import Enum

from .core import Turn, event_content, event_kind

logger = logging.getLogger(__name__)


class TurnState(Enum):
    """Whether a turn is currently being accumulated, and of which kind."""

    CLOSED = "closed"
    OPEN_USER = "open_user"
    OPEN_ASSISTANT = "open_assistant"


def is_tool_result_carrier(content) -> bool:
    """Return True if content is a block list made only of tool results."""
    if not isinstance(content, list):
        return False
    return all(isinstance(b, dict) and b.get("type") == "tool_result" for b in content)


def user_text(content) -> str:
    """Extract the displayable text of a user event, ignoring tool results."""
    if isinstance(content, str):
        return content
    if not isinstance(content, list):
        return ""

    parts = []
    for block in content:
        if isinstance(block, dict) and block.get("type") == "text":
            text = block.get("text", "")
            if isinstance(text, str):
                parts.append(text)
        elif isinstance(block, str):
            parts.append(block)
    return "\n".join(parts)


def build_tool_results(events: list[dict]) -> dict[str, object]:
    """Map each tool_use id to the content of its result, last one wins."""
    results = {}
    for event in events:
        if event_kind(event) != "user":
            continue
        content = event_content(event)
        if not isinstance(content, list):
            continue
        for block in content:
            if not isinstance(block, dict) or block.get("type") != "tool_result":
                continue
            tool_use_id = block.get("tool_use_id")
            if tool_use_id is not None:
                results[tool_use_id] = block.get("content")
    return results


class TurnBuilder:
    """Folds events into turns, one transition per event."""

    def __init__(self, tool_results: dict[str, object]):
        self.tool_results = tool_results
        self.state = TurnState.CLOSED
        self.turns: list[Turn] = []
        self._current: Turn | None = None

    def on_user(self, event: dict) -> None:
        content = event_content(event)
        if is_tool_result_carrier(content):
            return

        text = user_text(content)
        if not text.strip():
            return

        self.close()
        self._open(Turn(type="user", content=text, timestamp=event.get("timestamp")))
        self.close()

    def on_assistant(self, event: dict) -> None:
        message = event.get("message")
        if not isinstance(message, dict):
            return
        content = message.get("content")
        if not content:
            return

        if self.state is not TurnState.OPEN_ASSISTANT:
            self.close()
            self._open(Turn(type="assistant", timestamp=event.get("timestamp")))

        turn = self._current
        if turn.model is None and message.get("model"):
            turn.model = message["model"]
        # Usage is a cumulative snapshot; keep the latest.
        if message.get("usage"):
            turn.usage = message["usage"]

        if isinstance(content, list):
            blocks = content
        else:
            blocks = [{"type": "text", "text": content if isinstance(content, str) else str(content)}]

        for block in blocks:
            if not isinstance(block, dict):
                continue
            if block.get("type") == "tool_use":
                turn.blocks.append({**block, "result": self.tool_results.get(block.get("id"))})
            else:
                turn.blocks.append(dict(block))

    def close(self) -> None:
        """Emit the open turn, if any."""
        if self._current is not None:
            self.turns.append(self._current)
        self._current = None
        self.state = TurnState.CLOSED

    def _open(self, turn: Turn) -> None:
        self._current = turn
        self.state = TurnState.OPEN_USER if turn.type == "user" else TurnState.OPEN_ASSISTANT


def reconstruct(events: list[dict]) -> list[Turn]:
    """Turn a raw event stream into an ordered list of turns."""
    builder = TurnBuilder(build_tool_results(events))

    for event in events:
        kind = event_kind(event)
        if kind == "user":
            builder.on_user(event)
        elif kind == "assistant":
            builder.on_assistant(event)

    builder.close()
    logger.debug("Reconstructed %d turns from %d events", len(builder.turns), len(events))
    return builder.turns
