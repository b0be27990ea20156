"""Session-level analytics: duration, token usage, cost, files and tools."""

import re
from datetime import timedelta

from .core import FileAccess, SessionStats, TokenTotals, Turn, parse_iso

# USD per million tokens
PRICING = {
    "opus": {"input": 15.0, "output": 75.0, "cached": 1.5},
    "sonnet": {"input": 3.0, "output": 15.0, "cached": 0.3},
    "haiku": {"input": 0.25, "output": 1.25, "cached": 0.03},
}

FILE_TOOLS = {"Read": "read", "Write": "write", "Edit": "edit"}

_MODEL_RE = re.compile(r"claude-([a-z]+)-(\d+)(?:-(\d{1,2})(?!\d))?")


def pricing_tier(model: str | None) -> str:
    """Pick a pricing tier by substring match on the model id."""
    if model and "opus" in model:
        return "opus"
    if model and "haiku" in model:
        return "haiku"
    return "sonnet"


def estimate_cost(tokens: TokenTotals, model: str | None) -> float:
    """Estimate the USD cost of a token total under the model's tier."""
    p = PRICING[pricing_tier(model)]
    return (
        tokens.input * p["input"] + tokens.output * p["output"] + tokens.cached * p["cached"]
    ) / 1_000_000


def _duration_ms(events: list[dict]) -> int:
    if not events:
        return 0
    start = parse_iso(events[0].get("timestamp"))
    end = parse_iso(events[-1].get("timestamp"))
    if start is None or end is None:
        return 0
    try:
        delta = end - start
    except TypeError:  # naive vs aware
        return 0
    return max(0, delta // timedelta(milliseconds=1))


def _count(usage: dict, key: str) -> int:
    value = usage.get(key) or 0
    return value if isinstance(value, (int, float)) else 0


def _tool_uses(turns: list[Turn]):
    for turn in turns:
        for block in turn.blocks:
            if block.get("type") == "tool_use":
                yield block


def analyze(events: list[dict], turns: list[Turn]) -> SessionStats:
    """Compute session statistics from raw events and their reconstructed turns."""
    tokens = TokenTotals()
    model = None
    for turn in turns:
        if turn.usage:
            tokens.input += _count(turn.usage, "input_tokens")
            tokens.output += _count(turn.usage, "output_tokens")
            # cache_creation_input_tokens is not part of the aggregate
            tokens.cached += _count(turn.usage, "cache_read_input_tokens")
        if turn.model and not model:
            model = turn.model

    files = FileAccess()
    tools: dict[str, int] = {}
    for block in _tool_uses(turns):
        name = block.get("name")
        tools[name] = tools.get(name, 0) + 1

        category = FILE_TOOLS.get(name)
        tool_input = block.get("input")
        if category and isinstance(tool_input, dict) and tool_input.get("file_path"):
            getattr(files, category).add(tool_input["file_path"])

    return SessionStats(
        duration=_duration_ms(events),
        tokens=tokens,
        files=files,
        tools=tools,
        message_count=sum(1 for t in turns if t.type == "user"),
        model=model,
        cost=estimate_cost(tokens, model),
    )


def turn_tokens(usage: dict | None) -> dict | None:
    """Per-turn token breakdown for display.

    Unlike the session aggregate, ``cached`` here counts cache reads and
    cache writes together.
    """
    if not usage:
        return None
    input_tokens = _count(usage, "input_tokens")
    output_tokens = _count(usage, "output_tokens")
    cached = _count(usage, "cache_read_input_tokens") + _count(usage, "cache_creation_input_tokens")
    return {
        "input": input_tokens,
        "output": output_tokens,
        "cached": cached,
        "total": input_tokens + output_tokens,
    }


def format_duration(ms: int) -> str:
    """Render a millisecond duration as "1h 5m", "3m 20s" or "42s"."""
    if not ms:
        return "-"
    s = ms // 1000
    m = s // 60
    h = m // 60
    if h > 0:
        return f"{h}h {m % 60}m"
    if m > 0:
        return f"{m}m {s % 60}s"
    return f"{s}s"


def format_model(model: str | None) -> str | None:
    """Shorten a model id: "claude-opus-4-5-20251101" -> "Opus 4.5"."""
    if not model:
        return None
    match = _MODEL_RE.search(model)
    if match:
        name, major, minor = match.groups()
        version = f"{major}.{minor}" if minor else major
        return f"{name.capitalize()} {version}"
    return model.replace("claude-", "").split("-")[0]
