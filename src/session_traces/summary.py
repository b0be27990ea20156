"""Short summaries for session and sub-agent logs."""

from .core import event_content, event_kind

SUMMARY_LENGTH = 200
NO_SUMMARY = "No summary"


def extract_summary(events: list[dict]) -> str:
    """Summarize a log in at most 200 characters.

    Prefers the text of the first ``summary`` event, then the first user
    event's text (plain string or first block), then "No summary".
    """
    summary_event = next((e for e in events if event_kind(e) == "summary"), None)
    if summary_event is not None:
        text = summary_event.get("summary")
        if text and isinstance(text, str):
            return text[:SUMMARY_LENGTH]

    first_user = next((e for e in events if event_kind(e) == "user"), None)
    if first_user is not None:
        content = event_content(first_user)
        if content:
            if isinstance(content, str):
                return content[:SUMMARY_LENGTH]
            if isinstance(content, list):
                first = content[0]
                text = first.get("text") if isinstance(first, dict) else None
                return (text if isinstance(text, str) else "")[:SUMMARY_LENGTH]

    return NO_SUMMARY
