"""Unindexed full-text search over every session log.

Each search reads the whole corpus; there is no cache or prebuilt index.
Callers running it off the event loop can pass a ``threading.Event`` to stop
a scan early; it is checked before each session file is read.
"""

import json
import logging
import threading

from .core import SessionMatch
from .store import EventStore, ResourceNotFound, decode_project_id
from .summary import extract_summary

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
MAX_RESULTS = 50


class SearchCancelled(Exception):
    """The search was cancelled before it finished."""


def event_matches(event: dict, query: str) -> bool:
    """Case-insensitive substring test against the serialized event.

    ``query`` must already be lowercase.
    """
    text = json.dumps(event, ensure_ascii=False, separators=(",", ":"))
    return query in text.lower()


def search(
    query: str,
    store: EventStore,
    cancel: threading.Event | None = None,
    limit: int = MAX_RESULTS,
) -> list[SessionMatch]:
    """Return sessions containing ``query``, in traversal order, at most ``limit``."""
    query = (query or "").lower()
    if len(query) < MIN_QUERY_LENGTH:
        return []

    results = []
    for project_id, session_id in store.iter_sessions():
        if cancel is not None and cancel.is_set():
            logger.info("Search for %r cancelled after %d matches", query, len(results))
            raise SearchCancelled(query)

        try:
            events = store.read_session(project_id, session_id)
        except ResourceNotFound:
            logger.debug("Session %s/%s vanished during search", project_id, session_id)
            continue
        match_count = sum(1 for e in events if event_matches(e, query))
        if match_count:
            results.append(SessionMatch(
                project_id=project_id,
                project_path=decode_project_id(project_id),
                session_id=session_id,
                match_count=match_count,
                summary=extract_summary(events),
            ))
            if len(results) >= limit:
                break

    return results
