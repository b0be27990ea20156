"""Event store backends."""

from pathlib import Path

from ..config import get_projects_path
from ..store import EventStore
from .filesystem import FileEventStore


def get_event_store(root: Path | None = None) -> EventStore:
    """Return the on-disk store rooted at ``root`` or the configured projects path."""
    return FileEventStore(root if root is not None else get_projects_path())


__all__ = ["FileEventStore", "get_event_store"]
