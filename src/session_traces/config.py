"""Environment-driven settings for session-traces."""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3847
DEFAULT_SEARCH_TIMEOUT = 30.0


def get_projects_path() -> Path:
    """Return the root directory holding one subdirectory per project."""
    env = os.environ.get("TRACES_CLAUDE_PATH")
    if env:
        return Path(env)

    return Path.home() / ".claude" / "projects"


def get_port() -> int:
    """Return the default port to serve on."""
    env = os.environ.get("PORT")
    if env:
        try:
            return int(env)
        except ValueError:
            logger.warning("Ignoring non-numeric PORT=%r", env)
    return DEFAULT_PORT


def get_search_timeout() -> float:
    """Return the per-request search timeout in seconds."""
    env = os.environ.get("TRACES_SEARCH_TIMEOUT")
    if env:
        try:
            value = float(env)
            if value > 0:
                return value
        except ValueError:
            pass
        logger.warning("Ignoring invalid TRACES_SEARCH_TIMEOUT=%r", env)
    return DEFAULT_SEARCH_TIMEOUT
