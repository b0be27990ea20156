"""FastAPI web server for session-traces."""

import asyncio
import functools
import logging
import threading

from fastapi import FastAPI, HTTPException, Query

from .agents import link_agents
from .analytics import analyze, format_duration, format_model, turn_tokens
from .backends import get_event_store
from .config import get_search_timeout
from .core import Agent, Project, SessionInfo, SessionMatch, SessionStats, Turn
from .search import search
from .store import EventStore, ResourceNotFound, SessionNotFound
from .turns import reconstruct

logger = logging.getLogger(__name__)

app = FastAPI(title="session-traces", version="0.1.0")

# Event store (resolved from config on first request unless set explicitly)
_store: EventStore | None = None


def _get_store() -> EventStore:
    """Lazily initialize and cache the event store."""
    global _store
    if _store is None:
        _store = get_event_store()
        logger.info("Reading session logs from %s", _store.get_base_path())
    return _store


def set_event_store(store: EventStore | None) -> None:
    """Serve from ``store`` instead of the configured projects path."""
    global _store
    _store = store


def _load(what: str, loader, *args):
    """Call a store method, mapping missing resources to 404 and I/O errors to 500."""
    try:
        return loader(*args)
    except ResourceNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except OSError as e:
        logger.error("Failed to read %s %s: %s", what, args, e)
        raise HTTPException(status_code=500, detail=f"Failed to read {what}")


def _project_to_dict(project: Project) -> dict:
    return {
        "id": project.id,
        "path": project.path,
        "name": project.name,
        "lastModified": project.last_modified.isoformat(),
    }


def _session_to_dict(session: SessionInfo) -> dict:
    return {
        "id": session.id,
        "filename": session.filename,
        "modified": session.modified.isoformat(),
        "messageCount": session.message_count,
        "summary": session.summary,
        "subagentCount": session.subagent_count,
    }


def _agent_to_dict(agent: Agent) -> dict:
    return {
        "id": agent.id,
        "filename": agent.filename,
        "messageCount": agent.message_count,
        "summary": agent.summary,
        "modified": agent.modified.isoformat(),
        "linked": agent.linked,
    }


def _turn_to_dict(turn: Turn) -> dict:
    if turn.type == "user":
        return {"type": "user", "content": turn.content, "timestamp": turn.timestamp}
    return {
        "type": "assistant",
        "blocks": turn.blocks,
        "model": turn.model,
        "usage": turn.usage,
        "tokens": turn_tokens(turn.usage),
        "timestamp": turn.timestamp,
    }


def _stats_to_dict(stats: SessionStats) -> dict:
    return {
        "duration": stats.duration,
        "durationLabel": format_duration(stats.duration),
        "tokens": {
            "input": stats.tokens.input,
            "output": stats.tokens.output,
            "cached": stats.tokens.cached,
        },
        "files": {
            "read": sorted(stats.files.read),
            "write": sorted(stats.files.write),
            "edit": sorted(stats.files.edit),
        },
        "tools": stats.tools,
        "messageCount": stats.message_count,
        "model": stats.model,
        "modelLabel": format_model(stats.model),
        "cost": stats.cost,
    }


def _match_to_dict(match: SessionMatch) -> dict:
    return {
        "projectId": match.project_id,
        "projectPath": match.project_path,
        "sessionId": match.session_id,
        "matchCount": match.match_count,
        "summary": match.summary,
    }


# ── Routes ───────────────────────────────────────────────────────


@app.get("/api/projects")
def get_projects():
    """Return all projects, most recently active first."""
    projects = _load("projects", _get_store().list_projects)
    return [_project_to_dict(p) for p in projects]


@app.get("/api/projects/{project_id}/sessions")
def get_project_sessions(project_id: str):
    """Return the sessions of a project, most recent first."""
    sessions = _load("sessions", _get_store().list_sessions, project_id)
    return [_session_to_dict(s) for s in sessions]


@app.get("/api/sessions/{project_id}/{session_id}")
def get_session(project_id: str, session_id: str):
    """Return the raw events of a session in file order."""
    return _load("session", _get_store().read_session, project_id, session_id)


@app.get("/api/sessions/{project_id}/{session_id}/turns")
def get_session_turns(project_id: str, session_id: str):
    """Return a session reconstructed into turns."""
    events = _load("session", _get_store().read_session, project_id, session_id)
    return [_turn_to_dict(t) for t in reconstruct(events)]


@app.get("/api/sessions/{project_id}/{session_id}/stats")
def get_session_stats(project_id: str, session_id: str):
    """Return usage, cost, file and tool statistics for a session."""
    events = _load("session", _get_store().read_session, project_id, session_id)
    return _stats_to_dict(analyze(events, reconstruct(events)))


@app.get("/api/sessions/{project_id}/{session_id}/agents")
def get_session_agents(project_id: str, session_id: str):
    """Return the sub-agents stored under the session's project."""
    store = _get_store()
    logs = _load("agents", store.list_agent_logs, project_id)
    if not logs:
        return []

    try:
        parent_events = store.read_session(project_id, session_id)
    except SessionNotFound:
        parent_events = []
    except OSError as e:
        logger.error("Failed to read parent session %s/%s: %s", project_id, session_id, e)
        raise HTTPException(status_code=500, detail="Failed to read session")

    return [_agent_to_dict(a) for a in link_agents(parent_events, logs)]


@app.get("/api/sessions/{project_id}/{session_id}/agents/{agent_id}")
def get_agent(project_id: str, session_id: str, agent_id: str):
    """Return the raw events of one sub-agent log."""
    return _load("agent", _get_store().read_agent, project_id, agent_id)


@app.get("/api/sessions/{project_id}/{session_id}/agents/{agent_id}/turns")
def get_agent_turns(project_id: str, session_id: str, agent_id: str):
    """Return a sub-agent log reconstructed into turns."""
    events = _load("agent", _get_store().read_agent, project_id, agent_id)
    return [_turn_to_dict(t) for t in reconstruct(events)]


@app.get("/api/sessions/{project_id}/{session_id}/agents/{agent_id}/stats")
def get_agent_stats(project_id: str, session_id: str, agent_id: str):
    """Return statistics for one sub-agent log."""
    events = _load("agent", _get_store().read_agent, project_id, agent_id)
    return _stats_to_dict(analyze(events, reconstruct(events)))


@app.get("/api/search")
async def search_sessions(q: str = Query("", description="Text to search for")):
    """Return sessions containing the query, at most 50."""
    store = _get_store()
    cancel = threading.Event()
    loop = asyncio.get_running_loop()
    try:
        matches = await asyncio.wait_for(
            loop.run_in_executor(None, functools.partial(search, q, store, cancel)),
            timeout=get_search_timeout(),
        )
    except asyncio.TimeoutError:
        logger.warning("Search for %r timed out", q)
        raise HTTPException(status_code=504, detail="Search timed out")
    except Exception:
        logger.exception("Search for %r failed", q)
        raise HTTPException(status_code=500, detail="Search failed")
    finally:
        # Stops the worker at the next file after a timeout or disconnect.
        cancel.set()

    return [_match_to_dict(m) for m in matches]
