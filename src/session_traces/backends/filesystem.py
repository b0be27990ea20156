"""On-disk session log store.

Reads the ~/.claude/projects/ directory structure:

    <root>/<project-id>/<session-id>.jsonl
    <root>/<project-id>/subagents/agent-<agent-id>.jsonl

Each .jsonl file holds one JSON object per line. Lines that fail to parse
are dropped without aborting the rest of the file.
"""

import json
import logging
from collections.abc import Iterator
from datetime import datetime, timezone
from pathlib import Path

from ..core import AgentLog, Project, SessionInfo
from ..store import (
    AgentNotFound,
    EventStore,
    ProjectNotFound,
    SessionNotFound,
    decode_project_id,
)
from ..summary import extract_summary

logger = logging.getLogger(__name__)

SUBAGENTS_DIR = "subagents"
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _reject_constant(name: str):
    raise ValueError(f"non-standard JSON constant {name}")


def parse_jsonl(path: Path) -> list[dict]:
    """Parse a JSONL file into a list of events, skipping malformed lines.

    Undecodable bytes are replaced rather than aborting the file, and
    NaN/Infinity literals count as malformed.
    """
    events = []
    with path.open(encoding="utf-8", errors="replace") as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                entry = json.loads(line, parse_constant=_reject_constant)
            except ValueError as e:
                logger.debug("Bad JSON at %s:%d: %s", path, line_num, e)
                continue
            if isinstance(entry, dict):
                events.append(entry)
    return events


def _mtime(path: Path) -> datetime:
    return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)


def _is_safe_name(name: str) -> bool:
    return bool(name) and name not in (".", "..") and "/" not in name and "\\" not in name


def _session_files(project_dir: Path) -> list[Path]:
    return [
        p for p in sorted(project_dir.iterdir())
        if p.suffix == ".jsonl" and not p.name.startswith(".") and p.is_file()
    ]


def _agent_files(project_dir: Path) -> list[Path]:
    subagents = project_dir / SUBAGENTS_DIR
    if not subagents.is_dir():
        return []
    return [p for p in sorted(subagents.iterdir()) if p.name.endswith(".jsonl") and p.is_file()]


def _agent_id(filename: str) -> str:
    return filename.removesuffix(".jsonl").removeprefix("agent-")


class FileEventStore(EventStore):
    """Event store backed by a directory of project folders."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def get_base_path(self) -> Path:
        return self.root

    def list_projects(self) -> list[Project]:
        base = self.get_base_path()
        if not base.is_dir():
            return []

        projects = []
        for project_dir in sorted(base.iterdir()):
            if not project_dir.is_dir():
                continue

            last_modified = _EPOCH
            try:
                for session_file in _session_files(project_dir):
                    last_modified = max(last_modified, _mtime(session_file))
            except OSError as e:
                logger.debug("Could not stat sessions in %s: %s", project_dir, e)

            path = decode_project_id(project_dir.name)
            projects.append(Project(
                id=project_dir.name,
                path=path,
                name=path.split("/")[-1] or project_dir.name,
                last_modified=last_modified,
            ))

        projects.sort(key=lambda p: p.last_modified, reverse=True)
        return projects

    def list_sessions(self, project_id: str) -> list[SessionInfo]:
        project_dir = self._project_dir(project_id)
        subagent_count = len(_agent_files(project_dir))

        sessions = []
        for session_file in _session_files(project_dir):
            events = parse_jsonl(session_file)
            sessions.append(SessionInfo(
                id=session_file.stem,
                filename=session_file.name,
                modified=_mtime(session_file),
                message_count=len(events),
                summary=extract_summary(events),
                subagent_count=subagent_count,
            ))

        sessions.sort(key=lambda s: s.modified, reverse=True)
        return sessions

    def read_session(self, project_id: str, session_id: str) -> list[dict]:
        if not (_is_safe_name(project_id) and _is_safe_name(session_id)):
            raise SessionNotFound(session_id)
        path = self.get_base_path() / project_id / f"{session_id}.jsonl"
        if not path.is_file():
            raise SessionNotFound(session_id)
        return parse_jsonl(path)

    def list_agent_logs(self, project_id: str) -> list[AgentLog]:
        if not _is_safe_name(project_id):
            return []
        project_dir = self.get_base_path() / project_id

        logs = []
        for agent_file in _agent_files(project_dir):
            logs.append(AgentLog(
                id=_agent_id(agent_file.name),
                filename=agent_file.name,
                events=parse_jsonl(agent_file),
                modified=_mtime(agent_file),
            ))
        return logs

    def read_agent(self, project_id: str, agent_id: str) -> list[dict]:
        if not (_is_safe_name(project_id) and _is_safe_name(agent_id)):
            raise AgentNotFound(agent_id)
        path = self.get_base_path() / project_id / SUBAGENTS_DIR / f"agent-{agent_id}.jsonl"
        if not path.is_file():
            raise AgentNotFound(agent_id)
        return parse_jsonl(path)

    def iter_sessions(self) -> Iterator[tuple[str, str]]:
        base = self.get_base_path()
        if not base.is_dir():
            return

        for project_dir in sorted(base.iterdir()):
            if not project_dir.is_dir():
                continue
            for session_file in _session_files(project_dir):
                yield project_dir.name, session_file.stem

    # ── Private helpers ──────────────────────────────────────────────

    def _project_dir(self, project_id: str) -> Path:
        if not _is_safe_name(project_id):
            raise ProjectNotFound(project_id)
        project_dir = self.get_base_path() / project_id
        if not project_dir.is_dir():
            raise ProjectNotFound(project_id)
        return project_dir
