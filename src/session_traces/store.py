"""Abstract base class for session log stores."""

from abc import ABC, abstractmethod
from collections.abc import Iterator
from pathlib import Path

from .core import AgentLog, Project, SessionInfo


class ResourceNotFound(LookupError):
    """A requested project, session or agent does not exist."""

    kind = "Resource"

    def __init__(self, identifier: str):
        super().__init__(f"{self.kind} not found")
        self.identifier = identifier


class ProjectNotFound(ResourceNotFound):
    kind = "Project"


class SessionNotFound(ResourceNotFound):
    kind = "Session"


class AgentNotFound(ResourceNotFound):
    kind = "Agent"


def encode_project_id(project_path: str) -> str:
    """Encode a filesystem path as a project id: every "/" becomes "-".

    Not reversible for paths that already contain "-": decoding
    "/srv/my-app" -> "-srv-my-app" yields "/srv/my/app".
    """
    return project_path.replace("/", "-")


def decode_project_id(project_id: str) -> str:
    """Reverse :func:`encode_project_id`, with the same "-" ambiguity."""
    return project_id.replace("-", "/")


class EventStore(ABC):
    """Read-only access to raw session events.

    Implementations return raw events as the dicts parsed from each log line,
    in file order, silently dropping lines that fail to parse.
    """

    @abstractmethod
    def get_base_path(self) -> Path:
        """Return the root directory holding the project directories."""
        ...

    @abstractmethod
    def list_projects(self) -> list[Project]:
        """Return all projects, most recently modified first."""
        ...

    @abstractmethod
    def list_sessions(self, project_id: str) -> list[SessionInfo]:
        """Return sessions of a project, most recently modified first."""
        ...

    @abstractmethod
    def read_session(self, project_id: str, session_id: str) -> list[dict]:
        """Return the raw events of one session."""
        ...

    @abstractmethod
    def list_agent_logs(self, project_id: str) -> list[AgentLog]:
        """Return every sub-agent log stored under a project."""
        ...

    @abstractmethod
    def read_agent(self, project_id: str, agent_id: str) -> list[dict]:
        """Return the raw events of one sub-agent log."""
        ...

    @abstractmethod
    def iter_sessions(self) -> Iterator[tuple[str, str]]:
        """Yield ``(project_id, session_id)`` for every session, in directory-listing order."""
        ...
