"""
Session Registry

Tracks live MCP client connections keyed by session id. Each session owns
the write side of its inbound message stream; the transport feeds posted
messages through it and removes the session when the stream ends.

The registry is only touched from the event loop thread and none of its
operations await, so open/get/close never interleave and never block other
sessions.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .analytics.events import utc_now
from .errors import UnknownSession
from .logging_config import get_logger

logger = get_logger(__name__)


class SessionState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


def new_session_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Session:
    """One client connection"""

    session_id: str
    writer: Any
    state: SessionState = SessionState.OPEN
    opened_at: datetime = field(default_factory=utc_now)


class SessionRegistry:
    """Owns every Session; nothing else mutates session state."""

    def __init__(self):
        self._sessions: dict[str, Session] = {}

    def open(self, writer: Any) -> str:
        """
        Register a new session for a transport handle.

        Args:
            writer: Write side of the session's inbound message stream

        Returns:
            New unique session id
        """
        session_id = new_session_id()
        while session_id in self._sessions:
            session_id = new_session_id()

        self._sessions[session_id] = Session(session_id=session_id, writer=writer)
        logger.info("Session opened", extra={"session_id": session_id})
        return session_id

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def require(self, session_id: str) -> Session:
        """Return the open session or raise UnknownSession."""
        session = self._sessions.get(session_id)
        if session is None:
            raise UnknownSession(session_id)
        return session

    def close(self, session_id: str) -> None:
        """Remove a session. Unknown or already-closed ids are ignored."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return

        session.state = SessionState.CLOSED
        logger.info("Session closed", extra={"session_id": session_id})

    def is_open(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
