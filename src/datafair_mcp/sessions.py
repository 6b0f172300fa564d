# Data Fair MCP Server
# File: sessions.py
# Version: v1

"""Registry of long-lived (SSE) client sessions.

One registry belongs to one HTTP application. A session is OPEN from the
moment its event stream is registered until the stream closes; it then
becomes a tombstone so late posts get a precise error instead of a generic
"unknown session".

Tombstones are bounded: when ``max_tombstones`` is exceeded the oldest ones
are forgotten (LRU-ish, like a small cache).
"""

from __future__ import annotations

import logging
import time
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionError(LookupError):
    """A message was posted to a session that cannot receive it."""

    def __init__(self, session_id: Optional[str], message: str) -> None:
        self.session_id = session_id
        super().__init__(message)


class MissingSessionError(SessionError):
    def __init__(self) -> None:
        super().__init__(None, "sessionId query parameter is required")


class UnknownSessionError(SessionError):
    def __init__(self, session_id: str) -> None:
        super().__init__(session_id, f"No transport found for sessionId '{session_id}'")


class ClosedSessionError(SessionError):
    def __init__(self, session_id: str) -> None:
        super().__init__(session_id, f"Session '{session_id}' is closed")


@dataclass
class Session(Generic[T]):
    session_id: str
    writer: T
    opened_at: float = field(default_factory=time.time)


class SessionRegistry(Generic[T]):
    """Maps server-generated session ids to open connection writers."""

    def __init__(self, max_tombstones: int = 1024) -> None:
        self.max_tombstones = int(max_tombstones)
        self._open: Dict[str, Session[T]] = {}
        self._closed: "OrderedDict[str, float]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._open)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._open

    def open(self, writer: T) -> str:
        """Register a new connection and return its session id."""
        session_id = uuid.uuid4().hex
        self._open[session_id] = Session(session_id=session_id, writer=writer)
        logger.info("Session %s opened (%d open)", session_id, len(self._open))
        return session_id

    def get(self, session_id: Optional[str]) -> T:
        """Return the writer of an open session.

        Raises MissingSessionError, UnknownSessionError or ClosedSessionError.
        """
        if not session_id:
            raise MissingSessionError()

        session = self._open.get(session_id)
        if session is not None:
            return session.writer

        if session_id in self._closed:
            raise ClosedSessionError(session_id)
        raise UnknownSessionError(session_id)

    def close(self, session_id: str) -> None:
        """Tombstone a session. Closing twice (or an unknown id) is a no-op."""
        session = self._open.pop(session_id, None)
        if session is None:
            return

        self._closed[session_id] = time.time()
        while len(self._closed) > self.max_tombstones:
            self._closed.popitem(last=False)

        logger.info(
            "Session %s closed after %.1fs (%d open)",
            session_id,
            time.time() - session.opened_at,
            len(self._open),
        )

    def stats(self) -> Dict[str, Any]:
        return {
            "open": len(self._open),
            "tombstones": len(self._closed),
            "max_tombstones": self.max_tombstones,
        }
