"""In-memory store of editor sessions with TTL cleanup.

WHY: The HTTP API is stateless per request, but editing is not: split,
merge, undo and export all act on the same evolving document. Each
client opens a session, gets an id back, and addresses every later
request to it. An in-memory store is enough for a single-editor tool
with no persistence requirements; clients save by exporting JSON.

HOW: SessionRecord pairs an EditorSession with its id and timestamps.
SessionStore is a dict keyed by id behind a threading.Lock, with
create/get/delete and a cleanup pass that drops sessions idle for
longer than the TTL.

RULES:
- All store mutations hold self._lock
- get_session() returns None for unknown ids and refreshes last_access
- TTL is measured from last_access, so an active session never expires
- Sessions with a re-alignment or export in flight are never expired
- create_session() raises ValueError once max_sessions is reached
- Session ids are uuid4 hex strings
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional

from transcript_editor.config import MAX_SESSIONS, SESSION_TTL_SECONDS
from transcript_editor.core.session import EditorSession

logger = logging.getLogger(__name__)


@dataclass
class SessionRecord:
    """A stored session plus bookkeeping.

    RULES:
    - id: uuid4 hex, immutable after creation
    - created_at / last_access: epoch seconds
    """

    id: str
    session: EditorSession
    created_at: float
    last_access: float


class SessionStore:
    """Thread-safe in-memory store for editor sessions."""

    def __init__(
        self,
        ttl_seconds: int = SESSION_TTL_SECONDS,
        max_sessions: int = MAX_SESSIONS,
    ) -> None:
        self._sessions: Dict[str, SessionRecord] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def create_session(self, session: EditorSession) -> SessionRecord:
        """Store ``session`` under a new id.

        Raises:
            ValueError: If max_sessions sessions are already open.
        """
        with self._lock:
            if len(self._sessions) >= self.max_sessions:
                raise ValueError(
                    "Maximum number of open sessions ({}) reached".format(self.max_sessions)
                )
            now = time.time()
            record = SessionRecord(
                id=uuid.uuid4().hex,
                session=session,
                created_at=now,
                last_access=now,
            )
            self._sessions[record.id] = record

        logger.info(
            "Created session %s (%d paragraphs)", record.id, len(session.document)
        )
        return record

    def get_session(self, session_id: str) -> Optional[SessionRecord]:
        """Return the live record for ``session_id``, or None."""
        with self._lock:
            record = self._sessions.get(session_id)
            if record is not None:
                record.last_access = time.time()
            return record

    def list_sessions(self) -> List[SessionRecord]:
        """Snapshot of all records, oldest first."""
        with self._lock:
            return sorted(self._sessions.values(), key=lambda r: r.created_at)

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            record = self._sessions.pop(session_id, None)
        if record is None:
            return False
        logger.info("Deleted session %s", session_id)
        return True

    def cleanup_expired(self) -> int:
        """Drop sessions idle longer than the TTL; return how many went."""
        now = time.time()
        expired: List[SessionRecord] = []

        with self._lock:
            for session_id, record in list(self._sessions.items()):
                if record.session.processing:
                    continue
                if now - record.last_access > self._ttl_seconds:
                    expired.append(self._sessions.pop(session_id))

        for record in expired:
            logger.info(
                "Expired session %s (idle %.0fs)", record.id, now - record.last_access
            )
        return len(expired)
