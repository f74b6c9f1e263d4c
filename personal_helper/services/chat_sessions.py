"""
In-memory store for chat assistant sessions.

Sessions expire after a period of inactivity. Expired sessions are invisible to
`get` immediately and are physically removed by `reap_expired`, which the app
calls periodically from a background task.
"""
import logging
import secrets
import threading
import time
from datetime import datetime, timedelta, timezone
from typing import Dict, List
from personal_helper.models.chat import ChatMessage, ChatSession
from personal_helper.models.enums import ChatRole

logger = logging.getLogger(__name__)


class SessionNotFoundError(Exception):
    """Raised when a session ID is unknown or expired."""
    pass


class ChatSessionStore:
    """Thread-safe session registry with idle expiry."""

    def __init__(self, ttl_seconds: int):
        self.ttl = timedelta(seconds=ttl_seconds)
        self._sessions: Dict[str, ChatSession] = {}
        self._lock = threading.Lock()

    def _now(self) -> datetime:
        return datetime.now(timezone.utc)

    def _is_expired(self, session: ChatSession, now: datetime) -> bool:
        return now - session.last_active_at > self.ttl

    def create(self, greeting: str) -> ChatSession:
        """Start a session whose first message is the assistant's greeting."""
        session_id = f"session_{int(time.time() * 1000)}_{secrets.token_hex(5)}"
        session = ChatSession(
            session_id=session_id,
            messages=[ChatMessage(role=ChatRole.ASSISTANT, content=greeting)],
        )
        with self._lock:
            self._sessions[session_id] = session
        return session

    def get(self, session_id: str) -> ChatSession:
        """
        Look up a live session and mark it active.

        Raises:
            SessionNotFoundError: If the session is unknown or expired
        """
        now = self._now()
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None or self._is_expired(session, now):
                raise SessionNotFoundError(f"Session not found: {session_id}")
            session.last_active_at = now
            return session

    def append(self, session_id: str, role: ChatRole, content: str) -> ChatSession:
        """Append a message to a live session."""
        session = self.get(session_id)
        with self._lock:
            session.messages.append(ChatMessage(role=role, content=content))
        return session

    def history(self, session_id: str) -> List[Dict[str, str]]:
        """Copy of a live session's messages as role/content dicts, oldest first."""
        session = self.get(session_id)
        with self._lock:
            return [{"role": m.role.value, "content": m.content} for m in session.messages]

    def user_text(self, session_id: str) -> str:
        """The user's messages of a live session joined into one task description."""
        session = self.get(session_id)
        with self._lock:
            return session.user_messages_text()

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def reap_expired(self) -> int:
        """Remove expired sessions; returns how many were removed."""
        now = self._now()
        with self._lock:
            expired = [sid for sid, s in self._sessions.items() if self._is_expired(s, now)]
            for sid in expired:
                del self._sessions[sid]
        if expired:
            logger.info("Reaped %d expired chat session(s)", len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

