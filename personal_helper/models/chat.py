"""
Chat assistant session models.
"""
from datetime import datetime, timezone
from pydantic import BaseModel, Field
from typing import List
from personal_helper.models.enums import ChatRole


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ChatMessage(BaseModel):
    """One message in a chat assistant conversation."""

    role: ChatRole
    content: str


class ChatSession(BaseModel):
    """In-memory chat session with timestamps for expiry."""

    session_id: str
    messages: List[ChatMessage] = Field(default_factory=list)
    stage: str = "initial"
    created_at: datetime = Field(default_factory=_utcnow)
    last_active_at: datetime = Field(default_factory=_utcnow)

    def user_messages_text(self) -> str:
        """Join the user's messages into a single task description."""
        return "\n\n".join(m.content for m in self.messages if m.role == ChatRole.USER)
