"""
Ticket creator endpoints: one-shot drafting and the chat assistant.
"""
import logging
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
from typing import Any, Dict, Optional
from personal_helper.agent import ticket_creator
from personal_helper.agent.prompt import CHAT_GREETING, CHAT_SYSTEM_PROMPT
from personal_helper.config import settings
from personal_helper.models.enums import ChatRole
from personal_helper.services import llm_client
from personal_helper.services.chat_sessions import ChatSessionStore, SessionNotFoundError
from personal_helper.services.jira_client import JiraClientError
from personal_helper.services.llm_client import LLMClientError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ticket-creator")

chat_store = ChatSessionStore(ttl_seconds=settings.chat_session_ttl_seconds)

# Messages (greeting included) after which the conversation is considered complete
CHAT_COMPLETE_MESSAGE_COUNT = 18


class TaskRequest(BaseModel):
    task_description: Optional[str] = Field(default=None, alias="taskDescription")


class ChatMessageRequest(BaseModel):
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    message: Optional[str] = None


class ChatSessionRequest(BaseModel):
    session_id: Optional[str] = Field(default=None, alias="sessionId")


def _draft(task_description: str) -> Dict[str, Any]:
    try:
        content = ticket_creator.create_ticket_content(task_description)
    except LLMClientError as e:
        logger.error("Error generating ticket: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    if not content:
        raise HTTPException(status_code=500, detail="AI returned empty ticket content")
    return content


def _create_in_jira(ticket_content: Dict[str, Any]) -> Dict[str, Any]:
    try:
        return ticket_creator.create_ticket(ticket_content)
    except JiraClientError as e:
        logger.error("Error creating ticket: %s", e)
        raise HTTPException(status_code=500, detail=str(e))


def _require_task(request: TaskRequest) -> str:
    if not request.task_description:
        raise HTTPException(status_code=400, detail="Task description is required")
    return request.task_description


def _session_description(session_id: Optional[str]) -> str:
    if not session_id:
        raise HTTPException(status_code=400, detail="Session ID is required")
    try:
        return chat_store.user_text(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")


@router.post("/generate")
def generate_ticket(request: TaskRequest) -> Dict[str, Any]:
    """Draft a ticket payload without creating it."""
    ticket_content = _draft(_require_task(request))
    return {"success": True, "ticketContent": ticket_content}


@router.post("/create")
def create_ticket(request: TaskRequest) -> Dict[str, Any]:
    """Draft a ticket payload and create it in Jira."""
    ticket_content = _draft(_require_task(request))
    jira_response = _create_in_jira(ticket_content)
    return {"success": True, "ticketContent": ticket_content, "jiraResponse": jira_response}


@router.post("/chat/start")
def start_chat() -> Dict[str, Any]:
    """Open a chat session with the assistant's greeting."""
    session = chat_store.create(CHAT_GREETING)
    return {"success": True, "sessionId": session.session_id, "message": CHAT_GREETING}


@router.post("/chat/message")
def send_chat_message(request: ChatMessageRequest) -> Dict[str, Any]:
    """Add a user message and return the assistant's next question."""
    if not request.session_id or not request.message:
        raise HTTPException(status_code=400, detail="Session ID and message are required")

    try:
        chat_store.append(request.session_id, ChatRole.USER, request.message)
        history = chat_store.history(request.session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")

    try:
        reply = llm_client.chat_reply(history, CHAT_SYSTEM_PROMPT)
    except LLMClientError as e:
        logger.error("Error processing chat message: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

    try:
        session = chat_store.append(request.session_id, ChatRole.ASSISTANT, reply)
        message_count = len(chat_store.history(request.session_id))
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")

    return {
        "success": True,
        "message": reply,
        "stage": session.stage,
        "isComplete": message_count >= CHAT_COMPLETE_MESSAGE_COUNT,
    }


@router.post("/chat/generate")
def generate_from_chat(request: ChatSessionRequest) -> Dict[str, Any]:
    """Draft a ticket from everything the user said in the session."""
    task_description = _session_description(request.session_id)
    ticket_content = _draft(task_description)
    return {"success": True, "ticketContent": ticket_content, "taskDescription": task_description}


@router.post("/chat/create")
def create_from_chat(request: ChatSessionRequest) -> Dict[str, Any]:
    """Draft and create a ticket from the session, then close the session."""
    task_description = _session_description(request.session_id)
    ticket_content = _draft(task_description)
    jira_response = _create_in_jira(ticket_content)
    chat_store.delete(request.session_id)
    return {
        "success": True,
        "ticketContent": ticket_content,
        "jiraResponse": jira_response,
        "taskDescription": task_description,
    }
