"""
AI-assisted Jira ticket drafting and creation.
"""
from typing import Any, Dict, Optional
from personal_helper.agent.prompt import TICKET_SYSTEM_PROMPT, get_ticket_prompt
from personal_helper.config import settings
from personal_helper.services import llm_client
from personal_helper.services.jira_client import JiraClient


def create_ticket_content(
    task_description: str,
    project_id: Optional[str] = None,
    labels: Optional[str] = None
) -> Optional[Dict[str, Any]]:
    """
    Draft a Jira issue payload from a task description.

    Args:
        task_description: What the ticket should cover
        project_id: Jira project ID (defaults to JIRA_PROJECT_ID)
        labels: Label to apply (defaults to JIRA_TICKET_LABELS)

    Returns:
        Issue payload ({"fields": {...}}) as drafted by OpenAI, or None if empty

    Raises:
        LLMClientError: If drafting fails
    """
    prompt = get_ticket_prompt(
        task_description,
        project_id or settings.jira_project_id,
        labels or settings.jira_ticket_labels
    )
    return llm_client.generate_json(TICKET_SYSTEM_PROMPT, prompt)


def create_ticket(ticket_content: Dict[str, Any], jira_client: Optional[JiraClient] = None) -> Dict[str, Any]:
    """
    Create a drafted ticket in Jira.

    Raises:
        JiraClientError: If credentials are missing or creation fails
    """
    return (jira_client or JiraClient()).create_issue(ticket_content)
