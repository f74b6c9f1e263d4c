"""
Prompt templates for the three tools.

Each tool has a fixed system prompt and a builder for the user message.
"""
from typing import Optional

PR_REVIEW_SYSTEM_PROMPT = "You are an expert code reviewer. Analyze the PR changes and provide detailed feedback."

SCENARIO_SYSTEM_PROMPT = """You are a QA engineer. Convert acceptance criteria into executable test scenarios.
Return JSON format: {"scenarios": [{"description": "...", "action": "check_style|click|check_text|check_visibility", "target": "CSS selector", "expected": "...", "value": "optional"}]}
For click steps, "expected" may be an empty string."""

REPORT_SYSTEM_PROMPT = "You are a QA analyst. Generate a comprehensive test report."

TICKET_SYSTEM_PROMPT = """You are a Product Manager creating Jira tickets.
Your response must be ONLY valid JSON, nothing else."""

CHAT_SYSTEM_PROMPT = """You are a helpful Product Manager assistant helping users create comprehensive Jira tickets.
Ask ONE question at a time about: user stories (who, what, why), detailed description, and acceptance criteria.
Be conversational and friendly. After gathering enough information (around 8-10 exchanges), let the user know they can generate the ticket."""

CHAT_GREETING = (
    "Hi! I'm here to help you create a comprehensive Jira ticket. "
    "Let's start by understanding what you want to build.\n\n"
    "Can you briefly describe the task or feature you'd like to create a ticket for?"
)


def get_pr_review_prompt(
    title: str,
    files_count: int,
    changes: str,
    acceptance_criteria: Optional[str] = None
) -> str:
    """
    Build the PR review request.

    Args:
        title: Pull request title
        files_count: Number of changed files
        changes: Rendered change summary
        acceptance_criteria: Ticket criteria to validate against; omitted when None
    """
    prompt = f"Analyze this PR:\n\nTitle: {title}\nFiles: {files_count}\n\n"

    if acceptance_criteria:
        prompt += f"Acceptance Criteria:\n{acceptance_criteria}\n\n"
        prompt += "Validate if the code meets ALL acceptance criteria.\n\n"

    prompt += f"Code Changes:\n```\n{changes}\n```\n\n"
    prompt += "Provide analysis on: bugs, security issues, code quality, best practices, and AC validation (if provided)."
    return prompt


def get_scenario_prompt(acceptance_criteria: str, summary: str, description: str) -> str:
    """Build the scenario generation request from ticket text."""
    return (
        f"Ticket: {summary}\n\n"
        f"Description: {description}\n\n"
        f"Acceptance Criteria:\n{acceptance_criteria}\n\n"
        "Generate test scenarios."
    )


def get_report_prompt(ticket_key: str, summary: str, results_json: str) -> str:
    """Build the test report request; `results_json` is the serialized result list."""
    return (
        f"Ticket: {ticket_key} - {summary}\n\n"
        f"Test Results:\n{results_json}\n\n"
        "Provide analysis and recommendations."
    )


def get_ticket_prompt(task_description: str, project_id: str, labels: str) -> str:
    """Build the Jira ticket drafting request."""
    return f"""Create a Jira ticket JSON for: {task_description}

Required values:
- issuetype.id must be "10000"
- project.id must be "{project_id}"
- labels must be ["{labels}"]
- Include summary, description, and acceptance criteria (customfield_10115)

Respond with ONLY the JSON object."""
