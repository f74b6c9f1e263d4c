"""
Jira ticket snapshot used by all three tools.
"""
from pydantic import BaseModel, Field
from typing import Optional


class Ticket(BaseModel):
    """
    Immutable snapshot of a Jira issue, fetched once per request.

    `acceptance_criteria` holds the extracted criteria text or the
    "No acceptance criteria found" sentinel (see criteria_extractor).
    """

    key: str = Field(..., description="Jira issue key (e.g., 'PROJ-123')")
    summary: str = Field(default="", description="Issue summary/title")
    description: str = Field(default="No description provided", description="Plain text description")
    acceptance_criteria: str = Field(..., serialization_alias="acceptanceCriteria", description="Extracted acceptance criteria or the not-found sentinel")
    status: str = Field(default="Unknown", description="Workflow status name")
    assignee: Optional[str] = Field(default=None, description="Assignee display name")
    priority: str = Field(default="Unknown", description="Priority name")
    issue_type: str = Field(default="Unknown", serialization_alias="issueType", description="Issue type name")

    class Config:
        frozen = True
