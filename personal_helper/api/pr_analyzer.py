"""
POST /pr-analyzer/analyze endpoint: AI review of a ticket's pull requests.
"""
import logging
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from typing import List, Optional
from personal_helper.agent.pr_analyzer import PRAnalyzer, NoPullRequestsError
from personal_helper.models.pull_request import PRAnalysisResult
from personal_helper.models.ticket import Ticket
from personal_helper.services.github_client import GitHubClientError
from personal_helper.services.jira_client import JiraClientError, extract_ticket_id_from_text
from personal_helper.services.llm_client import LLMClientError

logger = logging.getLogger(__name__)

router = APIRouter()


class AnalyzeRequest(BaseModel):
    ticket_id: Optional[str] = Field(default=None, alias="ticketId")
    pr_urls: Optional[str] = Field(default=None, alias="prUrls", description="Newline or comma separated PR URLs")


class AnalyzeResponse(BaseModel):
    success: bool = True
    jira_ticket: Ticket = Field(..., serialization_alias="jiraTicket")
    results: List[PRAnalysisResult]


def get_pr_analyzer() -> PRAnalyzer:
    return PRAnalyzer()


@router.post("/pr-analyzer/analyze", response_model=AnalyzeResponse)
def analyze_pull_requests(request: AnalyzeRequest, analyzer: PRAnalyzer = Depends(get_pr_analyzer)) -> AnalyzeResponse:
    """Review the PRs given in the request, or those linked to the ticket."""
    if not request.ticket_id:
        raise HTTPException(status_code=400, detail="Missing ticketId")

    ticket_id = extract_ticket_id_from_text(request.ticket_id) or request.ticket_id.strip()

    try:
        ticket, results = analyzer.analyze(ticket_id, request.pr_urls)
    except NoPullRequestsError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (JiraClientError, GitHubClientError, LLMClientError) as e:
        logger.error("Error in PR analysis: %s", e)
        raise HTTPException(status_code=500, detail=str(e))

    return AnalyzeResponse(jira_ticket=ticket, results=results)
