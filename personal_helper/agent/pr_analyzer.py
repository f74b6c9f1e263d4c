"""
Reviews the GitHub pull requests of a Jira ticket with Claude.
"""
import logging
import re
from typing import Callable, List, Optional, Tuple
from personal_helper.agent.prompt import PR_REVIEW_SYSTEM_PROMPT, get_pr_review_prompt
from personal_helper.models.pull_request import PRAnalysisResult, PRInfo
from personal_helper.models.ticket import Ticket
from personal_helper.services import llm_client
from personal_helper.services.criteria_extractor import has_acceptance_criteria
from personal_helper.services.github_client import GitHubClient, build_changes_summary, parse_pr_url
from personal_helper.services.jira_client import JiraClient

logger = logging.getLogger(__name__)

PR_REVIEW_MAX_TOKENS = 4000


class NoPullRequestsError(Exception):
    """Raised when neither the request nor the ticket yields any PR URL."""
    pass


def split_pr_urls(pr_urls: Optional[str]) -> List[str]:
    """Split a newline/comma separated URL list, dropping blanks."""
    if not pr_urls:
        return []
    return [url.strip() for url in re.split(r"[\n,]", pr_urls) if url.strip()]


class PRAnalyzer:
    """Fetches a ticket and its PRs, then asks Claude to review each PR."""

    def __init__(
        self,
        jira_client_factory: Callable[[], JiraClient] = JiraClient,
        github_client: Optional[GitHubClient] = None,
        complete: Optional[Callable[[str, str, int], str]] = None
    ):
        self.jira_client_factory = jira_client_factory
        self.github_client = github_client or GitHubClient()
        self.complete = complete or llm_client.complete

    def analyze(self, ticket_id: str, pr_urls: Optional[str] = None) -> Tuple[Ticket, List[PRAnalysisResult]]:
        """
        Review every PR of a ticket.

        Args:
            ticket_id: Jira ticket ID
            pr_urls: Optional explicit PR URLs; auto-detected from Jira when empty

        Returns:
            The ticket and one analysis per valid PR URL (invalid URLs are skipped)

        Raises:
            NoPullRequestsError: If no PR URL is available
            JiraClientError, GitHubClientError, LLMClientError: On upstream failures
        """
        jira_client = self.jira_client_factory()
        ticket = jira_client.fetch_ticket(ticket_id)

        urls = split_pr_urls(pr_urls)
        if not urls:
            urls = jira_client.get_linked_prs(ticket_id)
            logger.info("Auto-detected %d PR(s) for %s", len(urls), ticket_id)

        if not urls:
            raise NoPullRequestsError(
                "No PRs found. Please provide PR URLs or link PRs to the JIRA ticket."
            )

        criteria = ticket.acceptance_criteria if has_acceptance_criteria(ticket.acceptance_criteria) else None

        results = []
        for url in urls:
            pr_info = parse_pr_url(url)
            if pr_info is None:
                logger.warning("Skipping unrecognized PR URL: %s", url)
                continue
            results.append(self._analyze_pr(pr_info, criteria))

        return ticket, results

    def _analyze_pr(self, pr_info: PRInfo, criteria: Optional[str]) -> PRAnalysisResult:
        pr = self.github_client.get_pull_request(pr_info.owner, pr_info.repo, pr_info.number)
        files = self.github_client.list_pull_request_files(pr_info.owner, pr_info.repo, pr_info.number)
        pr_info = pr_info.model_copy(update={"title": pr.get("title", "")})

        analysis = self.complete(
            PR_REVIEW_SYSTEM_PROMPT,
            get_pr_review_prompt(pr_info.title, len(files), build_changes_summary(files), criteria),
            PR_REVIEW_MAX_TOKENS
        )
        return PRAnalysisResult(pr_info=pr_info, files_count=len(files), analysis=analysis)
