"""
Jira client for fetching tickets, finding linked pull requests and creating issues.
"""
from typing import Dict, Any, List, Optional
import json
import logging
import re
import requests
from requests.auth import HTTPBasicAuth
from personal_helper.config import settings
from personal_helper.models.ticket import Ticket
from personal_helper.services.criteria_extractor import extract_acceptance_criteria, flatten_adf_to_text

logger = logging.getLogger(__name__)

GITHUB_PR_URL_PATTERN = re.compile(r"https?://github\.com/([^/\s]+)/([^/\s]+)/pull/(\d+)")


class JiraClientError(Exception):
    """Raised when Jira API calls fail."""
    pass


class JiraClient:
    """Client for Jira REST API v2 (wiki-markup descriptions)."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        email: Optional[str] = None,
        api_token: Optional[str] = None,
        timeout: Optional[int] = None
    ):
        """
        Initialize Jira client.

        Args:
            base_url: Jira instance URL (defaults to JIRA_HOST)
            email: Jira user email for authentication
            api_token: Jira API token for authentication
            timeout: Request timeout in seconds

        Raises:
            JiraClientError: If any credential is missing
        """
        self.jira_url = (base_url or settings.jira_base_url).rstrip("/")
        self.email = email or settings.jira_email or ""
        self.api_token = api_token or settings.jira_api_token or ""
        self.timeout = timeout or settings.jira_api_timeout

        if not self.jira_url or not self.email or not self.api_token:
            raise JiraClientError(
                "Missing JIRA credentials. Please set JIRA_HOST, JIRA_EMAIL, and JIRA_API_TOKEN in .env"
            )

    def _make_request(
        self,
        endpoint: str,
        method: str = "GET",
        data: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Make authenticated request to Jira API.

        Args:
            endpoint: API endpoint (e.g., "/rest/api/2/issue/KEY-123")
            method: HTTP method (GET or POST)
            data: Optional request body data

        Returns:
            Decoded JSON response ({} for empty bodies)

        Raises:
            JiraClientError: If request fails
        """
        url = f"{self.jira_url}{endpoint}"
        auth = HTTPBasicAuth(self.email, self.api_token)
        headers = {"Accept": "application/json", "Content-Type": "application/json"}

        try:
            if method == "GET":
                response = requests.get(url, auth=auth, headers=headers, timeout=self.timeout)
            elif method == "POST":
                response = requests.post(
                    url,
                    auth=auth,
                    headers=headers,
                    data=json.dumps(data) if data else None,
                    timeout=self.timeout
                )
            else:
                raise JiraClientError(f"Unsupported HTTP method: {method}")

            response.raise_for_status()
            if response.content:
                return response.json()
            return {}
        except requests.exceptions.Timeout:
            raise JiraClientError(f"Jira API request timed out after {self.timeout} seconds")
        except requests.exceptions.HTTPError as e:
            detail = ""
            if e.response is not None:
                try:
                    body = e.response.json()
                    detail = body.get("errorMessages") or body.get("errors") or ""
                except ValueError:
                    detail = e.response.text
            raise JiraClientError(f"Jira API request failed: {str(e)} {detail}".strip())
        except requests.exceptions.RequestException as e:
            raise JiraClientError(f"Jira API request failed: {str(e)}")

    def _get_issue(self, ticket_id: str) -> Dict[str, Any]:
        return self._make_request(f"/rest/api/2/issue/{ticket_id}")

    def _get_remote_links(self, ticket_id: str) -> List[Dict[str, Any]]:
        """Remote links are optional context; failures yield an empty list."""
        try:
            links = self._make_request(f"/rest/api/2/issue/{ticket_id}/remotelink")
        except JiraClientError as e:
            logger.warning("Could not fetch remote links for %s: %s", ticket_id, e)
            return []
        return links if isinstance(links, list) else []

    def fetch_ticket(self, ticket_id: str) -> Ticket:
        """
        Fetch a Jira ticket and extract its acceptance criteria.

        Args:
            ticket_id: Jira ticket ID (e.g., "PROJ-123")

        Returns:
            Ticket snapshot

        Raises:
            JiraClientError: If the ticket cannot be fetched
        """
        try:
            issue = self._get_issue(ticket_id)
            fields = issue.get("fields") or {}

            return Ticket(
                key=issue.get("key", ticket_id),
                summary=fields.get("summary") or "",
                description=flatten_adf_to_text(fields.get("description")) or "No description provided",
                acceptance_criteria=extract_acceptance_criteria(
                    fields, criteria_field=settings.jira_acceptance_criteria_field
                ),
                status=(fields.get("status") or {}).get("name") or "Unknown",
                assignee=(fields.get("assignee") or {}).get("displayName"),
                priority=(fields.get("priority") or {}).get("name") or "Unknown",
                issue_type=(fields.get("issuetype") or {}).get("name") or "Unknown",
            )
        except Exception as e:
            raise JiraClientError(f"Failed to fetch JIRA ticket {ticket_id}: {str(e)}") from e

    def get_linked_prs(self, ticket_id: str) -> List[str]:
        """
        Collect GitHub pull request URLs linked to a ticket.

        Remote links come first, then issue links, then URLs found in the
        description. Duplicates are dropped, first occurrence wins.

        Args:
            ticket_id: Jira ticket ID

        Returns:
            Ordered list of unique PR URLs

        Raises:
            JiraClientError: If the ticket cannot be fetched
        """
        try:
            issue = self._get_issue(ticket_id)
            remote_links = self._get_remote_links(ticket_id)
        except Exception as e:
            raise JiraClientError(f"Failed to get linked PRs for {ticket_id}: {str(e)}") from e

        fields = issue.get("fields") or {}
        candidates: List[str] = []

        for link in remote_links + list(fields.get("issuelinks") or []):
            url = (link.get("object") or {}).get("url", "")
            if "github.com" in url and "/pull/" in url:
                candidates.append(url)

        description = flatten_adf_to_text(fields.get("description"))
        candidates.extend(match.group(0) for match in GITHUB_PR_URL_PATTERN.finditer(description))

        return list(dict.fromkeys(candidates))

    def create_issue(self, ticket_content: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a Jira issue from a full REST payload ({"fields": {...}}).

        Args:
            ticket_content: Issue payload as drafted by the ticket creator

        Returns:
            Jira API response with created issue key and ID

        Raises:
            JiraClientError: If creation fails
        """
        try:
            return self._make_request("/rest/api/2/issue", method="POST", data=ticket_content)
        except JiraClientError as e:
            raise JiraClientError(f"Failed to create ticket: {str(e)}") from e


def extract_ticket_id_from_text(text: str) -> Optional[str]:
    """
    Extract Jira ticket ID from input text.

    Looks for patterns like "ATA-36", "PROJ-123", etc.

    Args:
        text: Input text that may contain ticket ID

    Returns:
        Ticket ID if found, None otherwise
    """
    match = re.search(r"\b([A-Z]{2,10}-\d+)\b", text)
    return match.group(1) if match else None
