"""
GitHub client for reading pull request metadata and changed files.
"""
from typing import Dict, Any, List, Optional
import requests
from personal_helper.config import settings
from personal_helper.models.pull_request import PRInfo
from personal_helper.services.jira_client import GITHUB_PR_URL_PATTERN

# Keeps the review prompt within model context limits
MAX_CHANGES_CHARS = 50_000


class GitHubClientError(Exception):
    """Raised when GitHub API calls fail."""
    pass


def parse_pr_url(url: str) -> Optional[PRInfo]:
    """
    Parse a GitHub pull request URL.

    Args:
        url: e.g. "https://github.com/org/repo/pull/42"

    Returns:
        PRInfo without title, or None if the URL is not a PR URL
    """
    match = GITHUB_PR_URL_PATTERN.search(url)
    if not match:
        return None
    owner, repo, number = match.groups()
    return PRInfo(owner=owner, repo=repo, number=number, url=url)


def build_changes_summary(files: List[Dict[str, Any]], limit: int = MAX_CHANGES_CHARS) -> str:
    """Render changed files as "File/Changes/patch" blocks, truncated to `limit` characters."""
    changes = "\n\n".join(
        f"File: {f.get('filename', '')}\nChanges: +{f.get('additions', 0)} -{f.get('deletions', 0)}\n{f.get('patch') or ''}"
        for f in files
    )
    return changes[:limit]


class GitHubClient:
    """Read-only client for the GitHub REST API."""

    def __init__(self, token: Optional[str] = None, api_url: Optional[str] = None, timeout: int = 30):
        self.token = token or settings.github_token or ""
        self.api_url = (api_url or settings.github_api_url).rstrip("/")
        self.timeout = timeout

    def _make_request(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.api_url}{endpoint}"
        headers = {"Accept": "application/vnd.github+json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = requests.get(url, headers=headers, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            raise GitHubClientError(f"GitHub API request failed: {str(e)}") from e

    def get_pull_request(self, owner: str, repo: str, number: str) -> Dict[str, Any]:
        """Fetch pull request metadata."""
        return self._make_request(f"/repos/{owner}/{repo}/pulls/{number}")

    def list_pull_request_files(self, owner: str, repo: str, number: str) -> List[Dict[str, Any]]:
        """
        List files changed by a pull request, following pagination.

        Returns:
            File entries with filename, additions, deletions and patch
        """
        files: List[Dict[str, Any]] = []
        page = 1
        while True:
            batch = self._make_request(
                f"/repos/{owner}/{repo}/pulls/{number}/files",
                params={"per_page": 100, "page": page}
            )
            files.extend(batch)
            if len(batch) < 100:
                return files
            page += 1
