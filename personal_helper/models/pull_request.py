"""
Pull request models for the PR analyzer.
"""
from pydantic import BaseModel, Field


class PRInfo(BaseModel):
    """Identity of a GitHub pull request."""

    owner: str
    repo: str
    number: str = Field(..., description="PR number as it appeared in the URL")
    title: str = ""
    url: str


class PRAnalysisResult(BaseModel):
    """Claude's review of one pull request."""

    pr_info: PRInfo = Field(..., serialization_alias="prInfo")
    files_count: int = Field(..., serialization_alias="filesCount")
    analysis: str
