"""
Environment configuration and constants.
"""
from typing import Any, Optional, List
from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings

# Load environment variables from .env file at module import time
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    api_title: str = "Personal Helper API"
    api_version: str = "0.1.0"
    port: int = 3000

    # Anthropic Configuration (PR analysis, QA agent)
    anthropic_api_key: Optional[str] = None
    anthropic_model: str = "claude-3-5-sonnet-20241022"

    # OpenAI Configuration (ticket creator, chat assistant)
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-5-mini"

    # Jira Configuration
    jira_host: Optional[str] = None
    jira_email: Optional[str] = None
    jira_api_token: Optional[str] = None
    jira_project_id: str = "10000"
    jira_ticket_labels: str = "automation"
    jira_acceptance_criteria_field: str = "customfield_10115"
    jira_api_timeout: int = 30

    # GitHub Configuration
    github_token: Optional[str] = None
    github_api_url: str = "https://api.github.com"

    # Browser Configuration
    debug_playwright: bool = False
    navigation_timeout_ms: int = 30000
    action_timeout_ms: int = 5000

    # Chat assistant sessions
    chat_session_ttl_seconds: int = 3600
    chat_reaper_interval_seconds: int = 300

    # Application Configuration
    cors_allowed_origins: str = ""
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Ignore extra environment variables that aren't defined in the model

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        """logging only accepts upper-case level names."""
        return v.strip().upper() if isinstance(v, str) else v

    @property
    def jira_base_url(self) -> str:
        """Jira base URL; JIRA_HOST may be a bare host name or a full URL."""
        host = (self.jira_host or "").strip().rstrip("/")
        if host and not host.startswith(("http://", "https://")):
            host = f"https://{host}"
        return host

    @property
    def extra_cors_origins(self) -> List[str]:
        """Comma-separated CORS_ALLOWED_ORIGINS as a list."""
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]


# Global settings instance
settings = Settings()
