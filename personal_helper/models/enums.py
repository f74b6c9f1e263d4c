"""
Status and type enums for the application.
"""
from enum import Enum


class ScenarioAction(str, Enum):
    """Action kinds a generated test scenario can perform."""

    CHECK_STYLE = "check_style"
    CHECK_TEXT = "check_text"
    CHECK_VISIBILITY = "check_visibility"
    CLICK = "click"


class RunStage(str, Enum):
    """Stages of a QA run, in execution order."""

    FETCH_TICKET = "fetch_ticket"
    EXTRACT_CRITERIA = "extract_criteria"
    PARSE_SCENARIOS = "parse_scenarios"
    EXECUTE_SCENARIOS = "execute_scenarios"
    GENERATE_REPORT = "generate_report"


class ChatRole(str, Enum):
    """Message roles in a chat assistant session."""

    USER = "user"
    ASSISTANT = "assistant"
