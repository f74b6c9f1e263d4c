"""
Prose test report generation via Claude.
"""
import json
from typing import Callable, Sequence
from personal_helper.agent.prompt import REPORT_SYSTEM_PROMPT, get_report_prompt
from personal_helper.models.qa import TestResult
from personal_helper.services import llm_client

REPORT_MAX_TOKENS = 1500


def generate_test_report(
    ticket_key: str,
    summary: str,
    results: Sequence[TestResult],
    complete: Callable[[str, str, int], str] = llm_client.complete
) -> str:
    """
    Summarize executed scenarios into a human-readable report.

    The report is opaque text; it is not parsed.

    Raises:
        LLMClientError: If the model call fails
    """
    results_json = json.dumps([r.model_dump(mode="json", exclude_none=True) for r in results], indent=2)
    return complete(REPORT_SYSTEM_PROMPT, get_report_prompt(ticket_key, summary, results_json), REPORT_MAX_TOKENS)
