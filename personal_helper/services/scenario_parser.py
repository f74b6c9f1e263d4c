"""
Turns acceptance criteria into typed test scenarios via Claude.

Model output is untrusted. Anything that cannot be read as a scenario payload
degrades to an empty list; it never raises into the QA run. API failures of the
model call itself still propagate as LLMClientError.
"""
import json
import logging
from typing import Any, Callable, Dict, List, Optional
from pydantic import TypeAdapter, ValidationError
from personal_helper.agent.prompt import SCENARIO_SYSTEM_PROMPT, get_scenario_prompt
from personal_helper.models.qa import TestScenario
from personal_helper.services import llm_client

logger = logging.getLogger(__name__)

SCENARIO_MAX_TOKENS = 2000

_scenario_adapter = TypeAdapter(TestScenario)


def extract_json_payload(text: str) -> Optional[Dict[str, Any]]:
    """
    Parse the JSON object embedded in free-form model output.

    Takes the span from the first "{" to the last "}" so surrounding prose is
    tolerated.

    Args:
        text: Raw model output

    Returns:
        The decoded object, or None if there is no parseable object
    """
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end < start:
        return None

    try:
        payload = json.loads(text[start:end + 1])
    except json.JSONDecodeError:
        return None

    return payload if isinstance(payload, dict) else None


def scenarios_from_payload(payload: Optional[Dict[str, Any]]) -> List[TestScenario]:
    """
    Validate the "scenarios" list of a payload.

    Entries that are not a known scenario kind are skipped.
    """
    if not payload:
        return []

    raw_scenarios = payload.get("scenarios")
    if not isinstance(raw_scenarios, list):
        return []

    scenarios: List[TestScenario] = []
    for index, raw in enumerate(raw_scenarios):
        try:
            scenarios.append(_scenario_adapter.validate_python(raw))
        except ValidationError as e:
            logger.warning("Skipping invalid scenario #%d: %s", index, e.errors()[0].get("msg", str(e)))
    return scenarios


def parse_acceptance_criteria(
    acceptance_criteria: str,
    summary: str,
    description: str,
    complete: Callable[[str, str, int], str] = llm_client.complete
) -> List[TestScenario]:
    """
    Generate ordered test scenarios for a ticket.

    Args:
        acceptance_criteria: Extracted criteria text
        summary: Ticket summary
        description: Ticket description
        complete: Completion function (system, user, max_tokens) -> text

    Returns:
        Scenarios in execution order; empty when the model output is unusable

    Raises:
        LLMClientError: If the model call fails
    """
    response = complete(
        SCENARIO_SYSTEM_PROMPT,
        get_scenario_prompt(acceptance_criteria, summary, description),
        SCENARIO_MAX_TOKENS
    )

    payload = extract_json_payload(response)
    if payload is None:
        logger.warning("Scenario response contained no parseable JSON object; continuing with no scenarios")

    return scenarios_from_payload(payload)
