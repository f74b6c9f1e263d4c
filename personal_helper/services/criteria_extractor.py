"""
Acceptance criteria extraction from raw Jira issue fields.

Trackers store acceptance criteria in different places: a dedicated custom
field, some other custom field, or an "Acceptance Criteria" section of the
description. This module checks them in that order. It is a pure function of
the issue fields and never calls Jira.
"""
import re
from typing import Dict, Any, List, Optional, Sequence

NO_ACCEPTANCE_CRITERIA = "No acceptance criteria found"

DEFAULT_CRITERIA_FIELD = "customfield_10115"

# Scanned in this order when the dedicated field is empty
FALLBACK_CRITERIA_FIELDS = (
    "customfield_10000", "customfield_10001", "customfield_10002",
    "customfield_10003", "customfield_10004", "customfield_10005",
    "customfield_10100", "customfield_10101", "customfield_10102",
)

CRITERIA_MARKERS = ("accept", "criteria", "given", "when", "then")

MIN_CRITERIA_LENGTH = 10

_HEADING_PATTERNS = (
    re.compile(r"^h\d\.\s*acceptance criteria", re.IGNORECASE),
    re.compile(r"^#+\s*acceptance criteria", re.IGNORECASE),
    re.compile(r"^\*?acceptance criteria:?\*?$", re.IGNORECASE),
)
_SECTION_BREAK = re.compile(r"^(h\d\.|#+\s)")


def has_acceptance_criteria(text: Optional[str]) -> bool:
    """True unless `text` is empty or the not-found sentinel."""
    return bool(text) and text != NO_ACCEPTANCE_CRITERIA


def flatten_adf_to_text(adf_content: Any) -> str:
    """
    Flatten Atlassian Document Format (ADF) to plain text.

    Block-level nodes (paragraphs, headings, list items) each become one line so
    that line-oriented heading detection keeps working. Headings are rendered in
    markdown style ("## Title").

    Args:
        adf_content: ADF content (dict) or plain text (str)

    Returns:
        Flattened text, or empty string for anything else
    """
    if not adf_content:
        return ""
    if isinstance(adf_content, str):
        return adf_content
    if not isinstance(adf_content, dict):
        return ""

    def inline_text(node: Dict[str, Any]) -> str:
        if node.get("type") == "text":
            return node.get("text", "")
        return "".join(inline_text(child) for child in node.get("content", []) if isinstance(child, dict))

    lines: List[str] = []

    def walk(node: Dict[str, Any]) -> None:
        node_type = node.get("type", "")
        if node_type == "heading":
            level = node.get("attrs", {}).get("level", 1)
            lines.append(f"{'#' * level} {inline_text(node)}")
        elif node_type == "paragraph":
            lines.append(inline_text(node))
        elif node_type == "listItem":
            lines.append(f"- {inline_text(node)}")
        else:
            for child in node.get("content", []):
                if isinstance(child, dict):
                    walk(child)

    walk(adf_content)
    return "\n".join(lines).strip()


def _criteria_from_description(description: str) -> str:
    """Collect the lines under an "Acceptance Criteria" heading, up to the next section."""
    in_criteria = False
    collected: List[str] = []

    for line in description.split("\n"):
        trimmed = line.strip()

        if any(pattern.match(trimmed) for pattern in _HEADING_PATTERNS):
            in_criteria = True
            continue

        if in_criteria:
            if trimmed.startswith("{") or _SECTION_BREAK.match(trimmed):
                break
            if trimmed:
                collected.append(line)

    return "\n".join(collected).strip()


def extract_acceptance_criteria(
    fields: Dict[str, Any],
    criteria_field: str = DEFAULT_CRITERIA_FIELD,
    fallback_fields: Sequence[str] = FALLBACK_CRITERIA_FIELDS
) -> str:
    """
    Extract acceptance criteria text from Jira issue fields.

    Args:
        fields: The issue's `fields` mapping as returned by the Jira REST API
        criteria_field: Dedicated acceptance criteria custom field ID
        fallback_fields: Other custom fields to scan, in priority order

    Returns:
        The criteria text, or NO_ACCEPTANCE_CRITERIA
    """
    dedicated = fields.get(criteria_field)
    if isinstance(dedicated, dict):
        dedicated = flatten_adf_to_text(dedicated)
    if isinstance(dedicated, str) and dedicated.strip():
        return dedicated.strip()

    for field_id in fallback_fields:
        value = fields.get(field_id)
        if isinstance(value, str) and value.strip():
            lowered = value.lower()
            if any(marker in lowered for marker in CRITERIA_MARKERS):
                return value

    description = flatten_adf_to_text(fields.get("description"))
    extracted = _criteria_from_description(description)
    if extracted and not extracted.startswith("{") and len(extracted) > MIN_CRITERIA_LENGTH:
        return extracted

    return NO_ACCEPTANCE_CRITERIA
