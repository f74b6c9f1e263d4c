"""
Tests for acceptance criteria extraction from Jira issue fields.
"""
from personal_helper.services.criteria_extractor import (
    NO_ACCEPTANCE_CRITERIA,
    extract_acceptance_criteria,
    flatten_adf_to_text,
    has_acceptance_criteria,
)


def test_dedicated_field_wins():
    """The dedicated custom field is returned trimmed, ignoring everything else."""
    fields = {
        "customfield_10115": "  Given a user\nThen it works  \n",
        "customfield_10000": "Acceptance: something else",
        "description": "h2. Acceptance Criteria\nFrom the description",
    }
    assert extract_acceptance_criteria(fields) == "Given a user\nThen it works"


def test_dedicated_field_adf_is_flattened():
    fields = {
        "customfield_10115": {
            "type": "doc",
            "content": [
                {"type": "paragraph", "content": [{"type": "text", "text": "Given a logged in user"}]},
            ],
        }
    }
    assert extract_acceptance_criteria(fields) == "Given a logged in user"


def test_fallback_field_needs_a_marker():
    """Fallback fields are only used when they look like criteria."""
    fields = {
        "customfield_10000": "Sprint 14",
        "customfield_10001": "When the page loads the banner shows",
    }
    assert extract_acceptance_criteria(fields) == "When the page loads the banner shows"


def test_fallback_field_returned_verbatim():
    fields = {"customfield_10100": "  Then the total is updated  "}
    assert extract_acceptance_criteria(fields) == "  Then the total is updated  "


def test_wiki_heading_section():
    """An h2 section is collected up to the next heading."""
    fields = {
        "description": "h2. Acceptance Criteria\nGiven a user\nWhen they click\nThen it works\nh2. Notes\nignore this"
    }
    assert extract_acceptance_criteria(fields) == "Given a user\nWhen they click\nThen it works"


def test_markdown_heading_section():
    fields = {
        "description": "Intro text\n## Acceptance Criteria\n- The button is blue\n- The title says Hello\n## Design\nFigma link"
    }
    assert extract_acceptance_criteria(fields) == "- The button is blue\n- The title says Hello"


def test_bold_heading_section_stops_at_code_block():
    fields = {
        "description": "*Acceptance Criteria:*\nThe header is sticky on scroll\n{code}\nconsole.log(1)\n{code}"
    }
    assert extract_acceptance_criteria(fields) == "The header is sticky on scroll"


def test_short_section_is_ignored():
    fields = {"description": "h2. Acceptance Criteria\nTBD\nh2. Notes"}
    assert extract_acceptance_criteria(fields) == NO_ACCEPTANCE_CRITERIA


def test_no_criteria_anywhere():
    fields = {"summary": "Fix login", "description": "Just a plain description"}
    assert extract_acceptance_criteria(fields) == NO_ACCEPTANCE_CRITERIA
    assert not has_acceptance_criteria(extract_acceptance_criteria(fields))


def test_extraction_is_idempotent():
    fields = {
        "description": "h3. Acceptance criteria\nGiven a cart with items\nThen checkout is enabled"
    }
    assert extract_acceptance_criteria(fields) == extract_acceptance_criteria(fields)


def test_custom_criteria_field():
    fields = {"customfield_20000": "Given a custom field", "customfield_10115": "Not this one"}
    assert extract_acceptance_criteria(fields, criteria_field="customfield_20000") == "Given a custom field"


def test_adf_description_section():
    """ADF headings flatten to markdown so the section is still found."""
    adf = {
        "type": "doc",
        "content": [
            {"type": "heading", "attrs": {"level": 2}, "content": [{"type": "text", "text": "Acceptance Criteria"}]},
            {
                "type": "bulletList",
                "content": [
                    {"type": "listItem", "content": [
                        {"type": "paragraph", "content": [{"type": "text", "text": "Logo is visible"}]}
                    ]},
                    {"type": "listItem", "content": [
                        {"type": "paragraph", "content": [{"type": "text", "text": "Footer is dark"}]}
                    ]},
                ],
            },
            {"type": "heading", "attrs": {"level": 2}, "content": [{"type": "text", "text": "Notes"}]},
        ],
    }
    assert flatten_adf_to_text(adf) == "## Acceptance Criteria\n- Logo is visible\n- Footer is dark\n## Notes"
    assert extract_acceptance_criteria({"description": adf}) == "- Logo is visible\n- Footer is dark"


def test_flatten_adf_passthrough():
    assert flatten_adf_to_text("plain") == "plain"
    assert flatten_adf_to_text(None) == ""
    assert flatten_adf_to_text(42) == ""
