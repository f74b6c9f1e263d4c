"""
Scenario, result and run models for the ticket-driven QA agent.

Scenarios form a closed union discriminated on `action`; anything the language
model emits outside these four kinds never reaches the executor.
"""
from pydantic import BaseModel, Field, field_validator
from typing import Annotated, Any, List, Optional, Union, Literal
from personal_helper.models.enums import ScenarioAction
from personal_helper.models.ticket import Ticket


class ScenarioBase(BaseModel):
    """Fields shared by every scenario kind."""

    description: str = Field(default="", description="Human-readable step description")
    target: str = Field(..., description="CSS selector locating the page element")
    value: Optional[str] = Field(default=None, description="Optional auxiliary value")

    @field_validator("description", mode="before")
    @classmethod
    def coerce_null_description(cls, v: Any) -> Any:
        """Models sometimes send null for a step without a description."""
        return "" if v is None else v


class CheckStyle(ScenarioBase):
    """Compare the element's computed style against `expected`."""

    action: Literal["check_style"] = "check_style"
    expected: str = Field(..., description="Substring expected in the computed style JSON")


class CheckText(ScenarioBase):
    """Compare the element's text content against `expected`."""

    action: Literal["check_text"] = "check_text"
    expected: str = Field(..., description="Substring expected in the element text")


class CheckVisibility(ScenarioBase):
    """Check whether the element is present in the rendered page."""

    action: Literal["check_visibility"] = "check_visibility"
    expected: str = Field(..., description="Text mentioning 'visible' or 'hidden'")


class Click(ScenarioBase):
    """Click the element."""

    action: Literal["click"] = "click"
    expected: str = Field(default="", description="Optional note on the expected outcome")

    @field_validator("expected", mode="before")
    @classmethod
    def coerce_null_expected(cls, v: Any) -> Any:
        """A click has nothing to assert; null is as good as empty."""
        return "" if v is None else v


TestScenario = Annotated[
    Union[CheckStyle, CheckText, CheckVisibility, Click],
    Field(discriminator="action"),
]


class TestResult(BaseModel):
    """Outcome of executing one scenario."""

    __test__ = False

    description: str
    action: ScenarioAction
    target: str
    expected: str
    passed: bool
    actual: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def for_scenario(cls, scenario: ScenarioBase, **outcome) -> "TestResult":
        """Build a result echoing the scenario's identifying fields."""
        return cls(
            description=scenario.description,
            action=scenario.action,
            target=scenario.target,
            expected=scenario.expected,
            **outcome
        )


class TestRun(BaseModel):
    """Aggregate of one QA run. Created per request and never persisted."""

    __test__ = False

    ticket: Ticket
    results: List[TestResult] = Field(default_factory=list)
    report: str = ""

    @property
    def total_count(self) -> int:
        return len(self.results)

    @property
    def passed_count(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed_count(self) -> int:
        return self.total_count - self.passed_count

    @property
    def all_passed(self) -> bool:
        return self.passed_count == self.total_count
