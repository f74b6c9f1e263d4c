"""
Executes test scenarios against a live page.

One browser session and one page per run; the page is loaded once and the
scenarios run against it in order, so a click can set up state for the checks
after it. A failing scenario is recorded in its own result. A failed navigation
aborts the run. The session is closed exactly once either way.
"""
import json
import logging
from typing import Awaitable, Callable, Dict, List, Optional, Sequence
from personal_helper.config import settings
from personal_helper.models.qa import (
    CheckStyle,
    CheckText,
    CheckVisibility,
    Click,
    TestResult,
    TestScenario,
)
from personal_helper.services.browser import BrowserPage, BrowserSession, launch_browser

logger = logging.getLogger(__name__)


class NavigationError(Exception):
    """Raised when the portal page cannot be loaded; no scenario has run."""
    pass


class ElementNotFoundError(Exception):
    """Raised when a scenario's target selector matches nothing."""
    pass


Launcher = Callable[[], Awaitable[BrowserSession]]


def _default_launcher() -> Awaitable[BrowserSession]:
    return launch_browser(headless=not settings.debug_playwright, action_timeout_ms=settings.action_timeout_ms)


class ScenarioExecutor:
    """Runs an ordered scenario list in a single headless browser session."""

    def __init__(self, launcher: Optional[Launcher] = None, navigation_timeout_ms: Optional[int] = None):
        """
        Args:
            launcher: Coroutine factory returning a new browser session
            navigation_timeout_ms: Page load timeout (defaults to NAVIGATION_TIMEOUT_MS)
        """
        self.launcher = launcher or _default_launcher
        self.navigation_timeout_ms = navigation_timeout_ms or settings.navigation_timeout_ms
        self._handlers: Dict[type, Callable[[BrowserPage, TestScenario], Awaitable[TestResult]]] = {
            CheckStyle: self._check_style,
            CheckText: self._check_text,
            CheckVisibility: self._check_visibility,
            Click: self._click,
        }

    async def execute(self, scenarios: Sequence[TestScenario], portal_url: str) -> List[TestResult]:
        """
        Open `portal_url` and run every scenario against it.

        Args:
            scenarios: Scenarios in execution order
            portal_url: Page under test

        Returns:
            One result per scenario, in the same order

        Raises:
            NavigationError: If the page cannot be loaded within the timeout
        """
        session = await self.launcher()
        try:
            try:
                page = await session.open(portal_url, timeout_ms=self.navigation_timeout_ms)
            except Exception as e:
                raise NavigationError(f"Failed to load {portal_url}: {str(e)}") from e

            results = []
            for scenario in scenarios:
                result = await self._run_scenario(page, scenario)
                logger.info(
                    "Scenario %s %s -> %s",
                    scenario.action,
                    scenario.target,
                    "passed" if result.passed else "failed"
                )
                results.append(result)
            return results
        finally:
            await session.close()

    async def _run_scenario(self, page: BrowserPage, scenario: TestScenario) -> TestResult:
        handler = self._handlers[type(scenario)]
        try:
            return await handler(page, scenario)
        except Exception as e:
            return TestResult.for_scenario(scenario, passed=False, error=str(e))

    async def _check_style(self, page: BrowserPage, scenario: CheckStyle) -> TestResult:
        element = await page.locate(scenario.target)
        if element is None:
            raise ElementNotFoundError(f"Element not found: {scenario.target}")
        styles = await page.read_computed_style(element)
        actual = json.dumps(styles, separators=(",", ":"))
        passed = scenario.expected.lower() in actual.lower()
        return TestResult.for_scenario(scenario, passed=passed, actual=actual)

    async def _check_text(self, page: BrowserPage, scenario: CheckText) -> TestResult:
        text = await page.read_text(scenario.target)
        return TestResult.for_scenario(scenario, passed=scenario.expected in text, actual=text)

    async def _check_visibility(self, page: BrowserPage, scenario: CheckVisibility) -> TestResult:
        actual = "visible" if await page.locate(scenario.target) is not None else "hidden"
        # "expected" is free text; it passes when it mentions the observed state anywhere
        passed = actual in scenario.expected.lower()
        return TestResult.for_scenario(scenario, passed=passed, actual=actual)

    async def _click(self, page: BrowserPage, scenario: Click) -> TestResult:
        await page.click(scenario.target)
        return TestResult.for_scenario(scenario, passed=True, actual="clicked")
