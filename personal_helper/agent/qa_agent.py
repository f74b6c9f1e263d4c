"""
Core orchestration for the ticket-driven QA agent.

A run moves through five stages with no branching back:
fetch ticket, extract criteria, parse scenarios, execute scenarios, generate report.
Any stage failure ends the run with a QARunError naming the stage. Failed
scenarios are not a run failure; they are reported in the TestRun.
"""
import asyncio
import logging
from typing import Callable, Optional
from personal_helper.models.enums import RunStage
from personal_helper.models.qa import TestRun
from personal_helper.models.ticket import Ticket
from personal_helper.services.criteria_extractor import has_acceptance_criteria
from personal_helper.services.jira_client import JiraClient
from personal_helper.services import llm_client
from personal_helper.services.report_generator import generate_test_report
from personal_helper.services.scenario_executor import ScenarioExecutor
from personal_helper.services.scenario_parser import parse_acceptance_criteria

logger = logging.getLogger(__name__)


class QARunError(Exception):
    """Raised when a QA run stops before producing a TestRun."""

    def __init__(self, stage: RunStage, message: str):
        super().__init__(message)
        self.stage = stage


class CriteriaNotFoundError(QARunError):
    """Raised when the ticket has no acceptance criteria to test."""

    def __init__(self, ticket: Ticket):
        super().__init__(RunStage.EXTRACT_CRITERIA, "No acceptance criteria found in ticket")
        self.ticket = ticket


class QAAgent:
    """
    Runs acceptance tests for a Jira ticket against a portal URL.

    This class only sequences the stages; each stage lives in its own service.
    """

    def __init__(
        self,
        jira_client_factory: Callable[[], JiraClient] = JiraClient,
        executor: Optional[ScenarioExecutor] = None,
        complete: Optional[Callable[[str, str, int], str]] = None
    ):
        """
        Args:
            jira_client_factory: Builds the Jira client (credentials checked on creation)
            executor: Scenario executor (defaults to a Playwright-backed one)
            complete: Claude completion function used for parsing and reporting
        """
        self.jira_client_factory = jira_client_factory
        self.executor = executor or ScenarioExecutor()
        self.complete = complete or llm_client.complete

    async def run(self, ticket_id: str, portal_url: str) -> TestRun:
        """
        Execute one QA run.

        Args:
            ticket_id: Jira ticket ID
            portal_url: URL of the page under test

        Returns:
            TestRun with one result per generated scenario

        Raises:
            CriteriaNotFoundError: If the ticket has no acceptance criteria
            QARunError: If any other stage fails
        """
        stage = RunStage.FETCH_TICKET
        try:
            logger.info("QA run %s: fetching ticket", ticket_id)
            ticket = await asyncio.to_thread(self._fetch_ticket, ticket_id)

            stage = RunStage.EXTRACT_CRITERIA
            if not has_acceptance_criteria(ticket.acceptance_criteria):
                raise CriteriaNotFoundError(ticket)

            stage = RunStage.PARSE_SCENARIOS
            scenarios = await asyncio.to_thread(
                parse_acceptance_criteria,
                ticket.acceptance_criteria,
                ticket.summary,
                ticket.description,
                self.complete
            )
            logger.info("QA run %s: %d scenario(s) parsed", ticket_id, len(scenarios))

            stage = RunStage.EXECUTE_SCENARIOS
            results = await self.executor.execute(scenarios, portal_url)

            stage = RunStage.GENERATE_REPORT
            report = await asyncio.to_thread(
                generate_test_report, ticket.key, ticket.summary, results, self.complete
            )
        except QARunError:
            raise
        except Exception as e:
            logger.error("QA run %s failed at %s: %s", ticket_id, stage.value, e)
            raise QARunError(stage, str(e)) from e

        run = TestRun(ticket=ticket, results=results, report=report)
        logger.info("QA run %s: %d/%d passed", ticket_id, run.passed_count, run.total_count)
        return run

    def _fetch_ticket(self, ticket_id: str) -> Ticket:
        return self.jira_client_factory().fetch_ticket(ticket_id)
