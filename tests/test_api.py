"""
HTTP-level tests for the FastAPI app with agents and upstream clients mocked.
"""
from unittest.mock import AsyncMock, Mock, patch
from fastapi.testclient import TestClient
from personal_helper.agent.qa_agent import CriteriaNotFoundError, QARunError
from personal_helper.api.pr_analyzer import get_pr_analyzer
from personal_helper.api.qa_agent import get_qa_agent
from personal_helper.api.ticket_creator import chat_store
from personal_helper.main import app
from personal_helper.models.enums import RunStage
from personal_helper.models.pull_request import PRAnalysisResult, PRInfo
from personal_helper.models.qa import TestResult, TestRun
from personal_helper.models.ticket import Ticket
from personal_helper.services.criteria_extractor import NO_ACCEPTANCE_CRITERIA
from personal_helper.services.jira_client import JiraClientError

client = TestClient(app)

TICKET = Ticket(key="WEB-7", summary="Homepage title", acceptance_criteria="Given a user", status="In QA")


def override(dependency, value):
    app.dependency_overrides[dependency] = lambda: value


def teardown_function():
    app.dependency_overrides.clear()


def test_health():
    response = client.get("/api/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert set(body["services"]) == {"prAnalyzer", "qaAgent", "ticketCreator"}


def test_qa_missing_input():
    response = client.post("/api/qa-agent/test", json={"ticketId": "WEB-7"})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing ticketId or portalUrl"}


def test_qa_success_body():
    results = [
        TestResult(description="Title", action="check_text", target="#title",
                   expected="Welcome", passed=True, actual="Welcome back"),
        TestResult(description="Logo", action="check_visibility", target="#logo",
                   expected="visible", passed=False, actual="hidden"),
    ]
    agent = Mock()
    agent.run = AsyncMock(return_value=TestRun(ticket=TICKET, results=results, report="1 of 2 passed"))
    override(get_qa_agent, agent)

    response = client.post(
        "/api/qa-agent/test",
        json={"ticketId": "https://acme.atlassian.net/browse/WEB-7", "portalUrl": "https://portal.test"},
    )

    assert response.status_code == 200
    agent.run.assert_awaited_once_with("WEB-7", "https://portal.test")
    body = response.json()
    assert body["success"] is True
    assert body["allTestsPassed"] is False
    assert body["ticket"] == {"key": "WEB-7", "summary": "Homepage title", "status": "In QA"}
    assert (body["results"]["total"], body["results"]["passed"], body["results"]["failed"]) == (2, 1, 1)
    assert body["results"]["tests"][0]["action"] == "check_text"
    assert "error" not in body["results"]["tests"][0]
    assert body["report"] == "1 of 2 passed"


def test_qa_missing_criteria():
    ticket = Ticket(key="WEB-8", summary="No AC", acceptance_criteria=NO_ACCEPTANCE_CRITERIA)
    agent = Mock()
    agent.run = AsyncMock(side_effect=CriteriaNotFoundError(ticket))
    override(get_qa_agent, agent)

    response = client.post("/api/qa-agent/test", json={"ticketId": "WEB-8", "portalUrl": "https://portal.test"})

    assert response.status_code == 400
    assert response.json() == {
        "error": "No acceptance criteria found in ticket",
        "ticket": {"key": "WEB-8", "summary": "No AC"},
    }


def test_qa_stage_failure():
    agent = Mock()
    agent.run = AsyncMock(side_effect=QARunError(RunStage.EXECUTE_SCENARIOS, "Failed to load https://portal.test"))
    override(get_qa_agent, agent)

    response = client.post("/api/qa-agent/test", json={"ticketId": "WEB-7", "portalUrl": "https://portal.test"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to load https://portal.test"}


def test_pr_analyze_success_body():
    analyzer = Mock()
    pr_info = PRInfo(owner="acme", repo="web", number="12", title="Add title", url="https://github.com/acme/web/pull/12")
    analyzer.analyze.return_value = (TICKET, [PRAnalysisResult(pr_info=pr_info, files_count=2, analysis="LGTM")])
    override(get_pr_analyzer, analyzer)

    response = client.post("/api/pr-analyzer/analyze", json={"ticketId": "WEB-7"})

    assert response.status_code == 200
    analyzer.analyze.assert_called_once_with("WEB-7", None)
    body = response.json()
    assert body["jiraTicket"]["acceptanceCriteria"] == "Given a user"
    assert body["results"][0]["prInfo"]["title"] == "Add title"
    assert body["results"][0]["filesCount"] == 2


def test_pr_analyze_missing_ticket():
    response = client.post("/api/pr-analyzer/analyze", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "Missing ticketId"}


def test_pr_analyze_jira_failure():
    analyzer = Mock()
    analyzer.analyze.side_effect = JiraClientError("Failed to fetch JIRA ticket WEB-7: 401")
    override(get_pr_analyzer, analyzer)

    response = client.post("/api/pr-analyzer/analyze", json={"ticketId": "WEB-7"})

    assert response.status_code == 500
    assert "WEB-7" in response.json()["error"]


def test_malformed_body_is_a_client_error():
    response = client.post(
        "/api/pr-analyzer/analyze", content="not json", headers={"Content-Type": "application/json"}
    )
    assert response.status_code == 400
    assert "error" in response.json()


@patch("personal_helper.agent.ticket_creator.create_ticket_content")
def test_ticket_generate(mock_content):
    mock_content.return_value = {"fields": {"summary": "Dark mode"}}

    response = client.post("/api/ticket-creator/generate", json={"taskDescription": "Add dark mode"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "ticketContent": {"fields": {"summary": "Dark mode"}}}


def test_ticket_generate_requires_description():
    response = client.post("/api/ticket-creator/generate", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "Task description is required"}


@patch("personal_helper.agent.ticket_creator.create_ticket")
@patch("personal_helper.agent.ticket_creator.create_ticket_content")
def test_ticket_create(mock_content, mock_create):
    mock_content.return_value = {"fields": {"summary": "Dark mode"}}
    mock_create.return_value = {"id": "10042", "key": "WEB-42"}

    response = client.post("/api/ticket-creator/create", json={"taskDescription": "Add dark mode"})

    assert response.status_code == 200
    assert response.json()["jiraResponse"] == {"id": "10042", "key": "WEB-42"}


@patch("personal_helper.agent.ticket_creator.create_ticket_content")
def test_ticket_generate_empty_draft(mock_content):
    mock_content.return_value = None
    response = client.post("/api/ticket-creator/generate", json={"taskDescription": "Add dark mode"})
    assert response.status_code == 500


@patch("personal_helper.services.llm_client.chat_reply")
@patch("personal_helper.agent.ticket_creator.create_ticket")
@patch("personal_helper.agent.ticket_creator.create_ticket_content")
def test_chat_flow(mock_content, mock_create, mock_reply):
    mock_reply.return_value = "Who is this for?"
    mock_content.return_value = {"fields": {"summary": "Dark mode"}}
    mock_create.return_value = {"key": "WEB-43"}

    start = client.post("/api/ticket-creator/chat/start").json()
    session_id = start["sessionId"]
    assert start["success"] is True
    assert start["message"]

    reply = client.post(
        "/api/ticket-creator/chat/message", json={"sessionId": session_id, "message": "Add dark mode"}
    ).json()
    assert reply == {"success": True, "message": "Who is this for?", "stage": "initial", "isComplete": False}
    history = mock_reply.call_args[0][0]
    assert [m["role"] for m in history] == ["assistant", "user"]

    generated = client.post("/api/ticket-creator/chat/generate", json={"sessionId": session_id}).json()
    assert generated["taskDescription"] == "Add dark mode"
    mock_content.assert_called_with("Add dark mode")

    created = client.post("/api/ticket-creator/chat/create", json={"sessionId": session_id})
    assert created.status_code == 200
    assert created.json()["jiraResponse"] == {"key": "WEB-43"}

    gone = client.post("/api/ticket-creator/chat/generate", json={"sessionId": session_id})
    assert gone.status_code == 404
    assert gone.json() == {"error": "Session not found"}


@patch("personal_helper.services.llm_client.chat_reply")
def test_chat_completes_after_enough_messages(mock_reply):
    mock_reply.return_value = "Next question?"
    session_id = client.post("/api/ticket-creator/chat/start").json()["sessionId"]

    completions = [
        client.post(
            "/api/ticket-creator/chat/message", json={"sessionId": session_id, "message": f"answer {i}"}
        ).json()["isComplete"]
        for i in range(9)
    ]

    assert completions == [False] * 8 + [True]
    chat_store.delete(session_id)


def test_chat_message_validation():
    response = client.post("/api/ticket-creator/chat/message", json={"sessionId": "session_x"})
    assert response.status_code == 400
    assert response.json() == {"error": "Session ID and message are required"}

    response = client.post("/api/ticket-creator/chat/message", json={"sessionId": "session_x", "message": "hi"})
    assert response.status_code == 404

    response = client.post("/api/ticket-creator/chat/create", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "Session ID is required"}
