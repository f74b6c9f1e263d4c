"""
Tests for the Playwright adapter with the Playwright objects mocked.
"""
import asyncio
import pytest
from unittest.mock import AsyncMock, Mock, patch
from personal_helper.services.browser import BrowserPage, BrowserSession, launch_browser


def make_playwright(browser=None, launch_error=None):
    playwright = Mock()
    playwright.stop = AsyncMock()
    if launch_error:
        playwright.chromium.launch = AsyncMock(side_effect=launch_error)
    else:
        playwright.chromium.launch = AsyncMock(return_value=browser or Mock())
    return playwright


def make_browser(page=None):
    browser = Mock()
    browser.new_page = AsyncMock(return_value=page or Mock())
    browser.close = AsyncMock()
    return browser


def test_click_uses_action_timeout():
    """A missing click target fails after the action timeout, not Playwright's 30 s default."""
    page = Mock()
    page.click = AsyncMock()

    asyncio.run(BrowserPage(page, action_timeout_ms=1500).click("#menu"))

    page.click.assert_awaited_once_with("#menu", timeout=1500)


def test_read_text_of_empty_element():
    page = Mock()
    page.eval_on_selector = AsyncMock(return_value=None)

    assert asyncio.run(BrowserPage(page, action_timeout_ms=1500).read_text("#empty")) == ""
    assert page.eval_on_selector.call_args[0][0] == "#empty"


def test_locate_absent_element():
    page = Mock()
    page.query_selector = AsyncMock(return_value=None)

    assert asyncio.run(BrowserPage(page, action_timeout_ms=1500).locate("#banner")) is None


def test_open_waits_for_network_idle_and_passes_timeout():
    raw_page = Mock()
    raw_page.goto = AsyncMock()
    raw_page.click = AsyncMock()
    browser = make_browser(raw_page)
    session = BrowserSession(make_playwright(browser), browser, action_timeout_ms=2000)

    page = asyncio.run(session.open("https://portal.test", timeout_ms=30000))

    raw_page.goto.assert_awaited_once_with("https://portal.test", wait_until="networkidle", timeout=30000)
    asyncio.run(page.click("#go"))
    raw_page.click.assert_awaited_once_with("#go", timeout=2000)


def test_close_stops_driver_even_if_browser_close_fails():
    browser = make_browser()
    browser.close.side_effect = RuntimeError("Browser has been closed")
    playwright = make_playwright(browser)
    session = BrowserSession(playwright, browser)

    with pytest.raises(RuntimeError):
        asyncio.run(session.close())

    playwright.stop.assert_awaited_once()


@patch("personal_helper.services.browser.async_playwright")
def test_launch_browser(mock_async_playwright):
    browser = make_browser()
    playwright = make_playwright(browser)
    mock_async_playwright.return_value.start = AsyncMock(return_value=playwright)

    session = asyncio.run(launch_browser(headless=False, action_timeout_ms=3000))

    playwright.chromium.launch.assert_awaited_once_with(headless=False)
    assert isinstance(session, BrowserSession)
    playwright.stop.assert_not_awaited()


@patch("personal_helper.services.browser.async_playwright")
def test_failed_launch_stops_driver(mock_async_playwright):
    playwright = make_playwright(launch_error=RuntimeError("Executable doesn't exist"))
    mock_async_playwright.return_value.start = AsyncMock(return_value=playwright)

    with pytest.raises(RuntimeError, match="Executable"):
        asyncio.run(launch_browser())

    playwright.stop.assert_awaited_once()
