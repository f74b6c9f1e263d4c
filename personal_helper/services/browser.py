"""
Thin Playwright adapter used by the scenario executor.

The executor only talks to BrowserSession and BrowserPage, so tests can pass
in-memory fakes with the same methods.
"""
from typing import Dict, Optional
from playwright.async_api import async_playwright, Browser, ElementHandle, Page, Playwright

_COMPUTED_STYLE_JS = """el => {
    const computed = window.getComputedStyle(el);
    return {
        backgroundColor: computed.backgroundColor,
        color: computed.color,
        fontSize: computed.fontSize,
    };
}"""


class BrowserPage:
    """A loaded page."""

    def __init__(self, page: Page, action_timeout_ms: int):
        self._page = page
        self._action_timeout_ms = action_timeout_ms

    async def locate(self, selector: str) -> Optional[ElementHandle]:
        """First element matching `selector`, or None if absent."""
        return await self._page.query_selector(selector)

    async def read_computed_style(self, handle: ElementHandle) -> Dict[str, str]:
        """Computed backgroundColor, color and fontSize of an element."""
        return await self._page.evaluate(_COMPUTED_STYLE_JS, handle)

    async def read_text(self, selector: str) -> str:
        """Text content of the first matching element; raises at once if nothing matches."""
        text = await self._page.eval_on_selector(selector, "el => el.textContent")
        return text or ""

    async def click(self, selector: str) -> None:
        """Click the element, waiting at most the action timeout for it to appear."""
        await self._page.click(selector, timeout=self._action_timeout_ms)


class BrowserSession:
    """One Playwright driver plus one Chromium instance."""

    def __init__(self, playwright: Playwright, browser: Browser, action_timeout_ms: int = 5000):
        self._playwright = playwright
        self._browser = browser
        self._action_timeout_ms = action_timeout_ms

    async def open(self, url: str, timeout_ms: int) -> BrowserPage:
        """
        Open a new page and navigate to `url`, waiting for network idle.

        Raises:
            playwright.async_api.Error: On timeout or navigation failure
        """
        page = await self._browser.new_page()
        await page.goto(url, wait_until="networkidle", timeout=timeout_ms)
        return BrowserPage(page, self._action_timeout_ms)

    async def close(self) -> None:
        try:
            await self._browser.close()
        finally:
            await self._playwright.stop()


async def launch_browser(headless: bool = True, action_timeout_ms: int = 5000) -> BrowserSession:
    """Start Playwright and launch Chromium."""
    playwright = await async_playwright().start()
    try:
        browser = await playwright.chromium.launch(headless=headless)
    except Exception:
        await playwright.stop()
        raise
    return BrowserSession(playwright, browser, action_timeout_ms)
