"""Playwright implementation of the portal page interface."""

import logging

from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from playwright.async_api import Page

from unlock_automation.browser.models import SelectOption
from unlock_automation.browser.page import PortalPage

logger = logging.getLogger(__name__)

OPTIONS_SCRIPT = """
    (options) => options.map(option => ({
        value: option.value || "",
        label: (option.textContent || "").trim(),
    }))
"""


class PlaywrightPage(PortalPage):
    """Portal page backed by a Playwright ``Page``.

    Errors from Playwright propagate to the caller, except for timeouts in
    ``wait_for_selector``, which mean "not present".
    """

    def __init__(self, page: Page, default_timeout: int = 30000) -> None:
        """Wrap a Playwright page.

        Args:
            page: Playwright page, already configured by the session manager
            default_timeout: Timeout in ms used when a call passes none
        """
        self._page = page
        self._default_timeout = default_timeout

    @property
    def raw(self) -> Page:
        """Underlying Playwright page."""
        return self._page

    @property
    def url(self) -> str:
        """Get current page URL."""
        return self._page.url

    def _timeout(self, timeout: int | None) -> int:
        return timeout if timeout is not None else self._default_timeout

    async def navigate(self, url: str, timeout: int | None = None) -> None:
        """Navigate to URL."""
        response = await self._page.goto(url, timeout=self._timeout(timeout))
        if response is not None and not response.ok:
            logger.warning(f"Navigation to {url} returned HTTP {response.status}")

    async def wait_for_selector(self, selector: str, timeout: int) -> bool:
        """Wait for an element to become visible."""
        try:
            await self._page.wait_for_selector(selector, state="visible", timeout=timeout)
            return True
        except PlaywrightTimeoutError:
            return False

    async def exists(self, selector: str) -> bool:
        """Check for a matching element without waiting."""
        return await self._page.query_selector(selector) is not None

    async def fill(self, selector: str, value: str, timeout: int | None = None) -> None:
        """Fill a form field."""
        await self._page.fill(selector, value, timeout=self._timeout(timeout))

    async def click(self, selector: str, timeout: int | None = None) -> None:
        """Click an element."""
        await self._page.click(selector, timeout=self._timeout(timeout))

    async def check(self, selector: str, timeout: int | None = None) -> None:
        """Tick a checkbox."""
        await self._page.check(selector, timeout=self._timeout(timeout))

    async def select_option(self, selector: str, value: str, timeout: int | None = None) -> None:
        """Select option from dropdown."""
        await self._page.select_option(selector, value=value, timeout=self._timeout(timeout))

    async def option_list(self, selector: str) -> list[SelectOption]:
        """Read dropdown options."""
        options = await self._page.eval_on_selector_all(f"{selector} option", OPTIONS_SCRIPT)
        return [SelectOption(**option) for option in options]

    async def text_content(self, selector: str = "body") -> str | None:
        """Get element text content."""
        return await self._page.text_content(selector, timeout=self._default_timeout)

    async def wait_for_idle(self, timeout: int | None = None) -> None:
        """Wait for network idle."""
        await self._page.wait_for_load_state("networkidle", timeout=self._timeout(timeout))

    async def pause(self, milliseconds: int) -> None:
        """Wait a fixed time."""
        if milliseconds > 0:
            await self._page.wait_for_timeout(milliseconds)

    async def screenshot(self, path: str, full_page: bool = True) -> None:
        """Take a screenshot."""
        await self._page.screenshot(path=path, full_page=full_page)

    async def close(self) -> None:
        """Close the page."""
        await self._page.close()
