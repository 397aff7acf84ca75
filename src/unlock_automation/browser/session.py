"""Shared browser lifecycle and per-flow page sessions."""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from playwright.async_api import Browser, BrowserContext, Route, async_playwright

from unlock_automation.browser.models import SessionConfig
from unlock_automation.browser.page import PortalPage
from unlock_automation.browser.playwright_page import PlaywrightPage
from unlock_automation.errors import SessionOpenError

logger = logging.getLogger(__name__)


class BrowserSessionManager:
    """Owns the process-wide browser and hands out one page per flow.

    The Playwright driver, browser and context are created lazily on the
    first ``open()`` and shared by every page until ``teardown_all()``.
    Pages are never shared between flow invocations.

    Usage:
        manager = BrowserSessionManager(settings.session_config())
        async with manager.session() as page:
            await page.navigate(url)
        await manager.teardown_all()
    """

    def __init__(self, config: SessionConfig | None = None) -> None:
        """Initialize manager state.

        Args:
            config: Browser and page configuration
        """
        self.config = config or SessionConfig()
        self._playwright: Any = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None
        self._init_lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        """Whether the shared browser context exists."""
        return self._context is not None

    async def open(self) -> PortalPage:
        """Create a new page on the shared context.

        Returns:
            A configured page, exclusively owned by the caller

        Raises:
            SessionOpenError: If the browser or page could not be created
        """
        page = None
        try:
            context = await self._ensure_context()
            page = await context.new_page()
            page.set_default_timeout(self.config.timeout)
            await page.route("**/*", self._route_request)
        except Exception as e:
            logger.error(f"Failed to open browser page: {e}")
            if page is not None:
                try:
                    await page.close()
                except Exception as close_error:
                    logger.warning(f"Error closing half-configured page: {close_error}")
            raise SessionOpenError(f"Failed to open browser page: {e}") from e

        logger.debug("Browser page opened")
        return PlaywrightPage(page, default_timeout=self.config.timeout)

    async def close(self, page: PortalPage) -> None:
        """Close a page. Never raises."""
        try:
            await page.close()
            logger.debug("Browser page closed")
        except Exception as e:
            logger.warning(f"Error closing page: {e}")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[PortalPage]:
        """Open a page for the duration of a ``with`` block."""
        page = await self.open()
        try:
            yield page
        finally:
            await self.close(page)

    async def teardown_all(self) -> None:
        """Close the shared context, browser and Playwright driver."""
        async with self._init_lock:
            context, self._context = self._context, None
            browser, self._browser = self._browser, None
            playwright, self._playwright = self._playwright, None

            for name, release in (
                ("context", context.close if context else None),
                ("browser", browser.close if browser else None),
                ("playwright", playwright.stop if playwright else None),
            ):
                if release is None:
                    continue
                try:
                    await release()
                except Exception as e:
                    logger.error(f"Error closing {name} during browser cleanup: {e}")

        if context or browser or playwright:
            logger.info("Browser cleanup completed")

    async def _ensure_context(self) -> BrowserContext:
        """Start Playwright, the browser and the context exactly once."""
        if self._context is not None:
            return self._context

        async with self._init_lock:
            if self._context is not None:
                return self._context

            logger.info(f"Initializing browser (headless={self.config.headless})")
            try:
                if self._playwright is None:
                    self._playwright = await async_playwright().start()
                if self._browser is None:
                    self._browser = await self._playwright.chromium.launch(
                        headless=self.config.headless,
                        slow_mo=self.config.slow_mo,
                        args=list(self.config.launch_args),
                    )
                self._context = await self._browser.new_context(
                    viewport={
                        "width": self.config.viewport_width,
                        "height": self.config.viewport_height,
                    },
                    user_agent=self.config.user_agent,
                )
            except Exception as e:
                logger.error(f"Failed to initialize browser: {e}")
                raise

            logger.info("Browser initialized successfully")
            return self._context

    async def _route_request(self, route: Route) -> None:
        """Abort heavy resources, let everything else through."""
        if route.request.resource_type in self.config.blocked_resource_types:
            await route.abort()
        else:
            await route.continue_()


# Global session manager instance
_session_manager: BrowserSessionManager | None = None


def get_session_manager() -> BrowserSessionManager:
    """Get the global session manager instance.

    Returns:
        BrowserSessionManager configured from settings
    """
    global _session_manager
    if _session_manager is None:
        from unlock_automation.config import settings

        _session_manager = BrowserSessionManager(settings.session_config())
    return _session_manager


async def shutdown_session_manager() -> None:
    """Tear down the global session manager's browser."""
    global _session_manager
    if _session_manager:
        await _session_manager.teardown_all()
        _session_manager = None
