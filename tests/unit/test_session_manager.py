"""Tests for the browser session manager."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from unlock_automation.browser import session as session_module
from unlock_automation.browser.models import DEFAULT_USER_AGENT, SessionConfig
from unlock_automation.browser.playwright_page import PlaywrightPage
from unlock_automation.browser.session import BrowserSessionManager
from unlock_automation.errors import SessionOpenError


def make_playwright(start_delay: bool = False):
    """Build a mocked ``async_playwright`` factory and its object graph."""
    raw_page = MagicMock()
    raw_page.route = AsyncMock()
    raw_page.close = AsyncMock()

    context = MagicMock()
    context.new_page = AsyncMock(return_value=raw_page)
    context.close = AsyncMock()

    browser = MagicMock()
    browser.new_context = AsyncMock(return_value=context)
    browser.close = AsyncMock()

    playwright = MagicMock()
    playwright.chromium.launch = AsyncMock(return_value=browser)
    playwright.stop = AsyncMock()

    async def start():
        if start_delay:
            await asyncio.sleep(0.01)
        return playwright

    starter = MagicMock()
    starter.start = AsyncMock(side_effect=start)
    factory = MagicMock(return_value=starter)

    return factory, playwright, browser, context, raw_page


class TestLazyInitialization:
    """Tests for shared browser creation."""

    @pytest.mark.asyncio
    async def test_browser_created_on_first_open(self):
        """Nothing is launched until a page is requested."""
        factory, playwright, browser, context, raw_page = make_playwright()
        manager = BrowserSessionManager(SessionConfig(headless=False, timeout=15000))

        with patch.object(session_module, "async_playwright", factory):
            assert manager.is_initialized is False
            page = await manager.open()

        assert manager.is_initialized is True
        assert isinstance(page, PlaywrightPage)
        assert page.raw is raw_page
        playwright.chromium.launch.assert_awaited_once()
        assert playwright.chromium.launch.call_args.kwargs["headless"] is False
        browser.new_context.assert_awaited_once_with(
            viewport={"width": 1280, "height": 720},
            user_agent=DEFAULT_USER_AGENT,
        )

    @pytest.mark.asyncio
    async def test_context_reused(self):
        """Later pages share the browser and context."""
        factory, playwright, browser, context, _ = make_playwright()
        manager = BrowserSessionManager()

        with patch.object(session_module, "async_playwright", factory):
            await manager.open()
            await manager.open()

        playwright.chromium.launch.assert_awaited_once()
        browser.new_context.assert_awaited_once()
        assert context.new_page.await_count == 2

    @pytest.mark.asyncio
    async def test_concurrent_first_use_initializes_once(self):
        """Racing first calls launch exactly one browser."""
        factory, playwright, browser, context, _ = make_playwright(start_delay=True)
        manager = BrowserSessionManager()

        with patch.object(session_module, "async_playwright", factory):
            pages = await asyncio.gather(*(manager.open() for _ in range(5)))

        assert len(pages) == 5
        factory.return_value.start.assert_awaited_once()
        playwright.chromium.launch.assert_awaited_once()
        browser.new_context.assert_awaited_once()
        assert context.new_page.await_count == 5


class TestPageConfiguration:
    """Tests for per-page setup."""

    @pytest.mark.asyncio
    async def test_timeout_and_route(self):
        """Each page gets the default timeout and the resource filter."""
        factory, _, _, _, raw_page = make_playwright()
        manager = BrowserSessionManager(SessionConfig(timeout=12000))

        with patch.object(session_module, "async_playwright", factory):
            await manager.open()

        raw_page.set_default_timeout.assert_called_once_with(12000)
        raw_page.route.assert_awaited_once_with("**/*", manager._route_request)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("resource_type", ["image", "stylesheet", "font"])
    async def test_heavy_resources_blocked(self, resource_type):
        """Images, stylesheets and fonts are aborted."""
        manager = BrowserSessionManager()
        route = MagicMock()
        route.request.resource_type = resource_type
        route.abort = AsyncMock()
        route.continue_ = AsyncMock()

        await manager._route_request(route)

        route.abort.assert_awaited_once()
        route.continue_.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("resource_type", ["document", "script", "xhr", "fetch"])
    async def test_other_resources_continue(self, resource_type):
        """Everything else is let through."""
        manager = BrowserSessionManager()
        route = MagicMock()
        route.request.resource_type = resource_type
        route.abort = AsyncMock()
        route.continue_ = AsyncMock()

        await manager._route_request(route)

        route.continue_.assert_awaited_once()
        route.abort.assert_not_awaited()


class TestOpenAndClose:
    """Tests for page open/close discipline."""

    @pytest.mark.asyncio
    async def test_launch_failure_raises_session_open_error(self):
        """Browser launch errors surface as SessionOpenError."""
        factory, playwright, _, _, _ = make_playwright()
        playwright.chromium.launch.side_effect = RuntimeError("Executable doesn't exist")
        manager = BrowserSessionManager()

        with patch.object(session_module, "async_playwright", factory):
            with pytest.raises(SessionOpenError, match="Executable doesn't exist"):
                await manager.open()

        assert manager.is_initialized is False

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failing_call", ["route", "set_default_timeout"])
    async def test_page_setup_failure_closes_page(self, failing_call):
        """A page that fails configuration is closed before the error surfaces."""
        factory, _, _, _, raw_page = make_playwright()
        getattr(raw_page, failing_call).side_effect = RuntimeError(f"{failing_call} failed")
        manager = BrowserSessionManager()

        with patch.object(session_module, "async_playwright", factory):
            with pytest.raises(SessionOpenError, match=f"{failing_call} failed"):
                await manager.open()

        raw_page.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_page_setup_failure_survives_close_error(self):
        """The original setup error is raised even if closing the page fails."""
        factory, _, _, _, raw_page = make_playwright()
        raw_page.route.side_effect = RuntimeError("route failed")
        raw_page.close.side_effect = RuntimeError("Target closed")
        manager = BrowserSessionManager()

        with patch.object(session_module, "async_playwright", factory):
            with pytest.raises(SessionOpenError, match="route failed"):
                await manager.open()

    @pytest.mark.asyncio
    async def test_close_never_raises(self):
        """Errors while closing a page are swallowed."""
        manager = BrowserSessionManager()
        page = MagicMock()
        page.close = AsyncMock(side_effect=RuntimeError("Target closed"))

        await manager.close(page)

        page.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_session_closes_on_error(self):
        """The session scope closes the page even when the body raises."""
        factory, _, _, _, raw_page = make_playwright()
        manager = BrowserSessionManager()

        with patch.object(session_module, "async_playwright", factory):
            with pytest.raises(ValueError):
                async with manager.session():
                    raise ValueError("boom")

        raw_page.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_session_closes_on_success(self):
        """The session scope closes the page on normal exit."""
        factory, _, _, _, raw_page = make_playwright()
        manager = BrowserSessionManager()

        with patch.object(session_module, "async_playwright", factory):
            async with manager.session() as page:
                assert page.raw is raw_page

        raw_page.close.assert_awaited_once()


class TestTeardown:
    """Tests for process shutdown."""

    @pytest.mark.asyncio
    async def test_teardown_all(self):
        """Context, browser and driver are all released."""
        factory, playwright, browser, context, _ = make_playwright()
        manager = BrowserSessionManager()

        with patch.object(session_module, "async_playwright", factory):
            await manager.open()
            await manager.teardown_all()

        context.close.assert_awaited_once()
        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()
        assert manager.is_initialized is False

    @pytest.mark.asyncio
    async def test_teardown_swallows_errors(self):
        """Cleanup errors are logged, not raised."""
        factory, playwright, browser, _, _ = make_playwright()
        browser.close.side_effect = RuntimeError("Browser has been closed")
        manager = BrowserSessionManager()

        with patch.object(session_module, "async_playwright", factory):
            await manager.open()
            await manager.teardown_all()

        playwright.stop.assert_awaited_once()
        assert manager.is_initialized is False

    @pytest.mark.asyncio
    async def test_teardown_continues_after_context_error(self):
        """A failing context close still releases the browser and driver."""
        factory, playwright, browser, context, _ = make_playwright()
        context.close.side_effect = RuntimeError("context gone")
        manager = BrowserSessionManager()

        with patch.object(session_module, "async_playwright", factory):
            await manager.open()
            await manager.teardown_all()

        context.close.assert_awaited_once()
        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()
        assert manager.is_initialized is False

    @pytest.mark.asyncio
    async def test_teardown_without_browser(self):
        """Tearing down an unused manager is a no-op."""
        await BrowserSessionManager().teardown_all()

    @pytest.mark.asyncio
    async def test_reinitializes_after_teardown(self):
        """A torn-down manager can open pages again."""
        factory, playwright, _, _, _ = make_playwright()
        manager = BrowserSessionManager()

        with patch.object(session_module, "async_playwright", factory):
            await manager.open()
            await manager.teardown_all()
            await manager.open()

        assert playwright.chromium.launch.await_count == 2


class TestGlobalManager:
    """Tests for the process-wide manager helpers."""

    @pytest.mark.asyncio
    async def test_get_and_shutdown(self):
        """The global manager is created once and reset on shutdown."""
        first = session_module.get_session_manager()

        assert session_module.get_session_manager() is first

        await session_module.shutdown_session_manager()

        assert session_module.get_session_manager() is not first
        await session_module.shutdown_session_manager()
