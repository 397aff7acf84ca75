"""Shared plumbing for portal flows."""

import logging
from contextvars import ContextVar
from collections.abc import Sequence
from datetime import datetime
from enum import Enum
from pathlib import Path

from unlock_automation.automation.captcha import CaptchaDetector
from unlock_automation.automation.profile import PortalProfile, PortalSelectors, load_profile
from unlock_automation.automation.resolver import ElementResolver
from unlock_automation.browser.page import PortalPage
from unlock_automation.browser.session import BrowserSessionManager, get_session_manager
from unlock_automation.config import Settings
from unlock_automation.config import settings as default_settings
from unlock_automation.errors import ElementNotFoundError

logger = logging.getLogger(__name__)


class PortalStep(str, Enum):
    """Flow steps, used to tag log events and debug screenshots."""

    LOAD = "load"
    PATH_SELECT = "path_select"
    DEVICE_INFO = "device_info"
    PERSONAL_INFO = "personal_info"
    SUBMIT = "submit"
    EXTRACT_CONFIRMATION = "extract_confirmation"
    STATUS_LOAD = "status_load"
    STATUS_FORM = "status_form"
    STATUS_SUBMIT = "status_submit"
    STATUS_CLASSIFY = "status_classify"


# Last step logged in the running task, so failure events carry their step
_current_step: ContextVar[PortalStep | None] = ContextVar("portal_step", default=None)


class PortalFlow:
    """Base class for single-attempt flows against the portal.

    Subclasses open one page per invocation through ``self.sessions`` and
    use the resolver and CAPTCHA detector for every step. Nothing here
    retries; retry policy belongs to the caller.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        sessions: BrowserSessionManager | None = None,
        profile: PortalProfile | None = None,
    ) -> None:
        """Initialize flow.

        Args:
            settings: Configuration, defaults to the process settings
            sessions: Page session manager, defaults to the global one
            profile: Selector and keyword data, defaults to the configured profile
        """
        self.settings = settings or default_settings
        self._sessions = sessions
        self.profile = profile or load_profile(self.settings)
        self.resolver = ElementResolver(default_timeout=self.settings.selector_timeout)
        self.captcha_detector = CaptchaDetector(self.profile.captcha_markers)
        self.logger = logging.getLogger(type(self).__module__)

    @property
    def sessions(self) -> BrowserSessionManager:
        """Session manager used to open pages."""
        if self._sessions is None:
            self._sessions = get_session_manager()
        return self._sessions

    @property
    def selectors(self) -> PortalSelectors:
        """Selector chains of the active profile."""
        return self.profile.selectors

    @property
    def current_step(self) -> PortalStep | None:
        """Step most recently logged by this task."""
        return _current_step.get()

    def log(self, step: PortalStep, level: int, message: str) -> None:
        """Emit a log event tagged with the originating step."""
        _current_step.set(step)
        self.logger.log(level, f"[{step.value}] {message}")

    async def find(self, page: PortalPage, candidates: Sequence[str]) -> str | None:
        """Resolve an optional control."""
        return await self.resolver.resolve(page, candidates)

    async def require(self, page: PortalPage, candidates: Sequence[str], element: str) -> str:
        """Resolve a required control.

        Raises:
            ElementNotFoundError: If no candidate appeared within budget
        """
        selector = await self.resolver.resolve(page, candidates)
        if selector is None:
            raise ElementNotFoundError(element, candidates)
        return selector

    async def capture(self, page: PortalPage, step: PortalStep, suffix: str = "") -> str | None:
        """Take a debug screenshot when debugging is enabled.

        Screenshots are a side effect only; failures are logged and ignored.

        Returns:
            Path to the screenshot or None
        """
        if not self.settings.debug_enabled:
            return None

        try:
            screenshot_dir = Path(self.settings.screenshot_dir)
            screenshot_dir.mkdir(parents=True, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
            name = f"{step.value}-{suffix}" if suffix else step.value
            filepath = screenshot_dir / f"debug-{name}-{timestamp}.png"

            await page.screenshot(str(filepath))
            logger.debug(f"Screenshot saved: {filepath}")
            return str(filepath)
        except Exception as e:
            logger.debug(f"Failed to take screenshot: {e}")

        return None
