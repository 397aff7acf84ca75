"""Browser layer: page interface, Playwright implementation and session lifecycle."""

from unlock_automation.browser.models import SelectOption, SessionConfig
from unlock_automation.browser.page import PortalPage
from unlock_automation.browser.playwright_page import PlaywrightPage
from unlock_automation.browser.session import (
    BrowserSessionManager,
    get_session_manager,
    shutdown_session_manager,
)

__all__ = [
    "BrowserSessionManager",
    "PlaywrightPage",
    "PortalPage",
    "SelectOption",
    "SessionConfig",
    "get_session_manager",
    "shutdown_session_manager",
]
