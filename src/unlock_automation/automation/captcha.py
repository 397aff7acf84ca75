"""CAPTCHA detection for portal pages."""

import logging
from collections.abc import Sequence

from unlock_automation.automation.profile import DEFAULT_PROFILE
from unlock_automation.browser.page import PortalPage

logger = logging.getLogger(__name__)


class CaptchaDetector:
    """Detects CAPTCHA challenges on the current page.

    Detection only gates control flow: a positive result aborts the flow
    with a CAPTCHA signal so a human can take over. Nothing is solved.
    """

    def __init__(self, markers: Sequence[str] | None = None) -> None:
        """Initialize detector.

        Args:
            markers: Ordered CAPTCHA selectors, defaults to the built-in profile
        """
        self.markers = tuple(markers) if markers is not None else DEFAULT_PROFILE.captcha_markers

    async def find_marker(self, page: PortalPage | None) -> str | None:
        """Return the first CAPTCHA marker present on the page.

        A failing check counts as "not found" and the next marker is tried.

        Args:
            page: Page to inspect, may be None

        Returns:
            Matching marker selector, or None
        """
        if page is None:
            return None

        for marker in self.markers:
            try:
                if await page.exists(marker):
                    logger.warning(f"CAPTCHA detected with selector: {marker}")
                    return marker
            except Exception as e:
                logger.debug(f"CAPTCHA check failed for {marker}: {e}")

        return None

    async def detect(self, page: PortalPage | None) -> bool:
        """Check whether the page shows a CAPTCHA. Never raises."""
        return await self.find_marker(page) is not None
