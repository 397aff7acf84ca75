"""Element discovery over ordered selector fallback chains."""

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from unlock_automation.browser.page import PortalPage

logger = logging.getLogger(__name__)

DEFAULT_TOTAL_TIMEOUT = 10000


class ElementResolver:
    """Finds the first present selector from an ordered candidate list.

    The time budget is split evenly across candidates, so N candidates
    each get ``total_timeout / N`` ms. Candidates are tried in order and
    the first one that appears within its slice wins, even if a later one
    would also match.

    Not finding anything is not an error: callers decide whether a missing
    control is fatal.
    """

    def __init__(self, default_timeout: int = DEFAULT_TOTAL_TIMEOUT) -> None:
        self.default_timeout = default_timeout

    async def resolve(
        self,
        page: "PortalPage",
        candidates: Sequence[str],
        total_timeout: int | None = None,
    ) -> str | None:
        """Resolve the first candidate present on the page.

        Args:
            page: Page to search
            candidates: Selectors, most specific first
            total_timeout: Budget in ms for the whole list

        Returns:
            The matching selector, or None if no candidate appeared
        """
        if not candidates:
            return None

        budget = total_timeout if total_timeout is not None else self.default_timeout
        slice_timeout = max(1, budget // len(candidates))

        for selector in candidates:
            if await page.wait_for_selector(selector, slice_timeout):
                return selector
            logger.debug(f"Selector not found: {selector}")

        return None
