"""Page capability interface used by the portal flows."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from unlock_automation.browser.models import SelectOption


class PortalPage(ABC):
    """Abstract browser page driven by the portal flows.

    Every operation is bounded by a timeout in milliseconds. When no
    timeout is given the page's default timeout applies.

    Implementations:
    - PlaywrightPage: Wraps a Playwright ``Page``
    - Test doubles: In-memory pages that simulate the portal
    """

    @property
    @abstractmethod
    def url(self) -> str:
        """Return the current page URL."""
        ...

    @abstractmethod
    async def navigate(self, url: str, timeout: int | None = None) -> None:
        """Navigate to a URL.

        Args:
            url: Destination URL
            timeout: Override default timeout

        Raises:
            Exception: The underlying library's navigation or timeout error
        """
        ...

    @abstractmethod
    async def wait_for_selector(self, selector: str, timeout: int) -> bool:
        """Wait until an element matching ``selector`` is visible.

        Args:
            selector: Element selector
            timeout: Maximum wait in ms

        Returns:
            True if the element appeared, False on timeout
        """
        ...

    @abstractmethod
    async def exists(self, selector: str) -> bool:
        """Check, without waiting, whether any element matches ``selector``."""
        ...

    @abstractmethod
    async def fill(self, selector: str, value: str, timeout: int | None = None) -> None:
        """Fill an input field."""
        ...

    @abstractmethod
    async def click(self, selector: str, timeout: int | None = None) -> None:
        """Click an element."""
        ...

    @abstractmethod
    async def check(self, selector: str, timeout: int | None = None) -> None:
        """Tick a checkbox or radio input."""
        ...

    @abstractmethod
    async def select_option(self, selector: str, value: str, timeout: int | None = None) -> None:
        """Select a dropdown option by value."""
        ...

    @abstractmethod
    async def option_list(self, selector: str) -> list[SelectOption]:
        """Read the options of a dropdown in document order."""
        ...

    @abstractmethod
    async def text_content(self, selector: str = "body") -> str | None:
        """Get the text content of an element."""
        ...

    @abstractmethod
    async def wait_for_idle(self, timeout: int | None = None) -> None:
        """Wait until the network is idle after a navigation or submit."""
        ...

    @abstractmethod
    async def pause(self, milliseconds: int) -> None:
        """Let the page settle for a fixed time."""
        ...

    @abstractmethod
    async def screenshot(self, path: str, full_page: bool = True) -> None:
        """Save a screenshot to ``path``."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the page."""
        ...

    async def find_first(self, selectors: Sequence[str], timeout: int) -> str | None:
        """Return the first of ``selectors`` present on the page.

        Default implementation splits ``timeout`` across the candidates
        using the element resolver.
        """
        from unlock_automation.automation.resolver import ElementResolver

        return await ElementResolver(default_timeout=timeout).resolve(self, selectors)
