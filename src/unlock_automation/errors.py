"""Exceptions raised by the portal automation engine."""

from collections.abc import Sequence


class PortalAutomationError(Exception):
    """Base class for portal automation errors."""

    pass


class ElementNotFoundError(PortalAutomationError):
    """Raised when a required form control cannot be located."""

    def __init__(self, element: str, candidates: Sequence[str] = ()):
        self.element = element
        self.candidates = tuple(candidates)
        super().__init__(f"Cannot find {element}")


class IncompleteSubmissionError(PortalAutomationError):
    """Raised when the portal shows no confirmation and the form is still present."""

    def __init__(self, message: str = "Submission did not complete, required fields may be missing"):
        super().__init__(message)


class StatusQueryError(PortalAutomationError):
    """Raised when the status page cannot be read."""

    pass


class SessionOpenError(PortalAutomationError):
    """Raised when a browser page cannot be created."""

    pass
