"""Classification of status page text into request statuses."""

import logging

from pydantic import BaseModel, ConfigDict

from unlock_automation.automation.profile import DEFAULT_PROFILE, StatusKeywords
from unlock_automation.models import MAX_DETAILS_LENGTH, RequestStatus

logger = logging.getLogger(__name__)

UNKNOWN_STATUS_DETAILS = "Could not determine current status, try again later"
MAX_DETAIL_LINES = 5


class StatusClassification(BaseModel):
    """Result of classifying a status page."""

    model_config = ConfigDict(frozen=True)

    status: RequestStatus
    details: str | None = None
    matched_keyword: str | None = None
    error_detected: bool = False


class StatusClassifier:
    """Maps free-text status pages onto ``RequestStatus``.

    Groups are checked in order approved, denied, pending; the first group
    with any keyword in the text wins. Only when none matched are the
    generic error keywords checked. ``classify`` is a pure function of its
    input text.
    """

    def __init__(self, keywords: StatusKeywords | None = None) -> None:
        self.keywords = keywords or DEFAULT_PROFILE.status_keywords

    def classify(self, text: str) -> StatusClassification:
        """Classify page text.

        Args:
            text: Visible text of the status page

        Returns:
            StatusClassification with status and a detail snippet
        """
        lowered = text.lower()

        for status, patterns in self.keywords.status_groups():
            for pattern in patterns:
                if pattern in lowered:
                    return StatusClassification(
                        status=status,
                        details=self.extract_details(text, status, pattern),
                        matched_keyword=pattern,
                    )

        for pattern in self.keywords.error:
            if pattern in lowered:
                logger.debug(f"Status page matched error keyword: {pattern}")
                return StatusClassification(
                    status=RequestStatus.UNKNOWN,
                    matched_keyword=pattern,
                    error_detected=True,
                )

        return StatusClassification(
            status=RequestStatus.UNKNOWN,
            details=UNKNOWN_STATUS_DETAILS,
        )

    def extract_details(
        self,
        text: str,
        status: RequestStatus,
        keyword: str | None = None,
    ) -> str:
        """Pull the status-related lines out of the page text.

        Each matching line brings the line before it and the two after it.
        Lines are deduplicated in order, the first five are joined and the
        result is truncated to 500 characters.
        """
        lines = [line.strip() for line in text.splitlines()]
        lines = [line for line in lines if line]

        markers = [*self.keywords.detail_markers, status.value]
        if keyword:
            markers.append(keyword)

        relevant: list[str] = []
        for i, line in enumerate(lines):
            lowered = line.lower()
            if not any(marker in lowered for marker in markers):
                continue
            for context_line in lines[max(0, i - 1) : i + 3]:
                if context_line not in relevant:
                    relevant.append(context_line)

        return " ".join(relevant[:MAX_DETAIL_LINES])[:MAX_DETAILS_LENGTH].strip()
