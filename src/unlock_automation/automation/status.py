"""Unlock request status check flow."""

import logging

from unlock_automation.automation.base import PortalFlow, PortalStep
from unlock_automation.automation.classifier import StatusClassifier
from unlock_automation.browser.page import PortalPage
from unlock_automation.errors import StatusQueryError
from unlock_automation.models import RequestStatus, StatusQuery, StatusResult, mask_imei

STATUS_QUERY_ERROR = "Status query failed, verify that the IMEI and request ID are correct"


class StatusFlow(PortalFlow):
    """Looks up an unlock request on the portal's status page."""

    def __init__(self, *args, classifier: StatusClassifier | None = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.classifier = classifier or StatusClassifier(self.profile.status_keywords)

    async def check(self, query: StatusQuery) -> StatusResult:
        """Check the status of a submitted request.

        Args:
            query: IMEI and confirmation id of the request

        Returns:
            StatusResult with the classified status

        Raises:
            SessionOpenError: If no browser page could be opened
        """
        self.log(
            PortalStep.STATUS_LOAD,
            logging.INFO,
            f"Checking status for IMEI {mask_imei(query.imei)} and request ID {query.confirmation_id}",
        )

        async with self.sessions.session() as page:
            try:
                result = await self._run(page, query)
            except Exception as e:
                step = self.current_step or PortalStep.STATUS_LOAD
                self.log(step, logging.ERROR, f"Status check failed: {e}")
                self.logger.debug("Status check failure details", exc_info=True)
                return StatusResult(
                    success=False,
                    status=RequestStatus.UNKNOWN,
                    error_message=str(e) or type(e).__name__,
                )

        self.log(PortalStep.STATUS_CLASSIFY, logging.INFO, f"Status check completed: {result.status.value}")
        return result

    async def _run(self, page: PortalPage, query: StatusQuery) -> StatusResult:
        await page.navigate(self.settings.status_url)
        await self.capture(page, PortalStep.STATUS_LOAD)

        self.log(PortalStep.STATUS_FORM, logging.INFO, "Filling status form")
        imei_selector = await self.require(page, self.selectors.status_imei, "IMEI field on the status page")
        await page.fill(imei_selector, query.imei)

        request_selector = await self.require(page, self.selectors.status_request_id, "request ID field")
        await page.fill(request_selector, query.confirmation_id)

        self.log(PortalStep.STATUS_SUBMIT, logging.INFO, "Submitting status query")
        submit_selector = await self.require(page, self.selectors.status_submit, "submit control")
        await page.click(submit_selector)
        await page.wait_for_idle()
        await self.capture(page, PortalStep.STATUS_SUBMIT)

        page_text = await page.text_content("body")
        if not page_text:
            raise StatusQueryError("Could not read the status page content")

        classification = self.classifier.classify(page_text)
        if classification.error_detected:
            self.log(
                PortalStep.STATUS_CLASSIFY,
                logging.WARNING,
                f"Status page reports an error ({classification.matched_keyword})",
            )
            return StatusResult(
                success=False,
                status=RequestStatus.UNKNOWN,
                error_message=STATUS_QUERY_ERROR,
            )

        return StatusResult(
            success=True,
            status=classification.status,
            details=classification.details or None,
        )
