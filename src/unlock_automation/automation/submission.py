"""Unlock request submission flow."""

import logging
import re
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from unlock_automation.automation.base import PortalFlow, PortalStep
from unlock_automation.browser.page import PortalPage
from unlock_automation.errors import IncompleteSubmissionError
from unlock_automation.models import SubmissionResult, UnlockSubmission

CAPTCHA_MESSAGE = "CAPTCHA detected, manual intervention required"
CONFIRMATION_WINDOW = timedelta(hours=24)


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(timezone.utc)


class SubmissionFlow(PortalFlow):
    """Drives the unlock request form from entry page to confirmation.

    Steps run strictly in order with no backward transitions:
    load, path selection, device info, personal info, submit, and
    confirmation extraction. Each call is a single attempt on its own page.

    Usage:
        flow = SubmissionFlow()
        result = await flow.submit(UnlockSubmission(...))
        if result.captcha_detected:
            # Hand over to a human
    """

    def __init__(self, *args, clock: Callable[[], datetime] = utc_now, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.clock = clock

    async def submit(self, submission: UnlockSubmission) -> SubmissionResult:
        """Submit an unlock request.

        Args:
            submission: Validated request data

        Returns:
            SubmissionResult describing the outcome

        Raises:
            SessionOpenError: If no browser page could be opened
        """
        path = "with" if submission.has_carrier_number else "without"
        self.log(PortalStep.LOAD, logging.INFO, f"Starting unlock request submission ({path} carrier number)")

        async with self.sessions.session() as page:
            try:
                return await self._run(page, submission)
            except Exception as e:
                step = self.current_step or PortalStep.LOAD
                self.log(step, logging.ERROR, f"Unlock request submission failed: {e}")
                self.logger.debug("Submission failure details", exc_info=True)
                captcha_detected = await self.captcha_detector.detect(page)
                return SubmissionResult(
                    success=False,
                    captcha_detected=captcha_detected,
                    error_message=str(e) or type(e).__name__,
                )

    async def _run(self, page: PortalPage, submission: UnlockSubmission) -> SubmissionResult:
        await page.navigate(self.settings.unlock_url)
        await self.capture(page, PortalStep.LOAD)

        if await self.captcha_detector.detect(page):
            self.log(PortalStep.LOAD, logging.WARNING, "CAPTCHA detected on initial page load")
            return SubmissionResult(
                success=False,
                captcha_detected=True,
                error_message=CAPTCHA_MESSAGE,
            )

        await self.select_path(page, submission.has_carrier_number)
        await self.fill_device_info(page, submission)
        await self.fill_personal_info(page, submission)
        await self.accept_terms_and_submit(page)
        result = await self.extract_confirmation(page)

        self.log(
            PortalStep.EXTRACT_CONFIRMATION,
            logging.INFO,
            f"Unlock request submitted (confirmation id: {result.confirmation_id or 'not shown'})",
        )
        return result

    async def select_path(self, page: PortalPage, has_carrier_number: bool) -> None:
        """Choose the "with number" or "without number" path."""
        step = PortalStep.PATH_SELECT
        self.log(step, logging.INFO, f"Selecting path: {'with' if has_carrier_number else 'without'} carrier number")

        candidates = (
            self.selectors.path_with_number if has_carrier_number else self.selectors.path_without_number
        )
        selector = await self.require(page, candidates, "path selection control")
        await page.click(selector)
        await page.pause(self.settings.step_settle_ms)

        # Some variants advance on their own after the path is chosen
        continue_selector = await self.find(page, self.selectors.continue_button)
        if continue_selector:
            await page.click(continue_selector)
            await page.wait_for_idle()
        else:
            self.log(step, logging.DEBUG, "No continue control, assuming auto-advance")

        await self.capture(page, step)

    async def fill_device_info(self, page: PortalPage, submission: UnlockSubmission) -> None:
        """Fill IMEI, make/model and, when present, the carrier number."""
        step = PortalStep.DEVICE_INFO
        self.log(step, logging.INFO, "Filling device information")

        imei_selector = await self.require(page, self.selectors.imei, "IMEI field")
        await page.fill(imei_selector, submission.imei)
        self.log(step, logging.DEBUG, f"IMEI filled: {submission.imei[:6]}...")

        await self.select_make_model(page)

        if submission.carrier_number:
            phone_selector = await self.find(page, self.selectors.phone)
            if phone_selector:
                await page.fill(phone_selector, submission.carrier_number)
                self.log(step, logging.DEBUG, f"Carrier number filled: {submission.carrier_number[:3]}...")
            else:
                self.log(step, logging.WARNING, "Carrier number field not found, continuing")

        await self.capture(page, step)

    async def select_make_model(self, page: PortalPage) -> None:
        """Pick the first real option of the make/model dropdown, if any."""
        step = PortalStep.DEVICE_INFO
        selector = await self.find(page, self.selectors.make_model)
        if not selector:
            self.log(step, logging.WARNING, "Make/model selector not found, continuing")
            return

        try:
            options = await page.option_list(selector)
            placeholder = self.profile.option_placeholder
            option = next(
                (o for o in options if o.value and o.label and placeholder not in o.label),
                None,
            )
            if option is None:
                self.log(step, logging.WARNING, "No valid make/model options found")
                return

            await page.select_option(selector, option.value)
            self.log(step, logging.INFO, f"Selected make/model: {option.label}")
        except Exception as e:
            self.log(step, logging.WARNING, f"Error selecting make/model: {e}")

    async def fill_personal_info(self, page: PortalPage, submission: UnlockSubmission) -> None:
        """Fill name and email fields."""
        step = PortalStep.PERSONAL_INFO
        self.log(step, logging.INFO, "Filling personal information")

        fields = [
            ("first name", self.selectors.first_name, submission.first_name),
            ("last name", self.selectors.last_name, submission.last_name),
            ("email", self.selectors.email, submission.email),
        ]
        for name, candidates, value in fields:
            selector = await self.find(page, candidates)
            if selector:
                await page.fill(selector, value)
            else:
                self.log(step, logging.WARNING, f"{name.capitalize()} field not found, continuing")

        confirm_selector = await self.find(page, self.selectors.confirm_email)
        if confirm_selector:
            await page.fill(confirm_selector, submission.email)

        await self.capture(page, step)

    async def accept_terms_and_submit(self, page: PortalPage) -> None:
        """Tick the terms checkbox if shown, then submit the form."""
        step = PortalStep.SUBMIT
        self.log(step, logging.INFO, "Accepting terms and submitting")

        terms_selector = await self.find(page, self.selectors.terms)
        if terms_selector:
            await page.check(terms_selector)
            self.log(step, logging.DEBUG, "Terms accepted")

        submit_selector = await self.require(page, self.selectors.submit, "submit control")
        await page.click(submit_selector)
        await page.wait_for_idle()

        await self.capture(page, step)

    async def extract_confirmation(self, page: PortalPage) -> SubmissionResult:
        """Read the result page and build the submission result.

        Raises:
            IncompleteSubmissionError: If no confirmation is shown and the
                form is still on the page
        """
        step = PortalStep.EXTRACT_CONFIRMATION
        self.log(step, logging.INFO, "Extracting confirmation details")

        page_text = await page.text_content("body") or ""
        id_match = re.search(self.profile.confirmation_id_pattern, page_text)

        lowered = page_text.lower()
        has_confirmation = any(
            keyword.lower() in lowered for keyword in self.profile.confirmation_keywords
        )

        if not has_confirmation:
            for selector in self.selectors.form_controls:
                if await page.exists(selector):
                    raise IncompleteSubmissionError()

        await self.capture(page, step)

        return SubmissionResult(
            success=True,
            confirmation_id=id_match.group(1 if id_match.re.groups else 0) if id_match else None,
            deadline=self.clock() + CONFIRMATION_WINDOW,
            captcha_detected=False,
        )
