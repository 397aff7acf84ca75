"""Portal automation engine: element discovery, CAPTCHA detection and flows."""

from unlock_automation.automation.base import PortalFlow, PortalStep
from unlock_automation.automation.captcha import CaptchaDetector
from unlock_automation.automation.classifier import StatusClassification, StatusClassifier
from unlock_automation.automation.profile import PortalProfile, PortalSelectors, StatusKeywords
from unlock_automation.automation.resolver import ElementResolver
from unlock_automation.automation.status import StatusFlow
from unlock_automation.automation.submission import SubmissionFlow

__all__ = [
    # Building blocks
    "CaptchaDetector",
    "ElementResolver",
    "StatusClassification",
    "StatusClassifier",
    # Portal data
    "PortalProfile",
    "PortalSelectors",
    "StatusKeywords",
    # Flows
    "PortalFlow",
    "PortalStep",
    "StatusFlow",
    "SubmissionFlow",
]
