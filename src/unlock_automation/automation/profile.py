"""Portal profile: selector fallback chains and keyword sets.

Site markup drift is the usual cause of failed runs, so everything that
describes the portal's markup or wording lives here as data. Order inside
each tuple is precedence: candidates are listed most specific first and the
first match wins.
"""

import logging
import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator

from unlock_automation.config import Settings
from unlock_automation.models import RequestStatus

logger = logging.getLogger(__name__)

SelectorChain = tuple[str, ...]


class PortalSelectors(BaseModel):
    """Selector fallback chains for every control the flows touch."""

    model_config = ConfigDict(frozen=True)

    # Unlock request form
    path_with_number: SelectorChain = (
        'input[value*="yes"]',
        'input[value*="att"]',
        'button:has-text("Yes")',
        'button:has-text("Sí")',
    )
    path_without_number: SelectorChain = (
        'input[value*="no"]',
        'input[value*="nonatt"]',
        'button:has-text("No")',
    )
    continue_button: SelectorChain = (
        'button:has-text("Continue")',
        'button:has-text("Next")',
        'button:has-text("Continuar")',
        'button:has-text("Siguiente")',
        'input[type="submit"]',
        'button[type="submit"]',
    )
    imei: SelectorChain = (
        'input[name*="imei"]',
        'input[placeholder*="IMEI"]',
        'input[id*="imei"]',
        'input[aria-label*="IMEI"]',
    )
    make_model: SelectorChain = (
        'select[name*="make"]',
        'select[name*="model"]',
        'select[name*="device"]',
        '[role="combobox"]',
        ".select-wrapper select",
    )
    phone: SelectorChain = (
        'input[name*="phone"]',
        'input[name*="number"]',
        'input[placeholder*="phone"]',
        'input[type="tel"]',
    )
    first_name: SelectorChain = (
        'input[name*="first"]',
        'input[placeholder*="First"]',
        'input[placeholder*="Nombre"]',
    )
    last_name: SelectorChain = (
        'input[name*="last"]',
        'input[placeholder*="Last"]',
        'input[placeholder*="Apellido"]',
    )
    email: SelectorChain = (
        'input[type="email"]',
        'input[name*="email"]',
        'input[placeholder*="email"]',
    )
    confirm_email: SelectorChain = (
        'input[name*="confirm"]',
        'input[placeholder*="confirm"]',
        'input[placeholder*="verificar"]',
    )
    terms: SelectorChain = (
        'input[type="checkbox"]',
        'input[name*="terms"]',
        'input[name*="agree"]',
        'input[name*="accept"]',
    )
    submit: SelectorChain = (
        'button[type="submit"]',
        'input[type="submit"]',
        'button:has-text("Submit")',
        'button:has-text("Enviar")',
        'button:has-text("Continue")',
        'button:has-text("Continuar")',
    )
    form_controls: SelectorChain = (
        "form",
        'input[type="submit"]',
        'button[type="submit"]',
    )

    # Status check form
    status_imei: SelectorChain = (
        'input[name*="imei"]',
        'input[placeholder*="IMEI"]',
        'input[id*="imei"]',
    )
    status_request_id: SelectorChain = (
        'input[name*="request"]',
        'input[name*="case"]',
        'input[placeholder*="Request"]',
        'input[placeholder*="Case"]',
        'input[id*="request"]',
        'input[id*="case"]',
    )
    status_submit: SelectorChain = (
        'button[type="submit"]',
        'input[type="submit"]',
        'button:has-text("Check Status")',
        'button:has-text("Submit")',
        'button:has-text("Verificar")',
        'button:has-text("Enviar")',
    )


class StatusKeywords(BaseModel):
    """Localized keyword groups, checked in field order."""

    model_config = ConfigDict(frozen=True)

    approved: tuple[str, ...] = (
        "approved",
        "aprobada",
        "completed",
        "completada",
        "unlocked",
        "desbloqueado",
        "success",
        "exitoso",
    )
    denied: tuple[str, ...] = (
        "denied",
        "denegada",
        "rejected",
        "rechazada",
        "declined",
        "declinada",
        "not eligible",
        "no elegible",
    )
    pending: tuple[str, ...] = (
        "pending",
        "pendiente",
        "in progress",
        "en progreso",
        "processing",
        "procesando",
        "under review",
        "en revisión",
    )
    error: tuple[str, ...] = (
        "error",
        "not found",
        "invalid",
        "incorrect",
        "wrong",
        "incorrecto",
        "inválido",
    )
    detail_markers: tuple[str, ...] = ("status", "estado", "request", "solicitud")

    def status_groups(self) -> list[tuple[RequestStatus, tuple[str, ...]]]:
        """Recognized status groups in precedence order."""
        return [
            (RequestStatus.APPROVED, self.approved),
            (RequestStatus.DENIED, self.denied),
            (RequestStatus.PENDING, self.pending),
        ]


class PortalProfile(BaseModel):
    """Everything the flows know about the portal's markup and wording."""

    model_config = ConfigDict(frozen=True)

    version: str = "2024.1"
    selectors: PortalSelectors = PortalSelectors()
    captcha_markers: tuple[str, ...] = (
        'iframe[src*="recaptcha"]',
        'iframe[src*="hcaptcha"]',
        'iframe[src*="turnstile"]',
        "[data-captcha]",
        ".captcha",
        "#captcha",
        'img[src*="captcha"]',
        '[class*="captcha"]',
        '[id*="captcha"]',
    )
    confirmation_keywords: tuple[str, ...] = (
        "thanks",
        "confirmation",
        "request submitted",
        "solicitud enviada",
        "gracias",
        "confirmación",
    )
    confirmation_id_pattern: str = r"([A-Z]{3}\d{12})"
    option_placeholder: str = "Select"
    status_keywords: StatusKeywords = StatusKeywords()

    @field_validator("confirmation_id_pattern")
    @classmethod
    def check_pattern(cls, value: str) -> str:
        """Reject patterns that do not compile."""
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid confirmation id pattern: {e}") from e
        return value

    @classmethod
    def from_file(cls, path: str | Path) -> "PortalProfile":
        """Load a profile from a JSON file.

        Fields missing from the file keep their built-in defaults.

        Args:
            path: Path to the JSON profile

        Returns:
            Parsed PortalProfile
        """
        return cls.model_validate_json(Path(path).read_text(encoding="utf-8"))


DEFAULT_PROFILE = PortalProfile()


def load_profile(settings: Settings) -> PortalProfile:
    """Return the configured portal profile, or the built-in one."""
    if not settings.portal_profile_path:
        return DEFAULT_PROFILE

    profile = PortalProfile.from_file(settings.portal_profile_path)
    logger.info(f"Loaded portal profile {profile.version} from {settings.portal_profile_path}")
    return profile
