"""Request and result records exchanged with the portal flows."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

IMEI_PATTERN = r"^\d{15}$"
CARRIER_NUMBER_PATTERN = r"^\d{10}$"
CONFIRMATION_ID_PATTERN = r"^[A-Z]{3}\d{12}$"
MAX_DETAILS_LENGTH = 500


class RequestStatus(str, Enum):
    """Unlock request status as reported by the portal."""

    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"
    UNKNOWN = "unknown"


class UnlockSubmission(BaseModel):
    """Validated input for an unlock request submission."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    imei: str = Field(pattern=IMEI_PATTERN, description="15-digit device IMEI")
    carrier_number: str | None = Field(
        default=None,
        pattern=CARRIER_NUMBER_PATTERN,
        description="10-digit carrier phone number, if the device has one",
    )
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: EmailStr

    @property
    def has_carrier_number(self) -> bool:
        """Whether the submission takes the "with number" path."""
        return bool(self.carrier_number)


class SubmissionResult(BaseModel):
    """Outcome of one submission attempt."""

    model_config = ConfigDict(frozen=True)

    success: bool
    confirmation_id: str | None = Field(default=None, pattern=CONFIRMATION_ID_PATTERN)
    deadline: datetime | None = None
    captcha_detected: bool = False
    error_message: str | None = None

    @model_validator(mode="after")
    def check_consistency(self) -> "SubmissionResult":
        """Reject self-contradictory results."""
        if self.success and self.error_message:
            raise ValueError("successful result cannot carry an error message")
        if self.captcha_detected and self.success:
            raise ValueError("result with a CAPTCHA cannot be successful")
        if self.deadline is not None and not self.success:
            raise ValueError("deadline is only set on success")
        return self


class StatusQuery(BaseModel):
    """Validated input for a status check."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    imei: str = Field(pattern=IMEI_PATTERN)
    confirmation_id: str = Field(min_length=1)


class StatusResult(BaseModel):
    """Outcome of one status check."""

    model_config = ConfigDict(frozen=True)

    success: bool
    status: RequestStatus = RequestStatus.UNKNOWN
    details: str | None = Field(default=None, max_length=MAX_DETAILS_LENGTH)
    error_message: str | None = None

    @model_validator(mode="after")
    def check_consistency(self) -> "StatusResult":
        """Reject self-contradictory results."""
        if self.success and self.error_message:
            raise ValueError("successful result cannot carry an error message")
        return self


def mask_imei(imei: str) -> str:
    """Mask an IMEI for display, keeping the first six and last four digits."""
    if len(imei) <= 10:
        return imei
    return f"{imei[:6]}...{imei[-4:]}"
