"""Pydantic models for browser sessions."""

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

# Flags that keep Chromium stable inside containers.
DEFAULT_LAUNCH_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-zygote",
    "--disable-gpu",
)

BLOCKED_RESOURCE_TYPES = frozenset({"image", "stylesheet", "font"})


class SessionConfig(BaseModel):
    """Configuration for the shared browser and the pages it hands out."""

    model_config = ConfigDict(frozen=True)

    headless: bool = True
    slow_mo: int = Field(default=0, ge=0, le=1000, description="Slow motion delay in ms")
    viewport_width: int = Field(default=1280, ge=800, le=3840)
    viewport_height: int = Field(default=720, ge=600, le=2160)
    user_agent: str = DEFAULT_USER_AGENT
    timeout: int = Field(default=30000, ge=1000, le=120000, description="Default timeout in ms")
    launch_args: tuple[str, ...] = DEFAULT_LAUNCH_ARGS
    blocked_resource_types: frozenset[str] = BLOCKED_RESOURCE_TYPES


class SelectOption(BaseModel):
    """An ``<option>`` read from a dropdown."""

    value: str
    label: str
