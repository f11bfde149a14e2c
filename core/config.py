"""
Session settings: field defaults, then a .env file, then environment variables,
then command-line overrides.

Environment variables are matched case-insensitively:

    DBR_LICENSE_KEY, CAMERA_INDEX, CAPTURE_TEMPLATE, DUPLICATE_FORGET_TIME_MS,
    MAX_IMAGE_COUNT, WINDOW_NAME, HEADLESS, LOG_LEVEL
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, Mapping

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.exceptions import ConfigurationError

# Free public trial license; needs a network connection to activate.
# Request your own at https://www.dynamsoft.com/customer/license/trialLicense?product=dbr&package=python
DEFAULT_LICENSE_KEY = "DLS2eyJvcmdhbml6YXRpb25JRCI6IjIwMDAwMSJ9"


class Settings(BaseSettings):
    """
    Settings for one run.

    Keyword arguments win over the environment, which wins over `.env`.
    `headless` stays None unless set explicitly; load_settings() then asks is_headless().
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        # HEADLESS= in a shell profile means "not set"
        env_ignore_empty=True,
        validate_default=True,
    )

    license_key: str = Field(
        default=DEFAULT_LICENSE_KEY,
        validation_alias=AliasChoices("license_key", "dbr_license_key"),
        description="Engine license key",
    )
    camera_index: int = Field(default=0, ge=0, description="Camera device index")
    template: str = Field(
        default="",
        validation_alias=AliasChoices("template", "capture_template"),
        description="Engine template name; empty selects the read-barcodes preset",
    )
    duplicate_forget_time_ms: int = Field(
        default=5000,
        ge=0,
        description="How long a decoded barcode is suppressed as a duplicate",
    )
    max_image_count: int = Field(default=100, ge=1, description="Engine frame queue length")
    window_name: str = Field(default="Video Barcode Reader", description="Preview window title")
    headless: bool | None = Field(default=None, description="Never open a preview window")
    log_level: str = Field(default="WARNING", description="Root logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown logging level {v!r}")
        return level


def is_headless(environ: Mapping[str, str] | None = None, platform: str | None = None) -> bool:
    """True when no display is available for a preview window."""
    env = os.environ if environ is None else environ
    plat = sys.platform if platform is None else platform
    if env.get("QT_QPA_PLATFORM", "") in ("offscreen", "minimal"):
        return True
    if plat.startswith("linux"):
        return not (env.get("DISPLAY") or env.get("WAYLAND_DISPLAY"))
    return False


def _describe(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        name = str(item["loc"][0]).upper() if item["loc"] else "settings"
        parts.append(f"{name}: {item['msg']}")
    return "; ".join(parts)


def load_settings(
    overrides: Mapping[str, Any] | None = None,
    env_file: str | None = ".env",
) -> dict[str, Any]:
    """
    Build the settings dict for one run.
    None in overrides means "not given". Raises ConfigurationError on invalid values.
    """
    given = {key: value for key, value in (overrides or {}).items() if value is not None}
    try:
        settings = Settings(_env_file=env_file, **given)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {_describe(e)}") from None
    values = settings.model_dump()
    if values["headless"] is None:
        values["headless"] = is_headless()
    return values
