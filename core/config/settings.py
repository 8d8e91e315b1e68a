"""
Till Core Config — Register Settings
=======================================
Register defaults come from configuration, not from engine code.
Uses pydantic-settings, so every value can be overridden with a
TILL_* environment variable (or a .env file):

    TILL_STARTING_FLOAT=250.00
    TILL_TAX_ENABLED=false
    TILL_TAX_RATE=0.0825

Empty variables are ignored and the default applies.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.primitives.money import to_decimal

ENV_PREFIX = "TILL_"


class RegisterSettings(BaseSettings):
    """Startup configuration for one register."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    starting_float: Decimal = Field(default=Decimal("1000"), ge=0)
    tax_enabled: bool = True
    tax_rate: Decimal = Field(default=Decimal("0.1"), ge=0)
    gratuity_enabled: bool = False
    gratuity_rate: Decimal = Field(default=Decimal("0.15"), ge=0)
    free_lunch_enabled: bool = True
    discounted_to_go_enabled: bool = True
    discounted_to_go_percentage: Decimal = Field(default=Decimal("20"), ge=0, le=100)
    # bcrypt itself accepts 4..31
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    @field_validator(
        "starting_float", "tax_rate", "gratuity_rate", "discounted_to_go_percentage",
        mode="before",
    )
    @classmethod
    def _exact_decimal(cls, value, info):
        # Floats go through str so 0.1 stays 0.1; NaN and infinity are refused.
        return to_decimal(value, info.field_name)


def load_settings() -> RegisterSettings:
    """Build RegisterSettings from TILL_* variables and .env."""
    return RegisterSettings()
