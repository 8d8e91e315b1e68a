"""
Till Core Config — Public API
================================
Register defaults (starting float, tax, gratuity, client settings).
"""

from core.config.settings import (
    ENV_PREFIX,
    RegisterSettings,
    load_settings,
)

__all__ = [
    "ENV_PREFIX",
    "RegisterSettings",
    "load_settings",
]
