"""
Till Settings Engine — Event Types and Payload Builders
==========================================================
"""

from __future__ import annotations

from engines.pricing.models import ClientSettings

SETTINGS_CLIENT_UPDATED_V1 = "settings.client.updated.v1"

SETTINGS_EVENT_TYPES = (SETTINGS_CLIENT_UPDATED_V1,)


def build_client_settings_updated_payload(
    settings: ClientSettings, changed_fields,
) -> dict:
    payload = settings.to_dict()
    payload["changed_fields"] = sorted(changed_fields)
    return payload
