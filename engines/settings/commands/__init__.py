"""
Till Settings Engine — Request Commands
==========================================
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.commands.base import Command

SETTINGS_CLIENT_UPDATE_REQUEST = "settings.client.update.request"

SETTINGS_COMMAND_TYPES = frozenset({SETTINGS_CLIENT_UPDATE_REQUEST})

CLIENT_SETTING_FIELDS = frozenset({
    "free_lunch_enabled",
    "discounted_to_go_enabled",
    "discounted_to_go_percentage",
})


@dataclass(frozen=True)
class UpdateClientSettingsRequest:
    """Partial update of the register-wide client settings."""
    changes: dict

    def __post_init__(self):
        if not isinstance(self.changes, dict):
            raise TypeError("changes must be a dict.")
        unknown = set(self.changes) - CLIENT_SETTING_FIELDS
        if unknown:
            raise ValueError(
                f"Unknown client settings: {sorted(unknown)}. "
                f"Known: {sorted(CLIENT_SETTING_FIELDS)}"
            )

    def to_command(
        self,
        *,
        actor_id: Optional[str],
        command_id: uuid.UUID,
        issued_at: datetime,
    ) -> Command:
        return Command(
            command_id=command_id,
            command_type=SETTINGS_CLIENT_UPDATE_REQUEST,
            actor_id=actor_id,
            payload={"changes": dict(self.changes)},
            issued_at=issued_at,
            source_engine="settings",
        )
