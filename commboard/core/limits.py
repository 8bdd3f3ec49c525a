"""Effective quota resolution and the admin-editable settings schema.

Limits resolve in this order, highest first:

1. the runtime override from ``Settings`` (``MAX_BOARDS_PER_USER`` /
   ``MAX_CARDS_PER_BOARD``), used as-is when it parses as an integer;
2. the stored ``app_settings`` row, used only when it is a positive integer;
3. the hard-coded default.

A malformed stored value is skipped, never raised, so the resolver always
returns a usable number.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from commboard.core.config import Settings
from commboard.core.errors import ValidationFailed
from commboard.db.repositories import SettingsRepository

logger = logging.getLogger(__name__)


class SettingKey(str, Enum):
    MAX_BOARDS_PER_USER = "max_boards_per_user"
    MAX_CARDS_PER_BOARD = "max_cards_per_board"


@dataclass(frozen=True)
class SettingSchema:
    label: str
    default: int
    min: int
    max: int
    type: str = "number"

    def validate(self, value: Any) -> int:
        """Return the value as an int, or raise ValidationFailed."""
        number = _as_whole_number(value)
        if number is None:
            raise ValidationFailed(f"{self.label} must be a whole number", field="value")
        if number < self.min or number > self.max:
            raise ValidationFailed(
                f"{self.label} must be between {self.min} and {self.max}", field="value"
            )
        return number

    def as_dict(self) -> Dict[str, Any]:
        return {"label": self.label, "type": self.type, "min": self.min, "max": self.max}


SETTING_SCHEMAS: Dict[SettingKey, SettingSchema] = {
    SettingKey.MAX_BOARDS_PER_USER: SettingSchema(
        label="Max boards per user", default=5, min=1, max=1000
    ),
    SettingKey.MAX_CARDS_PER_BOARD: SettingSchema(
        label="Max cards per board", default=100, min=1, max=10000
    ),
}


def _as_whole_number(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        if number != number or number in (float("inf"), float("-inf")):
            return None
        return int(number) if number.is_integer() else None
    return None


def _parse_int(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def resolve_limit(
    kind: SettingKey,
    override: Optional[str] = None,
    stored: Optional[str] = None,
) -> int:
    """Pick the effective limit for ``kind`` from override, stored value and default."""
    forced = _parse_int(override)
    if forced is not None:
        return forced
    if override is not None:
        logger.warning(f"Ignoring non-integer override for {kind.value}: {override!r}")

    persisted = _parse_int(stored)
    if persisted is not None and persisted > 0:
        return persisted

    return SETTING_SCHEMAS[kind].default


class LimitResolver:
    def __init__(self, settings: Settings, repo: SettingsRepository):
        self.settings = settings
        self.repo = repo

    def _override(self, kind: SettingKey) -> Optional[str]:
        if kind is SettingKey.MAX_BOARDS_PER_USER:
            return self.settings.max_boards_override
        return self.settings.max_cards_override

    async def resolve(self, kind: SettingKey) -> int:
        override = self._override(kind)
        # The override wins unconditionally, so skip the database read
        if _parse_int(override) is not None:
            return resolve_limit(kind, override=override)
        stored = await self.repo.get(kind.value)
        return resolve_limit(kind, override=override, stored=stored)

    async def get_max_boards_per_user(self) -> int:
        return await self.resolve(SettingKey.MAX_BOARDS_PER_USER)

    async def get_max_cards_per_board(self) -> int:
        return await self.resolve(SettingKey.MAX_CARDS_PER_BOARD)

    async def get_settings(self) -> Dict[str, str]:
        """Stored values for the recognized keys only."""
        stored = await self.repo.all()
        known = {key.value for key in SettingKey}
        return {key: value for key, value in stored.items() if key in known}

    async def update_setting(self, key: str, value: Any) -> str:
        """Validate and store a setting. Returns the normalized stored string."""
        if not key or value is None:
            raise ValidationFailed("key and value are required")
        try:
            setting = SettingKey(key)
        except ValueError:
            raise ValidationFailed(f"Unknown setting: {key}", field="key")

        normalized = str(SETTING_SCHEMAS[setting].validate(value))
        await self.repo.upsert(setting.value, normalized)
        logger.info(f"Setting {setting.value} updated to {normalized}")
        return normalized


def settings_schema() -> Dict[str, Dict[str, Any]]:
    return {key.value: schema.as_dict() for key, schema in SETTING_SCHEMAS.items()}
