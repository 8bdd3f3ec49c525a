import re
from typing import Optional

from commboard.core.errors import ValidationFailed

MAX_BOARD_NAME = 100
MAX_BOARD_DESCRIPTION = 500
MAX_CARD_LABEL = 100
MAX_COMMENT = 2000
# Upper bound of the 32-bit cards.position column
MAX_CARD_POSITION = 2**31 - 1

COLOR_REGEX = re.compile(r"^(#[0-9a-fA-F]{3,8}|var\(--[a-zA-Z0-9-]+\))$")


def validate_string_length(value: Optional[str], max_length: int, field_name: str, field: str) -> None:
    if value is not None and len(value) > max_length:
        raise ValidationFailed(
            f"{field_name} must be {max_length} characters or less.", field=field
        )


def validate_color(value: str) -> None:
    if not COLOR_REGEX.fullmatch(value):
        raise ValidationFailed(
            "Invalid color format. Use a hex color (e.g. #6366f1) "
            "or CSS variable (e.g. var(--primary)).",
            field="color",
        )


def normalize_category(value: Optional[str]) -> Optional[str]:
    """'  FOOD ' -> 'Food'. Empty strings become None."""
    if value is None:
        return None
    text = value.strip().lower()
    return text[:1].upper() + text[1:] if text else None
