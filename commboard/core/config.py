import os
from dataclasses import dataclass, field
from typing import Optional, Tuple


def _split_csv(raw: Optional[str]) -> Tuple[str, ...]:
    if not raw:
        return ()
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    """Process configuration, built once at startup and passed to the app."""

    env: str = "production"
    database_url: str = "sqlite+aiosqlite:///./commboard.db"
    admin_identifiers: Tuple[str, ...] = ()
    # Raw strings; parsed by the limit resolver so a malformed value never breaks startup
    max_boards_override: Optional[str] = None
    max_cards_override: Optional[str] = None
    identity_api_url: Optional[str] = None
    identity_api_key: Optional[str] = None
    identity_timeout: float = 5.0
    auth_header: str = "X-User-Id"
    cors_origins: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            env=os.getenv("APP_ENV", "production").lower(),
            database_url=os.getenv("DATABASE_URL") or cls.database_url,
            admin_identifiers=_split_csv(os.getenv("ADMIN_EMAILS")),
            max_boards_override=os.getenv("MAX_BOARDS_PER_USER") or None,
            max_cards_override=os.getenv("MAX_CARDS_PER_BOARD") or None,
            identity_api_url=os.getenv("IDENTITY_API_URL") or None,
            identity_api_key=os.getenv("IDENTITY_API_KEY") or None,
            identity_timeout=float(os.getenv("IDENTITY_TIMEOUT", "5")),
            auth_header=os.getenv("AUTH_HEADER", "X-User-Id"),
            cors_origins=tuple(
                o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()
            ),
        )
