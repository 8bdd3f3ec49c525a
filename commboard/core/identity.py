import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

import httpx

logger = logging.getLogger(__name__)


class IdentityError(Exception):
    """The identity provider could not be reached or returned an error."""


@dataclass(frozen=True)
class UserProfile:
    user_id: str
    handle: Optional[str] = None
    emails: Tuple[str, ...] = field(default_factory=tuple)
    display_name: Optional[str] = None
    image_url: Optional[str] = None


def profile_from_payload(payload: Dict[str, Any]) -> UserProfile:
    """Map a provider user document to a UserProfile.

    Expects the Clerk-style shape: ``username``, ``email_addresses[].email_address``,
    ``first_name``/``last_name`` and ``image_url``.
    """
    emails = tuple(
        e["email_address"].strip().lower()
        for e in payload.get("email_addresses") or []
        if e.get("email_address")
    )
    first = payload.get("first_name") or ""
    last = payload.get("last_name") or ""
    full_name = f"{first} {last}".strip()
    return UserProfile(
        user_id=str(payload.get("id", "")),
        handle=payload.get("username") or None,
        emails=emails,
        display_name=full_name or payload.get("username") or None,
        image_url=payload.get("image_url") or None,
    )


class IdentityClient:
    """Async lookups against the external identity provider."""

    def __init__(
        self,
        base_url: Optional[str],
        api_key: Optional[str] = None,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/") if base_url else None
        self._client: Optional[httpx.AsyncClient] = None
        if self.base_url:
            headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=timeout,
                transport=transport,
            )

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def get_user(self, user_id: str) -> Optional[UserProfile]:
        """Fetch a user profile. Returns None if lookups are disabled or the user is unknown."""
        if self._client is None:
            return None
        try:
            res = await self._client.get(f"/users/{user_id}")
            if res.status_code == 404:
                return None
            res.raise_for_status()
            return profile_from_payload(res.json())
        except httpx.HTTPError as e:
            raise IdentityError(f"Identity lookup failed for {user_id}: {e}") from e

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
