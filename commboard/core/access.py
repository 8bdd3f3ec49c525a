"""Who may read or change boards, cards and comments.

Policy: resource existence is never disclosed to non-authorized actors. Callers
that look a board up before a mutation raise the same ``AuthorizationDenied``
for "missing" and "not allowed" (see ``deny_unless``).
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from commboard.core.config import Settings
from commboard.core.errors import AuthorizationDenied
from commboard.core.identity import IdentityClient, IdentityError, UserProfile
from commboard.db.models.board import Board
from commboard.db.models.card import Card
from commboard.db.models.comment import BoardComment

logger = logging.getLogger(__name__)

TEMPLATE_BOARD_PREFIX = "starter-"
TEMPLATE_CARD_PREFIX = "sbp-"

BOARD_ACCESS_DENIED = "Unauthorized access to board"


def is_template_board(board_id: str) -> bool:
    return board_id.startswith(TEMPLATE_BOARD_PREFIX)


def is_template_card(card_id: str) -> bool:
    return card_id.startswith(TEMPLATE_CARD_PREFIX)


@dataclass
class Actor:
    """The caller of one request. ``id`` is None for anonymous callers."""

    id: Optional[str]
    profile: Optional[UserProfile] = None
    profile_loaded: bool = False

    @property
    def is_authenticated(self) -> bool:
        return bool(self.id)


def deny_unless(allowed: bool, message: str = BOARD_ACCESS_DENIED) -> None:
    if not allowed:
        raise AuthorizationDenied(message)


class AccessEvaluator:
    def __init__(self, settings: Settings, identity: IdentityClient):
        self.admin_identifiers: Tuple[str, ...] = tuple(
            i.strip().lower() for i in settings.admin_identifiers if i.strip()
        )
        self.identity = identity

    async def load_profile(self, actor: Actor) -> Optional[UserProfile]:
        """Fetch and memoize the actor's profile for the rest of the request."""
        if actor.profile_loaded or not actor.is_authenticated:
            return actor.profile
        try:
            actor.profile = await self.identity.get_user(actor.id)
        except IdentityError:
            logger.warning(f"Profile lookup failed for {actor.id}", exc_info=True)
            actor.profile = None
        actor.profile_loaded = True
        return actor.profile

    async def is_admin(self, actor: Actor) -> bool:
        # Fail closed: no configured admin means nobody is admin, and no lookup happens
        if not self.admin_identifiers or not actor.is_authenticated:
            return False
        profile = await self.load_profile(actor)
        if profile is None:
            return False
        candidates = set(profile.emails)
        if profile.handle:
            candidates.add(profile.handle.lower())
        return any(c in self.admin_identifiers for c in candidates)

    def can_view(self, actor: Actor, board: Board) -> bool:
        return bool(board.is_public) or (
            actor.is_authenticated and actor.id == board.user_id
        )

    async def can_mutate(self, actor: Actor, board: Board) -> bool:
        if is_template_board(board.id):
            return False
        if not actor.is_authenticated:
            return False
        # Ownership is enough; the admin lookup may be a remote call
        if actor.id == board.user_id:
            return True
        return await self.is_admin(actor)

    async def can_modify_card(self, actor: Actor, board: Board, card: Card) -> bool:
        if is_template_card(card.id):
            return False
        return await self.can_mutate(actor, board)

    def can_modify_comment(self, actor: Actor, comment: BoardComment) -> bool:
        return actor.is_authenticated and actor.id == comment.user_id
