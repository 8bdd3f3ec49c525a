from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from commboard.core.access import AccessEvaluator, Actor
from commboard.core.config import Settings
from commboard.core.errors import AuthenticationRequired, AuthorizationDenied
from commboard.core.identity import IdentityClient
from commboard.core.limits import LimitResolver
from commboard.core.services import BoardService, CardService
from commboard.core.social import SocialService
from commboard.db.repositories import (
    BoardRepository,
    CardRepository,
    CommentRepository,
    LikeRepository,
    SettingsRepository,
)


@dataclass
class Services:
    boards: BoardService
    cards: CardService
    social: SocialService
    limits: LimitResolver
    access: AccessEvaluator


def build_services(
    settings: Settings,
    sessions: async_sessionmaker[AsyncSession],
    identity: IdentityClient,
) -> Services:
    board_repo = BoardRepository(sessions)
    card_repo = CardRepository(sessions)
    comment_repo = CommentRepository(sessions)
    like_repo = LikeRepository(sessions)

    limits = LimitResolver(settings, SettingsRepository(sessions))
    access = AccessEvaluator(settings, identity)

    return Services(
        boards=BoardService(board_repo, card_repo, comment_repo, like_repo, limits, access),
        cards=CardService(board_repo, card_repo, limits, access),
        social=SocialService(board_repo, comment_repo, like_repo, access),
        limits=limits,
        access=access,
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


async def current_actor(request: Request) -> Actor:
    """The caller as asserted by the upstream authentication layer; may be anonymous."""
    settings: Settings = request.app.state.settings
    user_id = (request.headers.get(settings.auth_header) or "").strip()
    return Actor(id=user_id or None)


async def authenticated_actor(actor: Actor = Depends(current_actor)) -> Actor:
    if not actor.is_authenticated:
        raise AuthenticationRequired()
    return actor


async def admin_actor(
    actor: Actor = Depends(authenticated_actor),
    services: Services = Depends(get_services),
) -> Actor:
    if not await services.access.is_admin(actor):
        raise AuthorizationDenied("Forbidden")
    return actor
