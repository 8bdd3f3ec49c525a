"""Shared fixtures: a temporary SQLite database, a fake identity provider and an API client."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio

from commboard.api.deps import Services, build_services
from commboard.core.config import Settings
from commboard.core.identity import IdentityClient, UserProfile
from commboard.db.base import Base
from commboard.db.models.board import Board
from commboard.db.models.card import Card
from commboard.db.repositories import BoardRepository, CardRepository, utcnow
from commboard.db.session import make_engine, make_sessionmaker

ADMIN_EMAIL = "admin@example.com"

PROFILES: Dict[str, UserProfile] = {
    "admin-user": UserProfile(
        user_id="admin-user",
        handle="boss",
        emails=(ADMIN_EMAIL,),
        display_name="Ada Admin",
    ),
    "alice": UserProfile(
        user_id="alice",
        handle="alice",
        emails=("alice@example.com",),
        display_name="Alice Liddell",
        image_url="https://img.example.com/alice.png",
    ),
    "bob": UserProfile(
        user_id="bob",
        handle="bob",
        emails=("bob@example.com",),
        display_name="Bob Builder",
    ),
}


def auth(user_id: str) -> Dict[str, str]:
    """Request headers identifying ``user_id``."""
    return {"X-User-Id": user_id}


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a throwaway database, with one configured admin."""
    return Settings(
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'boards.db'}",
        admin_identifiers=(ADMIN_EMAIL,),
    )


@pytest.fixture
def identity() -> AsyncMock:
    """Identity provider double answering from PROFILES."""
    client = AsyncMock(spec=IdentityClient)

    async def get_user(user_id: str) -> Optional[UserProfile]:
        return PROFILES.get(user_id)

    client.get_user.side_effect = get_user
    return client


@pytest_asyncio.fixture
async def engine(settings: Settings):
    engine = make_engine(settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def sessions(engine):
    return make_sessionmaker(engine)


@pytest.fixture
def services(settings: Settings, sessions, identity: AsyncMock) -> Services:
    return build_services(settings, sessions, identity)


@pytest.fixture
def seed_board(sessions):
    """Factory inserting a board with ``n_cards`` cards at positions 0..n-1."""
    boards = BoardRepository(sessions)

    async def _seed(
        board_id: str,
        owner: str,
        *,
        is_public: bool = False,
        n_cards: int = 0,
        name: str = "Board",
        card_prefix: Optional[str] = None,
    ) -> Tuple[Board, List[Card]]:
        board = Board(
            id=board_id,
            user_id=owner,
            name=name,
            description="",
            is_public=is_public,
            created_at=utcnow(),
        )
        prefix = card_prefix or f"{board_id}-card"
        cards = [
            Card(
                id=f"{prefix}-{i}",
                board_id=board_id,
                order=i,
                label=f"word {i}",
                image_url=f"https://img.example.com/{i}.png",
                audio_url="",
                color="#6366f1",
            )
            for i in range(n_cards)
        ]
        await boards.add(board, cards)
        return board, cards

    return _seed


@pytest.fixture
def card_positions(sessions):
    """Read back a board's cards as {card_id: position}."""
    cards = CardRepository(sessions)

    async def _positions(board_id: str) -> Dict[str, int]:
        return {c.id: c.order for c in await cards.list_for_board(board_id)}

    return _positions


@pytest_asyncio.fixture
async def client(settings: Settings, identity: AsyncMock, engine):
    from commboard.main import create_app

    app = create_app(settings, identity=identity)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    await app.state.engine.dispose()
