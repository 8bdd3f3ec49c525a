"""Row-level persistence for boards, cards, settings, comments and likes.

Every method opens its own short-lived session from the factory, so callers can
gather independent reads without sharing an ``AsyncSession`` across tasks.
"""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from commboard.db.models.app_setting import AppSetting
from commboard.db.models.board import Board
from commboard.db.models.card import Card
from commboard.db.models.comment import BoardComment
from commboard.db.models.like import BoardLike


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BoardRepository:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]):
        self._sessions = sessions

    async def get(self, board_id: str) -> Optional[Board]:
        async with self._sessions() as db:
            return await db.get(Board, board_id)

    async def count_for_user(self, user_id: str) -> int:
        async with self._sessions() as db:
            result = await db.execute(
                select(func.count()).select_from(Board).where(Board.user_id == user_id)
            )
            return result.scalar_one()

    async def list_for_user(self, user_id: str) -> List[Board]:
        async with self._sessions() as db:
            result = await db.execute(
                select(Board)
                .where(Board.user_id == user_id)
                .order_by(Board.created_at.desc(), Board.id)
            )
            return list(result.scalars().all())

    async def list_public(self) -> List[Board]:
        async with self._sessions() as db:
            result = await db.execute(
                select(Board)
                .where(Board.is_public.is_(True))
                .order_by(Board.created_at.desc(), Board.id)
            )
            return list(result.scalars().all())

    async def add(self, board: Board, cards: Sequence[Card] = ()) -> Board:
        async with self._sessions.begin() as db:
            db.add(board)
            db.add_all(list(cards))
        return board

    async def save(self, board: Board) -> Board:
        async with self._sessions.begin() as db:
            await db.merge(board)
        return board

    async def delete(self, board_id: str) -> None:
        async with self._sessions.begin() as db:
            # Children first; SQLite does not enforce ON DELETE CASCADE by default
            await db.execute(delete(Card).where(Card.board_id == board_id))
            await db.execute(delete(BoardComment).where(BoardComment.board_id == board_id))
            await db.execute(delete(BoardLike).where(BoardLike.board_id == board_id))
            await db.execute(delete(Board).where(Board.id == board_id))


class CardRepository:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]):
        self._sessions = sessions

    async def get(self, card_id: str) -> Optional[Card]:
        async with self._sessions() as db:
            return await db.get(Card, card_id)

    async def list_for_board(self, board_id: str) -> List[Card]:
        async with self._sessions() as db:
            result = await db.execute(
                select(Card).where(Card.board_id == board_id).order_by(Card.order, Card.id)
            )
            return list(result.scalars().all())

    async def count_for_board(self, board_id: str) -> int:
        async with self._sessions() as db:
            result = await db.execute(
                select(func.count()).select_from(Card).where(Card.board_id == board_id)
            )
            return result.scalar_one()

    async def count_by_board(self, board_ids: Iterable[str]) -> Dict[str, int]:
        ids = list(board_ids)
        if not ids:
            return {}
        async with self._sessions() as db:
            result = await db.execute(
                select(Card.board_id, func.count())
                .where(Card.board_id.in_(ids))
                .group_by(Card.board_id)
            )
            return {board_id: count for board_id, count in result.all()}

    async def max_position(self, board_id: str) -> Optional[int]:
        async with self._sessions() as db:
            result = await db.execute(
                select(func.max(Card.order)).where(Card.board_id == board_id)
            )
            return result.scalar_one_or_none()

    async def labels_for_board(self, board_id: str) -> Set[str]:
        """Lowercased, stripped labels of every card on the board."""
        async with self._sessions() as db:
            result = await db.execute(select(Card.label).where(Card.board_id == board_id))
            return {
                label.strip().lower()
                for label in result.scalars().all()
                if label and label.strip()
            }

    async def add_many(self, cards: Sequence[Card]) -> List[Card]:
        async with self._sessions.begin() as db:
            db.add_all(list(cards))
        return list(cards)

    async def save(self, card: Card) -> Card:
        async with self._sessions.begin() as db:
            await db.merge(card)
        return card

    async def delete(self, card_id: str) -> None:
        async with self._sessions.begin() as db:
            await db.execute(delete(Card).where(Card.id == card_id))

    async def apply_positions(self, board_id: str, positions: Mapping[str, int]) -> None:
        """Write every card position of a board in a single transaction."""
        async with self._sessions.begin() as db:
            for card_id, position in positions.items():
                await db.execute(
                    update(Card)
                    .where(Card.id == card_id, Card.board_id == board_id)
                    .values({Card.order: position})
                )


class SettingsRepository:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]):
        self._sessions = sessions

    async def get(self, key: str) -> Optional[str]:
        async with self._sessions() as db:
            row = await db.get(AppSetting, key)
            return row.value if row else None

    async def all(self) -> Dict[str, str]:
        async with self._sessions() as db:
            result = await db.execute(select(AppSetting).order_by(AppSetting.key))
            return {row.key: row.value for row in result.scalars().all()}

    async def upsert(self, key: str, value: str) -> None:
        async with self._sessions.begin() as db:
            row = await db.get(AppSetting, key)
            if row is None:
                db.add(AppSetting(key=key, value=value, updated_at=utcnow()))
            else:
                row.value = value
                row.updated_at = utcnow()


class CommentRepository:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]):
        self._sessions = sessions

    async def get(self, comment_id: str) -> Optional[BoardComment]:
        async with self._sessions() as db:
            return await db.get(BoardComment, comment_id)

    async def list_for_board(self, board_id: str) -> List[BoardComment]:
        async with self._sessions() as db:
            result = await db.execute(
                select(BoardComment)
                .where(BoardComment.board_id == board_id)
                .order_by(BoardComment.created_at, BoardComment.id)
            )
            return list(result.scalars().all())

    async def count_by_board(self, board_ids: Iterable[str]) -> Dict[str, int]:
        ids = list(board_ids)
        if not ids:
            return {}
        async with self._sessions() as db:
            result = await db.execute(
                select(BoardComment.board_id, func.count())
                .where(BoardComment.board_id.in_(ids))
                .group_by(BoardComment.board_id)
            )
            return {board_id: count for board_id, count in result.all()}

    async def add(self, comment: BoardComment) -> BoardComment:
        async with self._sessions.begin() as db:
            db.add(comment)
        return comment

    async def save(self, comment: BoardComment) -> BoardComment:
        async with self._sessions.begin() as db:
            await db.merge(comment)
        return comment

    async def delete(self, comment_id: str) -> None:
        async with self._sessions.begin() as db:
            await db.execute(delete(BoardComment).where(BoardComment.id == comment_id))


class LikeRepository:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]):
        self._sessions = sessions

    async def like(self, like: BoardLike) -> None:
        async with self._sessions.begin() as db:
            existing = await db.execute(
                select(BoardLike.id).where(
                    BoardLike.board_id == like.board_id, BoardLike.user_id == like.user_id
                )
            )
            if existing.first() is None:
                db.add(like)

    async def unlike(self, board_id: str, user_id: str) -> None:
        async with self._sessions.begin() as db:
            await db.execute(
                delete(BoardLike).where(
                    BoardLike.board_id == board_id, BoardLike.user_id == user_id
                )
            )

    async def count(self, board_id: str) -> int:
        async with self._sessions() as db:
            result = await db.execute(
                select(func.count()).select_from(BoardLike).where(BoardLike.board_id == board_id)
            )
            return result.scalar_one()

    async def count_by_board(self, board_ids: Iterable[str]) -> Dict[str, int]:
        ids = list(board_ids)
        if not ids:
            return {}
        async with self._sessions() as db:
            result = await db.execute(
                select(BoardLike.board_id, func.count())
                .where(BoardLike.board_id.in_(ids))
                .group_by(BoardLike.board_id)
            )
            return {board_id: count for board_id, count in result.all()}

    async def liked_by(self, user_id: str, board_ids: Iterable[str]) -> Set[str]:
        ids = list(board_ids)
        if not ids:
            return set()
        async with self._sessions() as db:
            result = await db.execute(
                select(BoardLike.board_id).where(
                    BoardLike.user_id == user_id, BoardLike.board_id.in_(ids)
                )
            )
            return set(result.scalars().all())
