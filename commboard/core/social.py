import asyncio
import logging
from typing import List, Optional, Tuple
from uuid import uuid4

from commboard.core.access import AccessEvaluator, Actor
from commboard.core.errors import NotFound, ValidationFailed
from commboard.core.services import require_actor
from commboard.core.validation import MAX_COMMENT, validate_string_length
from commboard.db.models.board import Board
from commboard.db.models.comment import BoardComment
from commboard.db.models.like import BoardLike
from commboard.db.repositories import (
    BoardRepository,
    CommentRepository,
    LikeRepository,
    utcnow,
)

logger = logging.getLogger(__name__)

COMMENT_NOT_FOUND = "Not found or unauthorized"


def _clean_content(content: Optional[str]) -> str:
    if not content or not content.strip():
        raise ValidationFailed("Comment content is required", field="content")
    text = content.strip()
    validate_string_length(text, MAX_COMMENT, "Comment", "content")
    return text


class SocialService:
    """Comments and likes on boards the actor can see."""

    def __init__(
        self,
        boards: BoardRepository,
        comments: CommentRepository,
        likes: LikeRepository,
        access: AccessEvaluator,
    ):
        self.boards = boards
        self.comments = comments
        self.likes = likes
        self.access = access

    async def _visible_board(self, actor: Actor, board_id: str) -> Board:
        board = await self.boards.get(board_id)
        # Private boards look missing to everyone but their owner
        if board is None or not self.access.can_view(actor, board):
            raise NotFound("Board not found")
        return board

    async def list_comments(self, actor: Actor, board_id: str) -> List[BoardComment]:
        await self._visible_board(actor, board_id)
        return await self.comments.list_for_board(board_id)

    async def add_comment(self, actor: Actor, board_id: str, content: Optional[str]) -> BoardComment:
        user_id = require_actor(actor)
        text = _clean_content(content)
        await self._visible_board(actor, board_id)

        profile = await self.access.load_profile(actor)
        now = utcnow()
        comment = BoardComment(
            id=str(uuid4()),
            board_id=board_id,
            user_id=user_id,
            content=text,
            commenter_name=(profile.display_name if profile else None) or "Anonymous",
            commenter_image_url=profile.image_url if profile else None,
            created_at=now,
            updated_at=now,
            is_edited=False,
        )
        return await self.comments.add(comment)

    async def _own_comment(self, actor: Actor, comment_id: str) -> BoardComment:
        comment = await self.comments.get(comment_id)
        if comment is None or not self.access.can_modify_comment(actor, comment):
            raise NotFound(COMMENT_NOT_FOUND)
        return comment

    async def update_comment(self, actor: Actor, comment_id: str, content: Optional[str]) -> BoardComment:
        require_actor(actor)
        text = _clean_content(content)
        comment = await self._own_comment(actor, comment_id)

        comment.content = text
        comment.is_edited = True
        comment.updated_at = utcnow()
        return await self.comments.save(comment)

    async def delete_comment(self, actor: Actor, comment_id: str) -> None:
        require_actor(actor)
        await self._own_comment(actor, comment_id)
        await self.comments.delete(comment_id)

    async def like(self, actor: Actor, board_id: str) -> Tuple[bool, int]:
        user_id = require_actor(actor)
        await self._visible_board(actor, board_id)
        await self.likes.like(
            BoardLike(id=str(uuid4()), board_id=board_id, user_id=user_id, created_at=utcnow())
        )
        return True, await self.likes.count(board_id)

    async def unlike(self, actor: Actor, board_id: str) -> Tuple[bool, int]:
        user_id = require_actor(actor)
        await self._visible_board(actor, board_id)
        await self.likes.unlike(board_id, user_id)
        return False, await self.likes.count(board_id)

    async def like_status(self, actor: Actor, board_id: str) -> Tuple[bool, int]:
        await self._visible_board(actor, board_id)
        if not actor.is_authenticated:
            return False, await self.likes.count(board_id)
        liked, count = await asyncio.gather(
            self.likes.liked_by(actor.id, [board_id]),
            self.likes.count(board_id),
        )
        return board_id in liked, count
