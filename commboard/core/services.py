import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple
from uuid import uuid4

from commboard.core.access import (
    AccessEvaluator,
    Actor,
    deny_unless,
    is_template_card,
)
from commboard.core.errors import (
    AuthenticationRequired,
    AuthorizationDenied,
    Conflict,
    LimitExceeded,
    NotFound,
    ValidationFailed,
)
from commboard.core.limits import LimitResolver, SettingKey
from commboard.core.ordering import CardPosition, OrderingManager
from commboard.core.validation import (
    MAX_BOARD_DESCRIPTION,
    MAX_BOARD_NAME,
    MAX_CARD_LABEL,
    MAX_CARD_POSITION,
    normalize_category,
    validate_color,
    validate_string_length,
)
from commboard.db.models.board import Board
from commboard.db.models.card import Card
from commboard.db.repositories import (
    BoardRepository,
    CardRepository,
    CommentRepository,
    LikeRepository,
    utcnow,
)

logger = logging.getLogger(__name__)

DEFAULT_CARD_COLOR = "#6366f1"
CARD_CONTENT_FIELDS = ("label", "image_url", "audio_url", "color", "category")


def require_actor(actor: Actor) -> str:
    if not actor.is_authenticated:
        raise AuthenticationRequired()
    return actor.id


class BoardService:
    def __init__(
        self,
        boards: BoardRepository,
        cards: CardRepository,
        comments: CommentRepository,
        likes: LikeRepository,
        limits: LimitResolver,
        access: AccessEvaluator,
    ):
        self.boards = boards
        self.cards = cards
        self.comments = comments
        self.likes = likes
        self.limits = limits
        self.access = access
        self.ordering = OrderingManager(boards, cards, access)

    async def _check_board_quota(self, user_id: str) -> None:
        count, limit = await asyncio.gather(
            self.boards.count_for_user(user_id),
            self.limits.get_max_boards_per_user(),
        )
        if count >= limit:
            logger.info(f"Board limit reached for {user_id}: {count}/{limit}")
            raise LimitExceeded(
                SettingKey.MAX_BOARDS_PER_USER.value,
                limit,
                f"Board limit reached. You can create up to {limit} boards.",
            )

    async def _creator_info(self, actor: Actor) -> Tuple[Optional[str], Optional[str]]:
        """Best-effort display name and avatar; never fails board creation."""
        try:
            profile = await self.access.load_profile(actor)
        except Exception:
            logger.warning(f"Creator enrichment failed for {actor.id}", exc_info=True)
            return None, None
        if profile is None:
            return None, None
        return profile.display_name, profile.image_url

    async def create_board(
        self, actor: Actor, name: Optional[str], description: Optional[str] = None
    ) -> Board:
        user_id = require_actor(actor)
        await self._check_board_quota(user_id)

        if not name or not name.strip():
            raise ValidationFailed("Name is required", field="name")
        validate_string_length(name, MAX_BOARD_NAME, "Board name", "name")
        validate_string_length(description, MAX_BOARD_DESCRIPTION, "Description", "description")

        creator_name, creator_image_url = await self._creator_info(actor)

        board = Board(
            id=str(uuid4()),
            user_id=user_id,
            name=name,
            description=description or "",
            is_public=False,
            created_at=utcnow(),
            creator_name=creator_name,
            creator_image_url=creator_image_url,
        )
        await self.boards.add(board)
        logger.info(f"Board {board.id} created by {user_id}")
        return board

    async def list_boards(self, actor: Actor) -> List[Board]:
        return await self.boards.list_for_user(require_actor(actor))

    async def list_public_boards(self, actor: Actor) -> List[Dict[str, Any]]:
        """Public boards with like, comment and card counts."""
        boards = await self.boards.list_public()
        ids = [b.id for b in boards]

        liked_task = (
            self.likes.liked_by(actor.id, ids) if actor.is_authenticated else asyncio.sleep(0, set())
        )
        likes, comments, cards, liked = await asyncio.gather(
            self.likes.count_by_board(ids),
            self.comments.count_by_board(ids),
            self.cards.count_by_board(ids),
            liked_task,
        )
        return [
            {
                "board": b,
                "like_count": likes.get(b.id, 0),
                "comment_count": comments.get(b.id, 0),
                "card_count": cards.get(b.id, 0),
                "is_liked_by_user": b.id in liked,
            }
            for b in boards
        ]

    async def get_board(self, actor: Actor, board_id: str) -> Board:
        board = await self.boards.get(board_id)
        if board is None:
            raise NotFound("Board not found")
        if not self.access.can_view(actor, board):
            raise AuthorizationDenied("Unauthorized")
        return board

    async def _mutable_board(self, actor: Actor, board_id: str) -> Board:
        require_actor(actor)
        board = await self.boards.get(board_id)
        deny_unless(board is not None and await self.access.can_mutate(actor, board))
        return board

    async def update_board(
        self,
        actor: Actor,
        board_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        is_public: Optional[bool] = None,
    ) -> Board:
        board = await self._mutable_board(actor, board_id)

        validate_string_length(name, MAX_BOARD_NAME, "Board name", "name")
        validate_string_length(description, MAX_BOARD_DESCRIPTION, "Description", "description")

        if name and name.strip():
            board.name = name
        if description is not None:
            board.description = description
        if is_public is not None:
            board.is_public = is_public

        await self.boards.save(board)
        return board

    async def delete_board(self, actor: Actor, board_id: str) -> None:
        await self._mutable_board(actor, board_id)
        await self.boards.delete(board_id)
        logger.info(f"Board {board_id} deleted by {actor.id}")

    async def clone_board(
        self, actor: Actor, template_board_id: Optional[str], new_board_name: Optional[str]
    ) -> Tuple[Board, int]:
        """Copy a viewable board and its cards into a new private board."""
        user_id = require_actor(actor)
        if not template_board_id or not new_board_name or not new_board_name.strip():
            raise ValidationFailed("Template board ID and new board name are required")
        validate_string_length(new_board_name, MAX_BOARD_NAME, "Board name", "newBoardName")

        template = await self.boards.get(template_board_id)
        if template is None or not self.access.can_view(actor, template):
            raise NotFound("Template board not found")

        await self._check_board_quota(user_id)
        template_cards, max_cards = await asyncio.gather(
            self.cards.list_for_board(template_board_id),
            self.limits.get_max_cards_per_board(),
        )
        if len(template_cards) > max_cards:
            raise LimitExceeded(SettingKey.MAX_CARDS_PER_BOARD.value, max_cards)

        creator_name, creator_image_url = await self._creator_info(actor)
        board = Board(
            id=str(uuid4()),
            user_id=user_id,
            name=new_board_name,
            description=f"Based on {template.name}"[:MAX_BOARD_DESCRIPTION],
            is_public=False,
            created_at=utcnow(),
            creator_name=creator_name,
            creator_image_url=creator_image_url,
        )
        copies = [
            Card(
                id=str(uuid4()),
                board_id=board.id,
                order=card.order,
                label=card.label,
                image_url=card.image_url,
                audio_url=card.audio_url,
                color=card.color,
                category=card.category,
                template_key=card.template_key,
                source_board_id=card.source_board_id,
            )
            for card in template_cards
        ]
        await self.boards.add(board, copies)
        logger.info(f"Board {template_board_id} cloned into {board.id} by {user_id}")
        return board, len(copies)

    async def get_max_cards_per_board(self) -> int:
        return await self.limits.get_max_cards_per_board()

    async def reorder_cards(
        self, actor: Actor, board_id: str, card_orders: Sequence[CardPosition]
    ) -> Dict[str, int]:
        return await self.ordering.reorder(board_id, actor, card_orders)


class CardService:
    def __init__(
        self,
        boards: BoardRepository,
        cards: CardRepository,
        limits: LimitResolver,
        access: AccessEvaluator,
    ):
        self.boards = boards
        self.cards = cards
        self.limits = limits
        self.access = access

    async def list_cards(self, actor: Actor, board_id: str) -> List[Card]:
        board = await self.boards.get(board_id)
        if board is None:
            raise NotFound("Board not found")
        if not self.access.can_view(actor, board):
            raise AuthorizationDenied("Unauthorized")
        return await self.cards.list_for_board(board_id)

    async def create_cards(
        self, actor: Actor, board_id: Optional[str], payloads: Sequence[Mapping[str, Any]]
    ) -> List[Card]:
        """Add one or more cards to the end of a board, enforcing the card limit."""
        require_actor(actor)
        if not board_id or not payloads:
            raise ValidationFailed("Board ID and cards are required")

        board = await self.boards.get(board_id)
        deny_unless(board is not None and await self.access.can_mutate(actor, board))

        count, limit, last_position, labels = await asyncio.gather(
            self.cards.count_for_board(board_id),
            self.limits.get_max_cards_per_board(),
            self.cards.max_position(board_id),
            self.cards.labels_for_board(board_id),
        )
        if count + len(payloads) > limit:
            raise LimitExceeded(
                SettingKey.MAX_CARDS_PER_BOARD.value,
                limit,
                f"Card limit reached. A board can hold up to {limit} cards.",
            )

        next_position = (last_position + 1) if last_position is not None else 0
        if next_position + len(payloads) - 1 > MAX_CARD_POSITION:
            raise ValidationFailed("No room left at the end of the board; reorder it first")
        new_cards = []
        for index, data in enumerate(payloads):
            label = data.get("label") or ""
            validate_string_length(label, MAX_CARD_LABEL, "Card label", "label")
            if not data.get("image_url") and not data.get("template_key"):
                raise ValidationFailed("Image is required", field="imageUrl")
            color = data.get("color") or DEFAULT_CARD_COLOR
            validate_color(color)

            key = label.strip().lower()
            if key:
                if key in labels:
                    raise Conflict(f'A card named "{label}" already exists on this board')
                labels.add(key)

            order = data.get("order")
            new_cards.append(
                Card(
                    id=str(uuid4()),
                    board_id=board_id,
                    order=order if order is not None else next_position + index,
                    label=label,
                    image_url=data.get("image_url"),
                    audio_url=data.get("audio_url") or "",
                    color=color,
                    category=normalize_category(data.get("category")),
                    template_key=data.get("template_key"),
                )
            )

        await self.cards.add_many(new_cards)
        logger.info(f"{len(new_cards)} card(s) added to board {board_id}")
        return new_cards

    async def update_card(self, actor: Actor, card_id: str, changes: Mapping[str, Any]) -> Card:
        """Edit a card's content and/or move it to another board.

        ``changes`` holds only the fields the caller sent: any of ``label``,
        ``image_url``, ``audio_url``, ``color``, ``category`` and ``board_id``.
        """
        require_actor(actor)
        card = await self.cards.get(card_id)
        if card is None:
            raise NotFound("Card not found")

        board = await self.boards.get(card.board_id)
        deny_unless(board is not None and await self.access.can_mutate(actor, board))
        if not await self.access.can_modify_card(actor, board, card):
            raise AuthorizationDenied("Template cards cannot be modified")

        if card.source_board_id:
            edited = [
                f for f in CARD_CONTENT_FIELDS
                if f in changes and changes[f] != getattr(card, f)
            ]
            if edited:
                raise AuthorizationDenied("Inherited cards from public boards cannot be edited")

        label = changes.get("label")
        if label is not None:
            validate_string_length(label, MAX_CARD_LABEL, "Card label", "label")
        color = changes.get("color")
        if color is not None:
            validate_color(color)

        target_id = changes.get("board_id") or card.board_id
        moving = target_id != card.board_id
        current_label = (card.label or "").strip().lower()
        new_label = (label if label is not None else card.label or "").strip().lower()

        if moving:
            destination = await self.boards.get(target_id)
            deny_unless(
                destination is not None and await self.access.can_mutate(actor, destination),
                "Unauthorized access to destination board",
            )
            count, limit, last_position, dest_labels = await asyncio.gather(
                self.cards.count_for_board(target_id),
                self.limits.get_max_cards_per_board(),
                self.cards.max_position(target_id),
                self.cards.labels_for_board(target_id),
            )
            if count >= limit:
                raise LimitExceeded(SettingKey.MAX_CARDS_PER_BOARD.value, limit)
            if new_label and new_label in dest_labels:
                raise Conflict(
                    f'A card named "{label if label is not None else card.label}" '
                    "already exists on the destination board"
                )
            next_position = (last_position + 1) if last_position is not None else 0
            if next_position > MAX_CARD_POSITION:
                raise ValidationFailed("No room left at the end of the destination board")
            card.board_id = target_id
            card.order = next_position
        elif new_label and new_label != current_label:
            if new_label in await self.cards.labels_for_board(card.board_id):
                raise Conflict(f'A card named "{label}" already exists on this board')

        if label is not None:
            card.label = label
        for f in ("image_url", "audio_url", "color"):
            if changes.get(f) is not None:
                setattr(card, f, changes[f])
        if "category" in changes:
            card.category = normalize_category(changes["category"])

        await self.cards.save(card)
        return card

    async def delete_card(self, actor: Actor, card_id: str) -> None:
        require_actor(actor)
        card = await self.cards.get(card_id)
        if card is None:
            raise NotFound("Card not found")

        board = await self.boards.get(card.board_id)
        deny_unless(board is not None and await self.access.can_mutate(actor, board))
        if is_template_card(card.id):
            raise AuthorizationDenied("Template cards cannot be deleted")

        await self.cards.delete(card_id)
        logger.info(f"Card {card_id} deleted from board {card.board_id}")
