"""Whole-board card reordering.

A reorder is validated completely before anything is written, then every card
position of the board is written in one transaction. Cards left out of the
submitted order keep their previous relative order and are placed after the
submitted cards. Concurrent reorders of one board are last-write-wins.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence

from commboard.core.access import (
    AccessEvaluator,
    Actor,
    deny_unless,
    is_template_board,
)
from commboard.core.errors import AuthenticationRequired, AuthorizationDenied, ValidationFailed
from commboard.core.validation import MAX_CARD_POSITION
from commboard.db.repositories import BoardRepository, CardRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CardPosition:
    card_id: str
    position: int


class OrderingManager:
    def __init__(self, boards: BoardRepository, cards: CardRepository, access: AccessEvaluator):
        self.boards = boards
        self.cards = cards
        self.access = access

    async def reorder(
        self, board_id: str, actor: Actor, new_order: Sequence[CardPosition]
    ) -> Dict[str, int]:
        """Persist a new card order for a board and return the full position map."""
        if not actor.is_authenticated:
            raise AuthenticationRequired()

        if is_template_board(board_id):
            raise AuthorizationDenied("Template boards cannot be modified")

        board = await self.boards.get(board_id)
        allowed = board is not None and await self.access.can_mutate(actor, board)
        if not allowed:
            logger.info(f"Reorder of board {board_id} denied for {actor.id}")
        # Same denial whether the board is missing or forbidden
        deny_unless(allowed)

        existing = await self.cards.list_for_board(board_id)
        positions = self._merge(new_order, [c.id for c in existing])

        await self.cards.apply_positions(board_id, positions)
        logger.info(f"Reordered {len(positions)} cards on board {board_id}")
        return positions

    @staticmethod
    def _merge(new_order: Sequence[CardPosition], existing_ids: List[str]) -> Dict[str, int]:
        known = set(existing_ids)
        positions: Dict[str, int] = {}
        taken = set()

        for entry in new_order:
            if entry.card_id not in known:
                raise ValidationFailed(
                    f"Card {entry.card_id} does not belong to this board", field="cardOrders"
                )
            if entry.card_id in positions:
                raise ValidationFailed(
                    f"Card {entry.card_id} appears more than once", field="cardOrders"
                )
            if entry.position < 0:
                raise ValidationFailed("Positions must not be negative", field="cardOrders")
            if entry.position > MAX_CARD_POSITION:
                raise ValidationFailed(
                    f"Positions must not exceed {MAX_CARD_POSITION}", field="cardOrders"
                )
            if entry.position in taken:
                raise ValidationFailed(
                    f"Position {entry.position} is used more than once", field="cardOrders"
                )
            positions[entry.card_id] = entry.position
            taken.add(entry.position)

        # existing_ids is already in stored order
        next_position = max(taken) + 1 if taken else 0
        omitted = len(existing_ids) - len(positions)
        if next_position + omitted - 1 > MAX_CARD_POSITION:
            raise ValidationFailed(
                "Positions leave no room for the cards not listed", field="cardOrders"
            )
        for card_id in existing_ids:
            if card_id not in positions:
                positions[card_id] = next_position
                next_position += 1

        return positions
