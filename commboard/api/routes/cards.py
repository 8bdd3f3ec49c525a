import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from commboard.api.deps import Services, authenticated_actor, get_services
from commboard.core.access import Actor
from commboard.core.ordering import CardPosition
from commboard.schemas.card import (
    CardBatchCreate,
    CardCreate,
    CardRead,
    CardReorder,
    CardUpdate,
)
from commboard.schemas.system import ReorderResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cards", tags=["cards"])


@router.post("", response_model=CardRead, status_code=status.HTTP_201_CREATED)
async def add_card(
    card: CardCreate,
    actor: Actor = Depends(authenticated_actor),
    services: Services = Depends(get_services),
):
    payload = card.model_dump(exclude={"board_id"})
    created = await services.cards.create_cards(actor, card.board_id, [payload])
    return created[0]


@router.post("/batch", response_model=List[CardRead], status_code=status.HTTP_201_CREATED)
async def add_cards(
    batch: CardBatchCreate,
    actor: Actor = Depends(authenticated_actor),
    services: Services = Depends(get_services),
):
    """Create several cards at once; the card limit applies to the whole batch."""
    payloads = [c.model_dump() for c in batch.cards]
    return await services.cards.create_cards(actor, batch.board_id, payloads)


@router.put("/reorder", response_model=ReorderResult)
async def reorder_cards(
    body: CardReorder,
    actor: Actor = Depends(authenticated_actor),
    services: Services = Depends(get_services),
):
    orders = [CardPosition(card_id=o.card_id, position=o.position) for o in body.card_orders]
    await services.boards.reorder_cards(actor, body.board_id, orders)
    return ReorderResult(success=True)


@router.put("/{card_id}", response_model=CardRead)
async def update_card(
    card_id: str,
    body: CardUpdate,
    actor: Actor = Depends(authenticated_actor),
    services: Services = Depends(get_services),
):
    return await services.cards.update_card(actor, card_id, body.model_dump(exclude_unset=True))


@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(
    card_id: str,
    actor: Actor = Depends(authenticated_actor),
    services: Services = Depends(get_services),
):
    await services.cards.delete_card(actor, card_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
