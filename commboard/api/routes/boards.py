import logging

from fastapi import APIRouter, Depends, Response, status

from commboard.api.deps import Services, authenticated_actor, current_actor, get_services
from commboard.core.access import Actor
from commboard.schemas.board import (
    BoardClone,
    BoardCloneResult,
    BoardCreate,
    BoardRead,
    BoardUpdate,
    PublicBoardRead,
)
from commboard.schemas.card import CardRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/boards", tags=["boards"])


@router.get("", response_model=list[BoardRead])
async def list_boards(
    actor: Actor = Depends(authenticated_actor),
    services: Services = Depends(get_services),
):
    """List the caller's own boards, newest first."""
    return await services.boards.list_boards(actor)


@router.post("", response_model=BoardRead, status_code=status.HTTP_201_CREATED)
async def create_board(
    body: BoardCreate,
    actor: Actor = Depends(authenticated_actor),
    services: Services = Depends(get_services),
):
    return await services.boards.create_board(actor, body.name, body.description)


@router.get("/public", response_model=list[PublicBoardRead])
async def list_public_boards(
    actor: Actor = Depends(current_actor),
    services: Services = Depends(get_services),
):
    """List every public board with its like, comment and card counts."""
    entries = await services.boards.list_public_boards(actor)
    return [
        PublicBoardRead.model_validate(entry["board"]).model_copy(
            update={
                "like_count": entry["like_count"],
                "comment_count": entry["comment_count"],
                "card_count": entry["card_count"],
                "is_liked_by_user": entry["is_liked_by_user"],
            }
        )
        for entry in entries
    ]


@router.post("/clone-template", response_model=BoardCloneResult, status_code=status.HTTP_201_CREATED)
async def clone_template(
    body: BoardClone,
    actor: Actor = Depends(authenticated_actor),
    services: Services = Depends(get_services),
):
    """Copy a template or public board, cards included, into a new private board."""
    board, card_count = await services.boards.clone_board(
        actor, body.template_board_id, body.new_board_name
    )
    return BoardCloneResult(board=BoardRead.model_validate(board), card_count=card_count)


@router.get("/{board_id}", response_model=BoardRead)
async def get_board(
    board_id: str,
    actor: Actor = Depends(current_actor),
    services: Services = Depends(get_services),
):
    return await services.boards.get_board(actor, board_id)


@router.put("/{board_id}", response_model=BoardRead)
async def update_board(
    board_id: str,
    body: BoardUpdate,
    actor: Actor = Depends(authenticated_actor),
    services: Services = Depends(get_services),
):
    return await services.boards.update_board(
        actor,
        board_id,
        name=body.name,
        description=body.description,
        is_public=body.is_public,
    )


@router.delete("/{board_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_board(
    board_id: str,
    actor: Actor = Depends(authenticated_actor),
    services: Services = Depends(get_services),
):
    """Delete a board along with its cards, comments and likes."""
    await services.boards.delete_board(actor, board_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{board_id}/cards", response_model=list[CardRead])
async def list_cards(
    board_id: str,
    actor: Actor = Depends(current_actor),
    services: Services = Depends(get_services),
):
    """Cards of a viewable board in display order."""
    return await services.cards.list_cards(actor, board_id)
