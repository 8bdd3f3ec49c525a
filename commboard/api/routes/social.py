from typing import List

from fastapi import APIRouter, Depends, Response, status

from commboard.api.deps import Services, authenticated_actor, current_actor, get_services
from commboard.core.access import Actor
from commboard.schemas.comment import CommentRead, CommentWrite, LikeStatus

router = APIRouter(prefix="/api", tags=["social"])


@router.get("/boards/{board_id}/comments", response_model=List[CommentRead])
async def list_comments(
    board_id: str,
    actor: Actor = Depends(current_actor),
    services: Services = Depends(get_services),
):
    return await services.social.list_comments(actor, board_id)


@router.post(
    "/boards/{board_id}/comments",
    response_model=CommentRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    board_id: str,
    body: CommentWrite,
    actor: Actor = Depends(authenticated_actor),
    services: Services = Depends(get_services),
):
    return await services.social.add_comment(actor, board_id, body.content)


@router.patch("/comments/{comment_id}", response_model=CommentRead)
async def update_comment(
    comment_id: str,
    body: CommentWrite,
    actor: Actor = Depends(authenticated_actor),
    services: Services = Depends(get_services),
):
    """Edit a comment. Only its author may; anyone else gets 404."""
    return await services.social.update_comment(actor, comment_id, body.content)


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    comment_id: str,
    actor: Actor = Depends(authenticated_actor),
    services: Services = Depends(get_services),
):
    await services.social.delete_comment(actor, comment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/boards/{board_id}/like", response_model=LikeStatus)
async def like_status(
    board_id: str,
    actor: Actor = Depends(current_actor),
    services: Services = Depends(get_services),
):
    liked, count = await services.social.like_status(actor, board_id)
    return LikeStatus(liked=liked, like_count=count)


@router.post("/boards/{board_id}/like", response_model=LikeStatus)
async def like_board(
    board_id: str,
    actor: Actor = Depends(authenticated_actor),
    services: Services = Depends(get_services),
):
    liked, count = await services.social.like(actor, board_id)
    return LikeStatus(liked=liked, like_count=count)


@router.delete("/boards/{board_id}/like", response_model=LikeStatus)
async def unlike_board(
    board_id: str,
    actor: Actor = Depends(authenticated_actor),
    services: Services = Depends(get_services),
):
    liked, count = await services.social.unlike(actor, board_id)
    return LikeStatus(liked=liked, like_count=count)
