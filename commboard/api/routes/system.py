import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text

from commboard.api.deps import current_actor
from commboard.core.access import Actor
from commboard.schemas.system import CurrentUser

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["system"])


@router.get("/user", response_model=CurrentUser)
async def current_user(actor: Actor = Depends(current_actor)):
    return CurrentUser(user_id=actor.id)


@router.api_route("/health", methods=["GET", "HEAD"])
async def health(request: Request):
    status = {"api": "ok", "database": None}
    http_status = 200

    try:
        async with request.app.state.sessions() as db:
            await db.execute(text("SELECT 1"))
        status["database"] = "connected"
    except Exception as e:
        logger.error("Health check: database unreachable", exc_info=True)
        status["database"] = f"error: {e.__class__.__name__}"
        http_status = 503

    return JSONResponse(content=status, status_code=http_status)
