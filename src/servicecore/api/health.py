import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .. import responses
from ..messages import MessageCode, status_for
from .responses import send_success

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request):
    """Liveness + database reachability (503 when the database cannot be reached)."""
    settings = request.app.state.settings
    try:
        async with request.app.state.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError):
        logger.exception("health.database_unreachable", extra={"service": settings.SERVICE_NAME})
        return JSONResponse(
            status_code=status_for(MessageCode.SERVICE_UNAVAILABLE),
            content=responses.error(MessageCode.SERVICE_UNAVAILABLE),
        )

    data = {"service": settings.SERVICE_NAME, "status": "ok", "database": "ok"}
    return send_success(data, MessageCode.FETCHED, {"resource": "Health"})
