from fastapi import APIRouter, Depends, HTTPException, Request, Response
import logging

from lunchbox.auth import create_access_token, get_app_settings, get_current_client, new_client_id
from lunchbox.core.config import Settings
from lunchbox.schemas.auth import SessionOut

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/session", response_model=SessionOut)
async def init_session_handler(
    request: Request,
    response: Response,
    settings: Settings = Depends(get_app_settings)
):
    """Initialize a client session if one doesn't exist."""
    try:
        client_id = await get_current_client(request, settings)
        created = False
        logger.debug(f"Found existing session for client: {client_id}")
    except HTTPException:
        client_id = new_client_id()
        created = True
        logger.debug(f"No existing session found, created client: {client_id}")

    # Even for existing sessions, return a fresh token
    token = create_access_token(client_id, settings)
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax"
    )
    return SessionOut(token=token, client_id=client_id, created=created)
