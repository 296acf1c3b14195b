from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
import logging

from lunchbox.api.deps import get_auth_bridge, get_services
from lunchbox.auth import get_current_client
from lunchbox.models.oauth import Provider
from lunchbox.schemas.auth import AuthStatus, ExchangeIn
from lunchbox.services import ServiceContainer
from lunchbox.services.auth_service import (
    AuthBridge,
    AuthConfigurationError,
    AuthExchangeError,
    build_callback_redirect,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Browser-facing OAuth callbacks; these carry no session header
callbacks_router = APIRouter()

@router.get("/login/{provider}")
async def login_handler(
    provider: Provider,
    redirect: bool = True,
    auth: AuthBridge = Depends(get_auth_bridge)
):
    """Start the OAuth flow for a provider."""
    try:
        auth_url = auth.sign_in_url(provider)
    except AuthConfigurationError as e:
        logger.error(f"Error initiating {provider.value} auth: {str(e)}")
        raise HTTPException(
            status_code=503,
            detail=f"{provider.value} sign-in is not configured"
        )
    if redirect:
        return RedirectResponse(url=auth_url, status_code=307)
    return {"auth_url": auth_url}

@callbacks_router.get("/auth/callback")
async def identity_callback_handler(
    code: Optional[str] = None,
    error: Optional[str] = None,
    services: ServiceContainer = Depends(get_services)
):
    """Handle the identity provider OAuth callback."""
    url = build_callback_redirect(services.settings.PUBLIC_BASE_URL, code, error)
    if error:
        logger.warning(f"OAuth error, redirecting to main page: {error}")
    return RedirectResponse(url=url, status_code=303)

@callbacks_router.get("/auth/spotify/callback")
async def spotify_callback_handler(
    code: Optional[str] = None,
    error: Optional[str] = None,
    services: ServiceContainer = Depends(get_services)
):
    """Handle the Spotify OAuth callback."""
    url = build_callback_redirect(services.settings.PUBLIC_BASE_URL, code, error, Provider.SPOTIFY)
    if error:
        logger.warning(f"Spotify OAuth error, redirecting to main page: {error}")
    return RedirectResponse(url=url, status_code=303)

@router.post("/exchange", response_model=AuthStatus)
async def exchange_handler(
    exchange: ExchangeIn,
    auth: AuthBridge = Depends(get_auth_bridge)
):
    """Turn the code handed back by a callback into a stored token."""
    try:
        await auth.complete_sign_in(exchange.code, exchange.provider)
    except AuthConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except AuthExchangeError as e:
        logger.error(f"Error exchanging authorization code: {str(e)}")
        raise HTTPException(status_code=502, detail=str(e))
    return AuthStatus(**auth.status())

@router.get("/status", response_model=AuthStatus)
async def auth_status_handler(auth: AuthBridge = Depends(get_auth_bridge)):
    """Get the current authentication status."""
    return AuthStatus(**auth.status())

@router.get("/config")
async def auth_config_handler(
    request: Request,
    auth: AuthBridge = Depends(get_auth_bridge)
):
    """Report the redirect configuration the app is running with."""
    return auth.auth_config(str(request.base_url).rstrip("/"))

@router.post("/logout")
async def logout_handler(
    client_id: str = Depends(get_current_client),
    auth: AuthBridge = Depends(get_auth_bridge),
    services: ServiceContainer = Depends(get_services)
):
    """Sign out and forget the client's profile and conversation."""
    await auth.sign_out()
    services.conversations.discard(client_id)
    return {"status": "success", "message": "Logged out successfully"}
