from fastapi import APIRouter, Depends, HTTPException, status
import logging

from lunchbox.api.deps import get_auth_bridge, get_services
from lunchbox.models.oauth import Provider
from lunchbox.schemas.music import PlayIn, PlayOut, PlaylistIn, PlaylistOut, SuggestionIn, SuggestionOut
from lunchbox.services import ServiceContainer
from lunchbox.services.auth_service import AuthBridge
from lunchbox.services.spotify_service import (
    MusicAuthError,
    WrongProviderTokenError,
    query_for,
)

logger = logging.getLogger(__name__)

router = APIRouter()

def _auth_error(e: MusicAuthError) -> HTTPException:
    detail = "wrong_provider_token" if isinstance(e, WrongProviderTokenError) else "spotify_not_connected"
    logger.info(f"Music request refused: {str(e)}")
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail
    )

@router.post("/suggestions", response_model=SuggestionOut)
async def suggestions_handler(
    suggestion: SuggestionIn,
    auth: AuthBridge = Depends(get_auth_bridge),
    services: ServiceContainer = Depends(get_services)
):
    """Suggest tracks for free-form text."""
    try:
        tracks = await services.music_client.suggest(suggestion.text, auth.token_for(Provider.SPOTIFY))
    except MusicAuthError as e:
        raise _auth_error(e)
    return SuggestionOut(query=query_for(suggestion.text), tracks=tracks)

@router.post("/playlists", response_model=PlaylistOut)
async def create_playlist_handler(
    playlist: PlaylistIn,
    auth: AuthBridge = Depends(get_auth_bridge),
    services: ServiceContainer = Depends(get_services)
):
    try:
        url = await services.music_client.create_playlist(
            playlist.name, playlist.tracks, auth.token_for(Provider.SPOTIFY)
        )
    except MusicAuthError as e:
        raise _auth_error(e)
    return PlaylistOut(url=url)

@router.post("/play", response_model=PlayOut)
async def play_handler(
    play: PlayIn,
    auth: AuthBridge = Depends(get_auth_bridge),
    services: ServiceContainer = Depends(get_services)
):
    try:
        success = await services.music_client.play_track(play.track_id, auth.token_for(Provider.SPOTIFY))
    except MusicAuthError as e:
        raise _auth_error(e)
    return PlayOut(success=success)
