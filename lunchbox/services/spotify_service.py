"""Service for Spotify music suggestions, playlists and playback."""
import asyncio
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Tuple
import requests
import spotipy
from spotipy.exceptions import SpotifyException

from lunchbox.models.oauth import Provider, ProviderToken
from lunchbox.models.track import Track
from lunchbox.utils.logging import setup_logger, mask_token

logger = setup_logger(__name__)

SUGGESTION_LIMIT = 5
DEFAULT_QUERY = "trending hits"
PLAYLIST_PREFIX = "Lunchbox.ai - "
PLAYLIST_DESCRIPTION = "Created by Lunchbox.ai for your tasks!"

# Evaluated in order; the first group with a matching keyword wins
QUERY_TEMPLATES: Tuple[Tuple[str, Tuple[str, ...], str], ...] = (
    ("study", ("study", "homework", "focus"), "lofi hip hop study beats"),
    ("workout", ("workout", "exercise", "gym"), "workout motivation hits"),
    ("chill", ("chill", "relax", "calm"), "chill vibes"),
    ("party", ("party", "fun", "dance"), "party dance hits"),
    ("sleep", ("sleep", "bedtime"), "sleep ambient music"),
    ("sad", ("sad", "down", "moody"), "sad songs"),
    ("happy", ("happy", "upbeat", "positive"), "happy upbeat hits"),
    ("rap", ("rap", "hip hop", "hip-hop"), "top rap hits"),
    ("rock", ("rock",), "rock classics"),
    ("electronic", ("electronic", "edm", "techno"), "electronic dance music"),
    ("jazz", ("jazz",), "jazz essentials"),
    ("classical", ("classical", "piano", "orchestra"), "classical music essentials"),
)

MUSIC_KEYWORDS = (
    "music", "song", "playlist", "spotify", "listen", "track", "beats", "tunes",
)

class MusicAuthError(Exception):
    """The request cannot be made with the credentials at hand."""

class SpotifyNotConnectedError(MusicAuthError):
    """No Spotify token is available."""

class WrongProviderTokenError(MusicAuthError):
    """The token offered as a Spotify token was issued by another provider."""

def query_for(text: str) -> str:
    """Pick the search query for free-form text."""
    lowered = text.lower()
    for _, keywords, query in QUERY_TEMPLATES:
        if any(keyword in lowered for keyword in keywords):
            return query
    return DEFAULT_QUERY

def is_music_request(text: str) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in MUSIC_KEYWORDS)

def track_from_item(item: Dict[str, Any]) -> Track:
    """Project a raw search result onto a Track."""
    artists = item.get("artists") or []
    album = item.get("album") or {}
    images = album.get("images") or []
    return Track(
        id=item["id"],
        name=item["name"],
        artist=artists[0]["name"] if artists else "",
        album=album.get("name", ""),
        album_art_url=images[0].get("url", "") if images else "",
        preview_url=item.get("preview_url"),
        provider_url=(item.get("external_urls") or {}).get("spotify", ""),
        duration_ms=item.get("duration_ms", 0)
    )

def ensure_music_token(token: Optional[ProviderToken]) -> str:
    """Return the usable Spotify access token or raise a MusicAuthError."""
    if token is None:
        raise SpotifyNotConnectedError("Not authenticated with Spotify")
    if token.provider != Provider.SPOTIFY or token.looks_like_identity_token():
        logger.warning(
            f"Rejected {token.provider.value} token {mask_token(token.access_token)} offered for Spotify"
        )
        raise WrongProviderTokenError("Token was issued by an identity provider, not Spotify")
    return token.access_token

class MusicSuggestionClient:
    """Maps user text to Spotify searches and drives playlists and playback."""

    def __init__(self, client_factory: Callable[..., spotipy.Spotify] = spotipy.Spotify):
        self.client_factory = client_factory

    async def _run_sync(self, func, *args, **kwargs):
        """Run a synchronous function in an async context."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, *args, **kwargs))

    def _client(self, token: Optional[ProviderToken]) -> spotipy.Spotify:
        return self.client_factory(auth=ensure_music_token(token))

    async def search_tracks(
        self,
        query: str,
        token: Optional[ProviderToken],
        limit: int = SUGGESTION_LIMIT
    ) -> List[Track]:
        """Search Spotify for tracks.

        Raises:
            MusicAuthError: If the token is missing or belongs to another provider
        """
        client = self._client(token)
        try:
            results = await self._run_sync(client.search, q=query, type="track", limit=limit)
            items = ((results or {}).get("tracks") or {}).get("items") or []
            # Spotify returns null entries for tracks unavailable in the market
            items = [item for item in items if item][:limit]
            return [track_from_item(item) for item in items]
        except (
            SpotifyException,
            requests.exceptions.RequestException,
            KeyError,
            AttributeError,
            TypeError,
            ValueError
        ) as e:
            logger.error(f"Error searching Spotify: {str(e)}", exc_info=True)
            return []

    async def suggest(self, text: str, token: Optional[ProviderToken]) -> List[Track]:
        """Suggest up to five tracks for the user's text."""
        query = query_for(text)
        logger.info(f"Music suggestion query: {query!r}")
        return await self.search_tracks(query, token, SUGGESTION_LIMIT)

    async def create_playlist(
        self,
        name: str,
        tracks: List[Track],
        token: Optional[ProviderToken]
    ) -> Optional[str]:
        """Create a private playlist holding the tracks.

        Returns:
            The playlist's public URL, or None if any call failed
        """
        client = self._client(token)
        try:
            user = await self._run_sync(client.current_user)
            playlist = await self._run_sync(
                client.user_playlist_create,
                user["id"],
                f"{PLAYLIST_PREFIX}{name}",
                public=False,
                description=PLAYLIST_DESCRIPTION
            )
            if tracks:
                await self._run_sync(
                    client.playlist_add_items,
                    playlist["id"],
                    [track.uri for track in tracks]
                )
            return playlist["external_urls"]["spotify"]
        except (SpotifyException, requests.exceptions.RequestException, KeyError, TypeError) as e:
            logger.error(f"Error creating Spotify playlist: {str(e)}", exc_info=True)
            return None

    async def play_track(self, track_id: str, token: Optional[ProviderToken]) -> bool:
        """Start playback of one track on the user's active device."""
        client = self._client(token)
        try:
            await self._run_sync(client.start_playback, uris=[f"spotify:track:{track_id}"])
            return True
        except (SpotifyException, requests.exceptions.RequestException) as e:
            logger.error(f"Error playing track: {str(e)}", exc_info=True)
            return False
