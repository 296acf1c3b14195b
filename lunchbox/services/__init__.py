"""Application services, built once at startup and shared by every request."""
from dataclasses import dataclass
from typing import Callable, Optional
import httpx
import spotipy
from spotipy.oauth2 import SpotifyOAuth

from lunchbox.core.config import Settings
from lunchbox.services.chat_service import ConversationRegistry
from lunchbox.services.groq_service import ChatCompletionClient
from lunchbox.services.spotify_service import MusicSuggestionClient
from lunchbox.storage import KeyValueStore, create_store

@dataclass
class ServiceContainer:
    settings: Settings
    store: KeyValueStore
    http_client: httpx.AsyncClient
    chat_client: ChatCompletionClient
    music_client: MusicSuggestionClient
    conversations: ConversationRegistry
    spotify_oauth_factory: Callable[..., SpotifyOAuth] = SpotifyOAuth

    async def aclose(self) -> None:
        await self.http_client.aclose()
        close = getattr(self.store, "close", None)
        if close:
            close()

def build_services(
    settings: Settings,
    http_client: Optional[httpx.AsyncClient] = None,
    store: Optional[KeyValueStore] = None,
    spotify_factory: Callable[..., spotipy.Spotify] = spotipy.Spotify,
    spotify_oauth_factory: Callable[..., SpotifyOAuth] = SpotifyOAuth
) -> ServiceContainer:
    if http_client is None:
        http_client = httpx.AsyncClient()
    if store is None:
        store = create_store(settings)
    return ServiceContainer(
        settings=settings,
        store=store,
        http_client=http_client,
        chat_client=ChatCompletionClient(http_client, settings),
        music_client=MusicSuggestionClient(spotify_factory),
        conversations=ConversationRegistry(
            maxsize=settings.CONVERSATION_CACHE_SIZE,
            ttl=settings.CONVERSATION_TTL_SECONDS
        ),
        spotify_oauth_factory=spotify_oauth_factory
    )
