"""Test configuration and fixtures."""

from datetime import datetime, timedelta
from unittest.mock import MagicMock
import pytest
import pytz

from helpers import SPOTIFY_TOKEN, TEST_CLIENT_ID, FakeChatClient, make_http_client, unreachable
from lunchbox.core.config import Settings
from lunchbox.models.oauth import Provider, ProviderToken
from lunchbox.services.auth_service import AuthBridge
from lunchbox.services.profile_service import ProfileStore
from lunchbox.services.spotify_service import MusicSuggestionClient
from lunchbox.storage import ClientStorage, MemoryKeyValueStore

@pytest.fixture
def settings():
    """Settings with every provider configured, Supabase off."""
    return Settings(
        PUBLIC_BASE_URL="https://lunchbox.example.com/",
        JWT_SECRET_KEY="test-secret-key-for-lunchbox-client-sessions",
        GROQ_API_KEY="test-groq-key",
        GROQ_MODEL="test-model",
        GOOGLE_CLIENT_ID="google-client-id",
        GOOGLE_CLIENT_SECRET="google-client-secret",
        DISCORD_CLIENT_ID="discord-client-id",
        DISCORD_CLIENT_SECRET="discord-client-secret",
        SPOTIFY_CLIENT_ID="spotify-client-id",
        SPOTIFY_CLIENT_SECRET="spotify-client-secret",
    )

@pytest.fixture
def supabase_settings(settings):
    return settings.model_copy(update={
        "SUPABASE_URL": "https://project.supabase.co",
        "SUPABASE_ANON_KEY": "anon-key",
    })

@pytest.fixture
def store():
    return MemoryKeyValueStore()

@pytest.fixture
def storage(store):
    return ClientStorage(store, TEST_CLIENT_ID)

@pytest.fixture
def profile_store(storage):
    return ProfileStore(storage)

@pytest.fixture
def spotify_factory():
    """Stands in for spotipy.Spotify; the client is ``spotify_factory.return_value``."""
    return MagicMock(name="Spotify")

@pytest.fixture
def music_client(spotify_factory):
    return MusicSuggestionClient(spotify_factory)

@pytest.fixture
def spotify_oauth_factory():
    factory = MagicMock(name="SpotifyOAuth")
    oauth = factory.return_value
    oauth.get_authorize_url.return_value = "https://accounts.spotify.com/authorize?client_id=spotify-client-id"
    oauth.get_access_token.return_value = {
        "access_token": SPOTIFY_TOKEN,
        "refresh_token": "spotify-refresh",
        "scope": "user-read-private",
        "expires_in": 3600,
        "expires_at": int((datetime.now(pytz.UTC) + timedelta(hours=1)).timestamp()),
    }
    return factory

@pytest.fixture
def make_auth_bridge(settings, storage, profile_store, spotify_oauth_factory):
    """Build an AuthBridge; pass a handler to answer its HTTP calls."""
    def _make(handler=unreachable, bridge_settings=None):
        return AuthBridge(
            bridge_settings or settings,
            storage,
            make_http_client(handler),
            profile_store,
            spotify_oauth_factory=spotify_oauth_factory
        )
    return _make

@pytest.fixture
def spotify_token():
    return ProviderToken(
        provider=Provider.SPOTIFY,
        access_token=SPOTIFY_TOKEN,
        expires_at=datetime.now(pytz.UTC) + timedelta(hours=1)
    )

@pytest.fixture
def chat_client():
    return FakeChatClient()
