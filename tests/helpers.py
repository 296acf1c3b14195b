"""Shared test helpers."""

import json
from typing import Callable, List
import httpx

from lunchbox.models.oauth import AuthSession, ProviderToken
from lunchbox.services.auth_service import SESSION_STORAGE_KEY
from lunchbox.services.groq_service import ChatTurn
from lunchbox.storage import ClientStorage, KeyValueStore, StorageError

TEST_CLIENT_ID = "client_test123"
SPOTIFY_TOKEN = "BQD-test-spotify-token"
GOOGLE_TOKEN = "ya29.a0-test-google-token"

def make_http_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """An AsyncClient whose requests are answered by ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))

def unreachable(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("network unreachable", request=request)

def store_token(storage: ClientStorage, token: ProviderToken) -> None:
    """Put a tagged token straight into the client's auth session."""
    stored = storage.get(SESSION_STORAGE_KEY)
    session = AuthSession.model_validate_json(stored) if stored else AuthSession()
    session.tokens[token.provider] = token
    storage.set(SESSION_STORAGE_KEY, session.model_dump_json())

def search_item(index: int, with_art: bool = True) -> dict:
    """One item of a Spotify track search response."""
    return {
        "id": f"track{index}",
        "name": f"Song {index}",
        "artists": [{"name": f"Artist {index}"}, {"name": "Featured"}],
        "album": {
            "name": f"Album {index}",
            "images": [{"url": f"https://i.scdn.co/image/{index}"}] if with_art else [],
        },
        "preview_url": None,
        "external_urls": {"spotify": f"https://open.spotify.com/track/track{index}"},
        "duration_ms": 185000 + index,
    }

def search_response(count: int) -> dict:
    return {"tracks": {"items": [search_item(i) for i in range(count)]}}

class FakeChatClient:
    """Records every history it is asked to complete."""

    def __init__(self, reply: str = "Sounds like a plan!"):
        self.reply = reply
        self.calls: List[List[ChatTurn]] = []

    async def chat(self, history: List[ChatTurn]) -> str:
        self.calls.append(list(history))
        return self.reply

    async def suggest_tasks(self, user_input: str) -> List[str]:
        return ["Finish the essay outline", "Pack gym bag"]

def json_body(request: httpx.Request) -> dict:
    return json.loads(request.content.decode())

class UnavailableStore(KeyValueStore):
    """A backend that is down: every call fails."""

    def get(self, key):
        raise StorageError(f"Failed to read {key}")

    def set(self, key, value):
        raise StorageError(f"Failed to write {key}")

    def delete(self, key):
        raise StorageError(f"Failed to delete {key}")
