import httpx
import jwt
import pytest
from fastapi.testclient import TestClient

from helpers import GOOGLE_TOKEN, search_response, store_token
from lunchbox.main import create_app
from lunchbox.models.oauth import Provider, ProviderToken
from lunchbox.services import build_services
from lunchbox.services.onboarding import GREETING_TEXT, ONBOARDING_DONE_TEXT
from lunchbox.storage import ClientStorage

def groq_handler(request):
    if request.url.host == "api.groq.com":
        return httpx.Response(200, json={"choices": [{"message": {"content": "Let's get it done!"}}]})
    return httpx.Response(404)

@pytest.fixture
def services(settings, store, spotify_factory, spotify_oauth_factory):
    return build_services(
        settings,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(groq_handler)),
        store=store,
        spotify_factory=spotify_factory,
        spotify_oauth_factory=spotify_oauth_factory
    )

@pytest.fixture
def client(settings, services):
    app = create_app(settings, services=services)
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client

@pytest.fixture
def session(client):
    """Session token and client id for a fresh client."""
    response = client.post("/api/v1/session")
    assert response.status_code == 200
    return response.json()

@pytest.fixture
def headers(session):
    return {"Authorization": f"Bearer {session['token']}"}

def onboard(client, headers):
    client.post("/api/v1/chat/start", headers=headers)
    for answer in ("yes", "no", "yes", "drawing"):
        response = client.post("/api/v1/chat/messages", json={"text": answer}, headers=headers)
        assert response.status_code == 200
    return response

def test_session_is_created_once(client, session, settings):
    assert session["created"] is True
    assert session["client_id"].startswith("client_")
    assert client.cookies.get(settings.SESSION_COOKIE_NAME)

    again = client.post("/api/v1/session", headers={"Authorization": f"Bearer {session['token']}"})
    assert again.json()["created"] is False
    assert again.json()["client_id"] == session["client_id"]

def test_session_token_uses_app_settings(session, settings):
    payload = jwt.decode(session["token"], settings.JWT_SECRET_KEY.encode(), algorithms=[settings.JWT_ALGORITHM])
    assert payload["sub"] == session["client_id"]

def test_injected_store_is_used_even_when_empty(services, store, settings):
    assert services.store is store
    assert create_app(settings, services=services).state.settings is settings

def test_requests_without_session_are_rejected(settings, services):
    app = create_app(settings, services=services)
    with TestClient(app) as anonymous:
        assert anonymous.get("/api/v1/auth/status").status_code == 401
        bad = anonymous.get("/api/v1/auth/status", headers={"Authorization": "Bearer not-a-jwt"})
        assert bad.status_code == 401

def test_chat_start_greets(client, headers):
    response = client.post("/api/v1/chat/start", headers=headers)

    body = response.json()
    assert [message["text"] for message in body["messages"]] == [GREETING_TEXT]
    assert body["onboarding_complete"] is False
    assert body["messages"][0]["sender"] == "assistant"

def test_onboarding_over_http(client, headers):
    last = onboard(client, headers)

    texts = [message["text"] for message in last.json()["messages"]]
    assert texts[-1] == ONBOARDING_DONE_TEXT

    profile = client.get("/api/v1/profile", headers=headers)
    assert profile.status_code == 200
    assert profile.json()["onboardingComplete"] is True
    assert profile.json()["interests"]["otherInterests"] == ["drawing"]

    reply = client.post("/api/v1/chat/messages", json={"text": "I have chores"}, headers=headers)
    assert reply.json()["messages"][-1]["text"] == "Let's get it done!"

def test_profile_missing(client, headers):
    assert client.get("/api/v1/profile", headers=headers).status_code == 404
    assert client.patch("/api/v1/profile", json={"email": "a@b.co"}, headers=headers).status_code == 404

def test_profile_update_connect_and_clear(client, headers):
    onboard(client, headers)

    updated = client.patch("/api/v1/profile", json={"email": "kid@example.com"}, headers=headers)
    assert updated.json()["email"] == "kid@example.com"

    connected = client.post(
        "/api/v1/profile/connections",
        json={"kind": "discord", "value": "1234"},
        headers=headers
    )
    assert connected.json()["externalId"] == "1234"

    invalid = client.post(
        "/api/v1/profile/connections",
        json={"kind": "phone", "value": "555"},
        headers=headers
    )
    assert invalid.status_code == 422

    assert client.delete("/api/v1/profile", headers=headers).status_code == 204
    assert client.get("/api/v1/profile", headers=headers).status_code == 404

def test_login_redirects_to_provider(client, headers):
    response = client.get("/api/v1/auth/login/google", headers=headers)
    assert response.status_code == 307
    assert response.headers["location"].startswith("https://accounts.google.com/")

    as_json = client.get("/api/v1/auth/login/spotify?redirect=false", headers=headers)
    assert as_json.json()["auth_url"].startswith("https://accounts.spotify.com/authorize")

def test_login_unknown_provider(client, headers):
    assert client.get("/api/v1/auth/login/myspace", headers=headers).status_code == 422

def test_callbacks_forward_to_public_base_url(client):
    ok = client.get("/auth/callback?code=abc")
    assert ok.status_code == 303
    assert ok.headers["location"] == "https://lunchbox.example.com/?auth=success&code=abc"

    spotify = client.get("/auth/spotify/callback?code=xyz")
    assert spotify.headers["location"] == (
        "https://lunchbox.example.com/?auth=success&code=xyz&provider=spotify"
    )

    denied = client.get("/auth/spotify/callback?error=access_denied")
    assert denied.headers["location"] == "https://lunchbox.example.com/?error=access_denied"

def test_spotify_exchange_and_status(client, headers):
    client.get("/api/v1/auth/login/spotify?redirect=false", headers=headers)

    exchanged = client.post("/api/v1/auth/exchange", json={"code": "xyz"}, headers=headers)

    assert exchanged.status_code == 200
    assert exchanged.json() == {"google": False, "discord": False, "spotify": True}
    assert client.get("/api/v1/auth/status", headers=headers).json()["spotify"] is True

def test_exchange_without_pending_sign_in(client, headers):
    response = client.post("/api/v1/auth/exchange", json={"code": "xyz"}, headers=headers)
    assert response.status_code == 502

def test_auth_config(client, headers):
    config = client.get("/api/v1/auth/config", headers=headers).json()
    assert config["redirectUrl"] == "https://lunchbox.example.com/auth/callback"
    assert config["hasGoogleClientId"] is True

def test_music_suggestions(client, headers, session, store, spotify_factory, spotify_token):
    spotify_factory.return_value.search.return_value = search_response(3)
    store_token(ClientStorage(store, session["client_id"]), spotify_token)

    response = client.post("/api/v1/music/suggestions", json={"text": "workout"}, headers=headers)

    body = response.json()
    assert body["query"] == "workout motivation hits"
    assert [track["name"] for track in body["tracks"]] == ["Song 0", "Song 1", "Song 2"]
    assert body["tracks"][0]["albumArtUrl"] == "https://i.scdn.co/image/0"

def test_music_requires_spotify(client, headers, session, store):
    missing = client.post("/api/v1/music/suggestions", json={"text": "music"}, headers=headers)
    assert missing.status_code == 401
    assert missing.json()["detail"] == "spotify_not_connected"

    store_token(
        ClientStorage(store, session["client_id"]),
        ProviderToken(provider=Provider.SPOTIFY, access_token=GOOGLE_TOKEN)
    )
    wrong = client.post("/api/v1/music/play", json={"track_id": "t1"}, headers=headers)
    assert wrong.status_code == 401
    assert wrong.json()["detail"] == "wrong_provider_token"

def test_playlist_and_play(client, headers, session, store, spotify_factory, spotify_token):
    spotify = spotify_factory.return_value
    spotify.current_user.return_value = {"id": "kid"}
    spotify.user_playlist_create.return_value = {
        "id": "pl1",
        "external_urls": {"spotify": "https://open.spotify.com/playlist/pl1"},
    }
    store_token(ClientStorage(store, session["client_id"]), spotify_token)

    playlist = client.post("/api/v1/music/playlists", json={"name": "Chores"}, headers=headers)
    assert playlist.json() == {"url": "https://open.spotify.com/playlist/pl1"}

    played = client.post("/api/v1/music/play", json={"track_id": "t1"}, headers=headers)
    assert played.json() == {"success": True}
    spotify.start_playback.assert_called_once_with(uris=["spotify:track:t1"])

def test_logout_forgets_client(client, headers, session, store, spotify_token):
    onboard(client, headers)
    store_token(ClientStorage(store, session["client_id"]), spotify_token)

    response = client.post("/api/v1/auth/logout", headers=headers)

    assert response.json()["status"] == "success"
    assert client.get("/api/v1/profile", headers=headers).status_code == 404
    assert client.get("/api/v1/auth/status", headers=headers).json()["spotify"] is False
    restarted = client.get("/api/v1/chat/messages", headers=headers).json()
    assert [message["text"] for message in restarted["messages"]] == [GREETING_TEXT]

def test_task_suggestions(client, headers):
    response = client.post("/api/v1/chat/tasks", json={"text": "exam week"}, headers=headers)
    assert response.json() == {"tasks": ["Let's get it done!"]}
