"""Authentication bridge between the app and its OAuth providers."""

import asyncio
import base64
import hashlib
import secrets
from datetime import datetime, timedelta
from functools import partial
from typing import Any, Callable, Dict, Optional, Tuple
from urllib.parse import urlencode
import httpx
import pytz
import requests
from pydantic import ValidationError
from spotipy.oauth2 import SpotifyOAuth, SpotifyOauthError
from spotipy.cache_handler import MemoryCacheHandler

from lunchbox.core.config import Settings
from lunchbox.models.oauth import (
    AuthSession,
    IDENTITY_PROVIDERS,
    PendingSignIn,
    Provider,
    ProviderToken,
)
from lunchbox.services.profile_service import ProfileStore
from lunchbox.storage.base import ClientStorage, StorageError
from lunchbox.utils.logging import setup_logger, mask_token

logger = setup_logger(__name__)

SESSION_STORAGE_KEY = "lunchbox_auth_session"
PENDING_STORAGE_KEY = "lunchbox_oauth_pending"
LEGACY_SPOTIFY_ACCESS_KEY = "spotify_access_token"
LEGACY_SPOTIFY_REFRESH_KEY = "spotify_refresh_token"

# Direct OAuth endpoints, used when Supabase is not configured
DIRECT_PROVIDERS = {
    Provider.GOOGLE: {
        "authorize_url": "https://accounts.google.com/o/oauth2/v2/auth",
        "token_url": "https://oauth2.googleapis.com/token",
        "scope": "email profile",
    },
    Provider.DISCORD: {
        "authorize_url": "https://discord.com/api/oauth2/authorize",
        "token_url": "https://discord.com/api/oauth2/token",
        "scope": "identify email",
    },
}

class AuthConfigurationError(Exception):
    """A provider was requested whose credentials are not configured."""

class AuthExchangeError(Exception):
    """An authorization code could not be turned into a token."""

def _now() -> datetime:
    return datetime.now(pytz.UTC)

def _expires_at(token_info: Dict[str, Any]) -> Optional[datetime]:
    if token_info.get("expires_at"):
        return datetime.fromtimestamp(int(token_info["expires_at"]), tz=pytz.UTC)
    if token_info.get("expires_in"):
        return _now() + timedelta(seconds=int(token_info["expires_in"]))
    return None

def pkce_pair() -> Tuple[str, str]:
    """Generate a PKCE code verifier and its S256 challenge."""
    verifier = secrets.token_urlsafe(64)
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    challenge = base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")
    return verifier, challenge

def build_callback_redirect(
    base_url: str,
    code: Optional[str],
    error: Optional[str],
    provider: Optional[Provider] = None
) -> str:
    """Where an OAuth callback sends the browser next.

    Every callback route goes through here so the return origin is always
    the configured public base URL.
    """
    params: Dict[str, str] = {}
    if error:
        params["error"] = error
    elif code:
        params["auth"] = "success"
        params["code"] = code
    if "code" in params and provider is not None:
        params["provider"] = provider.value
    return f"{base_url}/?{urlencode(params)}" if params else f"{base_url}/"

class AuthBridge:
    """Starts OAuth sign-ins and answers questions about the client's tokens.

    Tokens are kept in the client's storage tagged with the provider that
    issued them. Nothing here refreshes or revokes provider tokens.
    """

    def __init__(
        self,
        settings: Settings,
        storage: ClientStorage,
        http_client: httpx.AsyncClient,
        profile_store: ProfileStore,
        spotify_oauth_factory: Callable[..., SpotifyOAuth] = SpotifyOAuth
    ):
        self.settings = settings
        self.storage = storage
        self.http = http_client
        self.profile_store = profile_store
        self.spotify_oauth_factory = spotify_oauth_factory

    # Session storage

    def _read(self, key: str) -> Optional[str]:
        try:
            return self.storage.get(key)
        except StorageError as e:
            logger.error(f"Auth storage unavailable: {str(e)}")
            return None

    def load_session(self) -> AuthSession:
        stored = self._read(SESSION_STORAGE_KEY)
        if stored:
            try:
                return AuthSession.model_validate_json(stored)
            except ValidationError as e:
                logger.error(f"Discarding unreadable auth session: {str(e)}")
        return AuthSession()

    def _save_session(self, session: AuthSession) -> None:
        self.storage.set(SESSION_STORAGE_KEY, session.model_dump_json())

    def _load_pending(self) -> Optional[PendingSignIn]:
        stored = self._read(PENDING_STORAGE_KEY)
        if not stored:
            return None
        try:
            return PendingSignIn.model_validate_json(stored)
        except ValidationError as e:
            logger.error(f"Discarding unreadable pending sign-in: {str(e)}")
            return None

    def _save_pending(self, pending: PendingSignIn) -> None:
        self.storage.set(PENDING_STORAGE_KEY, pending.model_dump_json())

    # Sign-in

    def _spotify_oauth(self) -> SpotifyOAuth:
        if not self.settings.SPOTIFY_CLIENT_ID or not self.settings.SPOTIFY_CLIENT_SECRET:
            raise AuthConfigurationError("Spotify client credentials not configured")
        return self.spotify_oauth_factory(
            client_id=self.settings.SPOTIFY_CLIENT_ID,
            client_secret=self.settings.SPOTIFY_CLIENT_SECRET,
            redirect_uri=self.settings.spotify_callback_url,
            scope=self.settings.SPOTIFY_SCOPES,
            cache_handler=MemoryCacheHandler(),
            open_browser=False
        )

    def _client_credentials(self, provider: Provider) -> Tuple[str, Optional[str]]:
        client_id = getattr(self.settings, f"{provider.name}_CLIENT_ID")
        client_secret = getattr(self.settings, f"{provider.name}_CLIENT_SECRET")
        if not client_id:
            raise AuthConfigurationError(f"{provider.value} client ID not configured")
        return client_id, client_secret

    def sign_in_url(self, provider: Provider) -> str:
        """Build the URL that starts the OAuth flow for a provider."""
        if provider == Provider.SPOTIFY:
            url = self._spotify_oauth().get_authorize_url()
            self._save_pending(PendingSignIn(provider=provider))
        elif self.settings.supabase_enabled:
            verifier, challenge = pkce_pair()
            params = {
                "provider": provider.value,
                "redirect_to": self.settings.identity_callback_url,
                "code_challenge": challenge,
                "code_challenge_method": "s256",
            }
            url = f"{self.settings.SUPABASE_URL}/auth/v1/authorize?{urlencode(params)}"
            self._save_pending(PendingSignIn(provider=provider, code_verifier=verifier))
        else:
            client_id, _ = self._client_credentials(provider)
            endpoints = DIRECT_PROVIDERS[provider]
            params = {
                "client_id": client_id,
                "redirect_uri": self.settings.identity_callback_url,
                "response_type": "code",
                "scope": endpoints["scope"],
            }
            url = f"{endpoints['authorize_url']}?{urlencode(params)}"
            self._save_pending(PendingSignIn(provider=provider))

        logger.info(f"Starting {provider.value} sign-in")
        return url

    async def complete_sign_in(self, code: str, provider: Optional[Provider] = None) -> AuthSession:
        """Exchange an authorization code and store the resulting token.

        Raises:
            AuthExchangeError: If there is nothing to exchange or the provider refused
        """
        pending = self._load_pending()
        provider = provider or (pending.provider if pending else None)
        if provider is None:
            raise AuthExchangeError("No sign-in in progress")

        session = self.load_session()
        if provider == Provider.SPOTIFY:
            token = await self._exchange_spotify(code)
        elif self.settings.supabase_enabled and pending and pending.code_verifier:
            token = await self._exchange_supabase(provider, code, pending.code_verifier, session)
        else:
            token = await self._exchange_direct(provider, code)

        session.tokens[provider] = token
        self._save_session(session)
        self.storage.delete(PENDING_STORAGE_KEY)

        if provider == Provider.SPOTIFY:
            self.storage.set(LEGACY_SPOTIFY_ACCESS_KEY, token.access_token)
            if token.refresh_token:
                self.storage.set(LEGACY_SPOTIFY_REFRESH_KEY, token.refresh_token)

        if session.email:
            self.profile_store.add_connection("email", session.email)

        logger.info(f"Stored {provider.value} token {mask_token(token.access_token)}")
        return session

    async def _exchange_spotify(self, code: str) -> ProviderToken:
        oauth = self._spotify_oauth()
        loop = asyncio.get_running_loop()
        try:
            token_info = await loop.run_in_executor(
                None, partial(oauth.get_access_token, code, as_dict=True, check_cache=False)
            )
        except (SpotifyOauthError, requests.exceptions.RequestException) as e:
            logger.error(f"Spotify code exchange failed: {str(e)}")
            raise AuthExchangeError("Failed to exchange Spotify code") from e
        if not token_info or not token_info.get("access_token"):
            raise AuthExchangeError("Spotify returned no access token")
        return ProviderToken(
            provider=Provider.SPOTIFY,
            access_token=token_info["access_token"],
            refresh_token=token_info.get("refresh_token"),
            scope=token_info.get("scope"),
            expires_at=_expires_at(token_info)
        )

    async def _exchange_supabase(
        self,
        provider: Provider,
        code: str,
        verifier: str,
        session: AuthSession
    ) -> ProviderToken:
        try:
            response = await self.http.post(
                f"{self.settings.SUPABASE_URL}/auth/v1/token",
                params={"grant_type": "pkce"},
                headers={"apikey": self.settings.SUPABASE_ANON_KEY},
                json={"auth_code": code, "code_verifier": verifier}
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Supabase code exchange failed: {str(e)}", exc_info=True)
            raise AuthExchangeError(f"Failed to exchange {provider.value} code") from e

        user = data.get("user") or {}
        session.user_id = user.get("id")
        session.email = user.get("email")
        session.supabase_access_token = data.get("access_token")

        access_token = data.get("provider_token") or data.get("access_token")
        if not access_token:
            raise AuthExchangeError("Supabase returned no access token")
        return ProviderToken(
            provider=provider,
            access_token=access_token,
            refresh_token=data.get("provider_refresh_token") or data.get("refresh_token"),
            expires_at=_expires_at(data)
        )

    async def _exchange_direct(self, provider: Provider, code: str) -> ProviderToken:
        client_id, client_secret = self._client_credentials(provider)
        try:
            response = await self.http.post(
                DIRECT_PROVIDERS[provider]["token_url"],
                data={
                    "grant_type": "authorization_code",
                    "code": code,
                    "redirect_uri": self.settings.identity_callback_url,
                    "client_id": client_id,
                    "client_secret": client_secret or "",
                },
                headers={"Accept": "application/json"}
            )
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"{provider.value} code exchange failed: {str(e)}", exc_info=True)
            raise AuthExchangeError(f"Failed to exchange {provider.value} code") from e

        if not data.get("access_token"):
            raise AuthExchangeError(f"{provider.value} returned no access token")
        return ProviderToken(
            provider=provider,
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            scope=data.get("scope"),
            expires_at=_expires_at(data)
        )

    # Session inspection

    def token_for(self, provider: Provider) -> Optional[ProviderToken]:
        """The stored token for a provider, including the legacy Spotify keys."""
        token = self.load_session().token_for(provider)
        if token is None and provider == Provider.SPOTIFY:
            legacy = self._read(LEGACY_SPOTIFY_ACCESS_KEY)
            if legacy:
                token = ProviderToken(
                    provider=Provider.SPOTIFY,
                    access_token=legacy,
                    refresh_token=self._read(LEGACY_SPOTIFY_REFRESH_KEY)
                )
        return token

    def is_authenticated(self, provider: Provider) -> bool:
        token = self.token_for(provider)
        if token is None or token.provider != provider:
            return False
        if token.is_expired(_now()):
            logger.debug(f"{provider.value} token expired at {token.expires_at}")
            return False
        if provider not in IDENTITY_PROVIDERS and token.looks_like_identity_token():
            logger.warning(f"Identity provider token stored as {provider.value} token")
            return False
        return True

    def status(self) -> Dict[str, bool]:
        return {provider.value: self.is_authenticated(provider) for provider in Provider}

    async def sign_out(self) -> None:
        """End the provider session and forget everything stored for the client."""
        session = self.load_session()
        if self.settings.supabase_enabled and session.supabase_access_token:
            try:
                response = await self.http.post(
                    f"{self.settings.SUPABASE_URL}/auth/v1/logout",
                    headers={
                        "apikey": self.settings.SUPABASE_ANON_KEY,
                        "Authorization": f"Bearer {session.supabase_access_token}",
                    }
                )
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.error(f"Supabase sign-out failed: {str(e)}")

        for key in (
            SESSION_STORAGE_KEY,
            PENDING_STORAGE_KEY,
            LEGACY_SPOTIFY_ACCESS_KEY,
            LEGACY_SPOTIFY_REFRESH_KEY,
        ):
            self.storage.delete(key)
        self.profile_store.clear()
        logger.info("Signed out and cleared local profile")

    def auth_config(self, origin: str) -> Dict[str, Any]:
        """Redirect configuration as seen from a request origin. No secrets."""
        settings = self.settings
        return {
            "origin": origin,
            "publicBaseUrl": settings.PUBLIC_BASE_URL,
            "redirectUrl": settings.identity_callback_url,
            "spotifyRedirectUrl": settings.spotify_callback_url,
            "supabaseUrl": settings.SUPABASE_URL,
            "supabaseAuthCallback": f"{settings.SUPABASE_URL}/auth/v1/callback" if settings.SUPABASE_URL else None,
            "hasGoogleClientId": bool(settings.GOOGLE_CLIENT_ID),
            "hasDiscordClientId": bool(settings.DISCORD_CLIENT_ID),
            "hasSpotifyClientId": bool(settings.SPOTIFY_CLIENT_ID),
            "environment": settings.ENVIRONMENT,
        }
