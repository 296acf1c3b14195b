"""OAuth token models."""

from datetime import datetime
from enum import Enum
from typing import Dict, Optional
import pytz
from pydantic import BaseModel, Field

class Provider(str, Enum):
    GOOGLE = "google"
    DISCORD = "discord"
    SPOTIFY = "spotify"

IDENTITY_PROVIDERS = (Provider.GOOGLE, Provider.DISCORD)

# Google access tokens carry this literal prefix; Spotify tokens never do
IDENTITY_TOKEN_PREFIX = "ya29."

class ProviderToken(BaseModel):
    """Bearer credential tagged with the provider that issued it."""
    provider: Provider
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "Bearer"
    scope: Optional[str] = None
    expires_at: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(pytz.UTC)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=pytz.UTC)
        return expires_at <= now

    def looks_like_identity_token(self) -> bool:
        return self.access_token.startswith(IDENTITY_TOKEN_PREFIX)

class AuthSession(BaseModel):
    """Provider tokens held for one client."""
    user_id: Optional[str] = None
    email: Optional[str] = None
    supabase_access_token: Optional[str] = None
    tokens: Dict[Provider, ProviderToken] = Field(default_factory=dict)

    def token_for(self, provider: Provider) -> Optional[ProviderToken]:
        return self.tokens.get(provider)

class PendingSignIn(BaseModel):
    """Sign-in started by this client and not yet exchanged."""
    provider: Provider
    code_verifier: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(pytz.UTC))
