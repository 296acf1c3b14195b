"""Auth schemas."""

from typing import Optional
from pydantic import BaseModel

from lunchbox.models.oauth import Provider

class AuthStatus(BaseModel):
    google: bool = False
    discord: bool = False
    spotify: bool = False

class ExchangeIn(BaseModel):
    code: str
    provider: Optional[Provider] = None

class SessionOut(BaseModel):
    token: str
    client_id: str
    created: bool
