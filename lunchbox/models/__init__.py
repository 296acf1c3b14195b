from lunchbox.models.message import Message, Sender
from lunchbox.models.oauth import AuthSession, PendingSignIn, Provider, ProviderToken
from lunchbox.models.profile import Interests, UserProfile
from lunchbox.models.track import Track

__all__ = [
    "AuthSession",
    "Interests",
    "Message",
    "PendingSignIn",
    "Provider",
    "ProviderToken",
    "Sender",
    "Track",
    "UserProfile",
]
