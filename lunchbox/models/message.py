"""Chat message model."""

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional
import pytz
from pydantic import BaseModel, ConfigDict, Field

from lunchbox.models.track import Track

class Sender(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"

def new_message_id(sender: Sender) -> str:
    """Timestamp-prefixed id with a random suffix."""
    millis = int(datetime.now(pytz.UTC).timestamp() * 1000)
    return f"{sender.value}-{millis}-{uuid.uuid4().hex[:9]}"

class Message(BaseModel):
    """One entry of a conversation. Never mutated once appended."""
    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    sender: Sender
    timestamp: datetime
    tracks: List[Track] = Field(default_factory=list)

    @classmethod
    def create(cls, text: str, sender: Sender, tracks: Optional[List[Track]] = None) -> "Message":
        return cls(
            id=new_message_id(sender),
            text=text,
            sender=sender,
            timestamp=datetime.now(pytz.UTC),
            tracks=tracks or []
        )

    @classmethod
    def from_user(cls, text: str) -> "Message":
        return cls.create(text, Sender.USER)

    @classmethod
    def from_assistant(cls, text: str, tracks: Optional[List[Track]] = None) -> "Message":
        return cls.create(text, Sender.ASSISTANT, tracks)
