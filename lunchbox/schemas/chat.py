"""Chat request and response schemas."""

from typing import List
from pydantic import BaseModel, Field

from lunchbox.models.message import Message
from lunchbox.services.chat_service import Conversation

class MessageIn(BaseModel):
    text: str = Field(description="Text the user submitted")

class MessagesOut(BaseModel):
    messages: List[Message] = Field(
        default_factory=list,
        description="Messages appended during the turn, user message first"
    )

class ConversationOut(BaseModel):
    messages: List[Message]
    onboarding_complete: bool
    onboarding_step: int
    is_typing: bool

    @classmethod
    def from_conversation(cls, conversation: Conversation) -> "ConversationOut":
        return cls(
            messages=conversation.messages,
            onboarding_complete=conversation.onboarding_complete,
            onboarding_step=int(conversation.onboarding_step),
            is_typing=conversation.is_typing
        )

class TaskSuggestionsOut(BaseModel):
    tasks: List[str]
