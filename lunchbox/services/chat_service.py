"""Chat orchestration: onboarding, music suggestions and assistant replies."""

import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional
from cachetools import TTLCache

from lunchbox.models.message import Message, Sender
from lunchbox.models.oauth import Provider
from lunchbox.models.profile import Interests
from lunchbox.models.track import Track
from lunchbox.services.auth_service import AuthBridge
from lunchbox.services.groq_service import ChatCompletionClient, ChatTurn
from lunchbox.services.onboarding import (
    FIRST_QUESTION_STEP,
    GREETING_TEXT,
    ONBOARDING_DONE_TEXT,
    WELCOME_BACK_TEXT,
    OnboardingStep,
    advance,
)
from lunchbox.services.profile_service import ProfileStore
from lunchbox.services.spotify_service import (
    MusicSuggestionClient,
    SpotifyNotConnectedError,
    WrongProviderTokenError,
    is_music_request,
)
from lunchbox.utils.logging import setup_logger

logger = setup_logger(__name__)

CONNECT_SPOTIFY_TEXT = "Connect your Spotify account to get music suggestions!"
WRONG_PROVIDER_TEXT = (
    "Looks like you're signed in with a different account, not Spotify. "
    "Connect your Spotify account to get music suggestions!"
)
NO_TRACKS_TEXT = "I couldn't find any tracks for that right now."

@dataclass
class Conversation:
    """Messages and onboarding state for one client's chat."""
    messages: List[Message] = field(default_factory=list)
    onboarding_step: OnboardingStep = OnboardingStep.GREETING
    interests: Interests = field(default_factory=Interests)
    is_typing: bool = False

    @property
    def onboarding_complete(self) -> bool:
        return self.onboarding_step == OnboardingStep.COMPLETE

    def append(self, message: Message) -> Message:
        self.messages.append(message)
        return message

class ConversationRegistry:
    """In-memory conversations keyed by client id. Lost on restart.

    Conversations idle for longer than ``ttl`` seconds expire, and the least
    recently used one is evicted once ``maxsize`` clients are held.
    """

    def __init__(self, maxsize: int = 1000, ttl: float = 7200, timer: Callable[[], float] = time.monotonic):
        self._conversations: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl, timer=timer)

    def get(self, client_id: str) -> Optional[Conversation]:
        conversation = self._conversations.get(client_id)
        if conversation is not None:
            # Re-insert so an active conversation keeps its slot alive
            self._conversations[client_id] = conversation
        return conversation

    def put(self, client_id: str, conversation: Conversation) -> Conversation:
        self._conversations[client_id] = conversation
        return conversation

    def discard(self, client_id: str) -> None:
        self._conversations.pop(client_id, None)

def suggestions_text(tracks: List[Track]) -> str:
    lines = [f"{track.name} - {track.artist}" for track in tracks]
    return "Here's some music for you:\n" + "\n".join(lines)

class ChatOrchestrator:
    """Handles each user message for one client.

    Onboarding runs until the profile is complete; after that every message
    gets an assistant reply, preceded by a music suggestions message when the
    text asks for music.
    """

    def __init__(
        self,
        client_id: str,
        registry: ConversationRegistry,
        profile_store: ProfileStore,
        auth: AuthBridge,
        chat_client: ChatCompletionClient,
        music_client: MusicSuggestionClient
    ):
        self.client_id = client_id
        self.registry = registry
        self.profile_store = profile_store
        self.auth = auth
        self.chat_client = chat_client
        self.music_client = music_client

    def start(self) -> Conversation:
        """Begin a fresh conversation, skipping onboarding for known users."""
        conversation = Conversation()
        profile = self.profile_store.load()
        if profile and profile.onboarding_complete:
            conversation.onboarding_step = OnboardingStep.COMPLETE
            conversation.interests = profile.interests
            conversation.append(Message.from_assistant(WELCOME_BACK_TEXT))
        else:
            conversation.onboarding_step = FIRST_QUESTION_STEP
            conversation.append(Message.from_assistant(GREETING_TEXT))
        return self.registry.put(self.client_id, conversation)

    def conversation(self) -> Conversation:
        return self.registry.get(self.client_id) or self.start()

    async def handle_message(self, text: str) -> List[Message]:
        """Process one user message.

        Returns:
            The messages appended during this turn, user message first
        """
        if not text or not text.strip():
            return []

        conversation = self.conversation()
        history = [
            ChatTurn(role="user" if message.sender == Sender.USER else "assistant", content=message.text)
            for message in conversation.messages
        ]
        appended = [conversation.append(Message.from_user(text))]

        if not conversation.onboarding_complete:
            appended.extend(self._onboarding_turn(conversation, text))
            return appended

        if is_music_request(text):
            appended.append(conversation.append(await self._music_turn(text)))

        conversation.is_typing = True
        try:
            reply = await self.chat_client.chat(history + [ChatTurn(role="user", content=text)])
        finally:
            conversation.is_typing = False
        appended.append(conversation.append(Message.from_assistant(reply)))
        return appended

    def _onboarding_turn(self, conversation: Conversation, text: str) -> List[Message]:
        turn = advance(conversation.onboarding_step, text)
        conversation.onboarding_step = turn.next_step
        conversation.interests = turn.interests
        appended = [conversation.append(Message.from_assistant(turn.text))]

        if turn.complete:
            self.profile_store.complete_onboarding(turn.interests)
            appended.append(conversation.append(Message.from_assistant(ONBOARDING_DONE_TEXT)))
        return appended

    async def _music_turn(self, text: str) -> Message:
        token = self.auth.token_for(Provider.SPOTIFY)
        if token is not None and token.is_expired():
            logger.info("Spotify token expired, asking the user to reconnect")
            return Message.from_assistant(CONNECT_SPOTIFY_TEXT)

        try:
            tracks = await self.music_client.suggest(text, token)
        except WrongProviderTokenError:
            return Message.from_assistant(WRONG_PROVIDER_TEXT)
        except SpotifyNotConnectedError:
            return Message.from_assistant(CONNECT_SPOTIFY_TEXT)

        if not tracks:
            return Message.from_assistant(NO_TRACKS_TEXT)
        return Message.from_assistant(suggestions_text(tracks), tracks=tracks)
