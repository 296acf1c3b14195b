"""Service for the Groq chat completion API."""
import re
from typing import Dict, List, Optional
import httpx
from pydantic import BaseModel

from lunchbox.core.config import Settings
from lunchbox.utils.logging import setup_logger

logger = setup_logger(__name__)

SYSTEM_PROMPT = """You are Lunchbox.ai, a friendly AI assistant that helps teens organize their tasks using a lunchbox metaphor.

Keep responses SHORT and CONCISE - max 2-3 sentences. Be casual and teen-friendly, not formal.

When users tell you about tasks, help organize them into these categories:
- Sweets: Fun tasks they want to do (games, hanging out, hobbies)
- Vegetables: Important tasks they need to do (homework, studying, appointments)
- Savory: Neutral tasks (chores, errands, routine activities)
- Sides: Small filler tasks (quick calls, organizing, planning)

Be encouraging but brief. No long explanations."""

APOLOGY_TEXT = "Sorry, I'm having trouble connecting right now. Please try again later."
EMPTY_REPLY_TEXT = "Sorry, I couldn't process that request."

TEMPERATURE = 0.7
MAX_TOKENS = 150
MAX_TASK_SUGGESTIONS = 3

BULLET_PATTERN = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s*")

class ChatTurn(BaseModel):
    """One entry of the history sent to the completion API."""
    role: str
    content: str

class ChatCompletionClient:
    """Sends a conversation to the completion API and returns the reply text."""

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings):
        self.http = http_client
        self.api_key = settings.GROQ_API_KEY
        self.model = settings.GROQ_MODEL
        self.endpoint = f"{settings.GROQ_BASE_URL.rstrip('/')}/chat/completions"

    def _payload(self, history: List[ChatTurn]) -> Dict:
        return {
            "model": self.model,
            "messages": [{"role": "system", "content": SYSTEM_PROMPT}]
            + [turn.model_dump() for turn in history],
            "temperature": TEMPERATURE,
            "max_tokens": MAX_TOKENS,
            "stream": False
        }

    async def chat(self, history: List[ChatTurn]) -> str:
        """Get the assistant reply for a history. Never raises."""
        try:
            response = await self.http.post(
                self.endpoint,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=self._payload(history)
            )
            response.raise_for_status()
            data = response.json()
            content = self._extract_content(data)
            return content or EMPTY_REPLY_TEXT
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Error calling Groq API: {str(e)}", exc_info=True)
            return APOLOGY_TEXT

    @staticmethod
    def _extract_content(data: Dict) -> Optional[str]:
        try:
            return data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            logger.warning("Groq response had no message content")
            return None

    async def suggest_tasks(self, user_input: str) -> List[str]:
        """Ask for a few concrete tasks that would help with the user's input."""
        reply = await self.chat([
            ChatTurn(
                role="user",
                content=(
                    f'Based on this user input: "{user_input}", suggest 2-3 specific, '
                    "actionable tasks that would help them. Format as a simple list."
                )
            )
        ])
        if reply in (APOLOGY_TEXT, EMPTY_REPLY_TEXT):
            return []

        tasks = [BULLET_PATTERN.sub("", line).strip() for line in reply.split("\n")]
        return [task for task in tasks if task][:MAX_TASK_SUGGESTIONS]
