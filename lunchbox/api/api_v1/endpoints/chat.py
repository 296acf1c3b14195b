from fastapi import APIRouter, Depends
import logging

from lunchbox.api.deps import get_orchestrator, get_services
from lunchbox.schemas.chat import ConversationOut, MessageIn, MessagesOut, TaskSuggestionsOut
from lunchbox.services import ServiceContainer
from lunchbox.services.chat_service import ChatOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/start", response_model=ConversationOut)
async def start_conversation(orchestrator: ChatOrchestrator = Depends(get_orchestrator)):
    """Start a fresh conversation, as a page load does."""
    conversation = orchestrator.start()
    return ConversationOut.from_conversation(conversation)

@router.get("/messages", response_model=ConversationOut)
async def get_conversation(orchestrator: ChatOrchestrator = Depends(get_orchestrator)):
    return ConversationOut.from_conversation(orchestrator.conversation())

@router.post("/messages", response_model=MessagesOut)
async def send_message(
    message: MessageIn,
    orchestrator: ChatOrchestrator = Depends(get_orchestrator)
):
    """Submit a user message and get back everything appended for it."""
    appended = await orchestrator.handle_message(message.text)
    logger.debug(f"Turn for client {orchestrator.client_id} appended {len(appended)} messages")
    return MessagesOut(messages=appended)

@router.post("/tasks", response_model=TaskSuggestionsOut)
async def suggest_tasks(
    message: MessageIn,
    services: ServiceContainer = Depends(get_services)
):
    tasks = await services.chat_client.suggest_tasks(message.text)
    return TaskSuggestionsOut(tasks=tasks)
