"""FastAPI dependencies wiring per-client objects to the shared services."""
from fastapi import Depends, Request

from lunchbox.auth import get_current_client
from lunchbox.services import ServiceContainer
from lunchbox.services.auth_service import AuthBridge
from lunchbox.services.chat_service import ChatOrchestrator
from lunchbox.services.profile_service import ProfileStore
from lunchbox.storage import ClientStorage

def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services

def get_client_storage(
    client_id: str = Depends(get_current_client),
    services: ServiceContainer = Depends(get_services)
) -> ClientStorage:
    return ClientStorage(services.store, client_id)

def get_profile_store(storage: ClientStorage = Depends(get_client_storage)) -> ProfileStore:
    return ProfileStore(storage)

def get_auth_bridge(
    storage: ClientStorage = Depends(get_client_storage),
    profile_store: ProfileStore = Depends(get_profile_store),
    services: ServiceContainer = Depends(get_services)
) -> AuthBridge:
    return AuthBridge(
        services.settings,
        storage,
        services.http_client,
        profile_store,
        spotify_oauth_factory=services.spotify_oauth_factory
    )

def get_orchestrator(
    client_id: str = Depends(get_current_client),
    profile_store: ProfileStore = Depends(get_profile_store),
    auth: AuthBridge = Depends(get_auth_bridge),
    services: ServiceContainer = Depends(get_services)
) -> ChatOrchestrator:
    return ChatOrchestrator(
        client_id,
        services.conversations,
        profile_store,
        auth,
        services.chat_client,
        services.music_client
    )
