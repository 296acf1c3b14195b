from fastapi import APIRouter, Depends, HTTPException, status
import logging

from lunchbox.api.deps import get_profile_store
from lunchbox.models.profile import UserProfile
from lunchbox.schemas.profile import ConnectionIn, ProfileUpdate
from lunchbox.services.profile_service import ProfileStore

logger = logging.getLogger(__name__)

router = APIRouter()

def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="No profile found"
    )

@router.get("", response_model=UserProfile)
async def get_profile(profile_store: ProfileStore = Depends(get_profile_store)):
    """Get the client's profile"""
    profile = profile_store.load()
    if not profile:
        raise _not_found()
    return profile

@router.patch("", response_model=UserProfile)
async def update_profile(
    updates: ProfileUpdate,
    profile_store: ProfileStore = Depends(get_profile_store)
):
    """Update profile fields"""
    profile = profile_store.update(updates.model_dump(exclude_unset=True))
    if not profile:
        raise _not_found()
    return profile

@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_profile(profile_store: ProfileStore = Depends(get_profile_store)):
    profile_store.clear()

@router.post("/connections", response_model=UserProfile)
async def add_connection(
    connection: ConnectionIn,
    profile_store: ProfileStore = Depends(get_profile_store)
):
    """Attach an email address or Discord id to the profile"""
    profile = profile_store.add_connection(connection.kind, connection.value)
    if not profile:
        raise _not_found()
    logger.info(f"Added {connection.kind} connection")
    return profile
