"""API router for v1 endpoints."""
from fastapi import APIRouter
from lunchbox.api.api_v1.endpoints import auth, chat, music, profile, session

api_router = APIRouter()

api_router.include_router(session.router, tags=["session"])
api_router.include_router(chat.router, prefix="/chat", tags=["chat"])
api_router.include_router(profile.router, prefix="/profile", tags=["profile"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(music.router, prefix="/music", tags=["music"])
