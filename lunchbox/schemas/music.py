"""Music request and response schemas."""

from typing import List, Optional
from pydantic import BaseModel, Field

from lunchbox.models.track import Track

class SuggestionIn(BaseModel):
    text: str

class SuggestionOut(BaseModel):
    query: str
    tracks: List[Track]

class PlaylistIn(BaseModel):
    name: str = Field(min_length=1)
    tracks: List[Track] = Field(default_factory=list)

class PlaylistOut(BaseModel):
    url: Optional[str] = None

class PlayIn(BaseModel):
    track_id: str

class PlayOut(BaseModel):
    success: bool
