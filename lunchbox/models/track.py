"""Track model."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, computed_field
from pydantic.alias_generators import to_camel

class Track(BaseModel):
    """Read-only projection of a Spotify search result."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    name: str
    artist: str
    album: str
    album_art_url: str = ""
    preview_url: Optional[str] = None
    provider_url: str
    duration_ms: int

    @computed_field
    @property
    def uri(self) -> str:
        return f"spotify:track:{self.id}"

    @computed_field
    @property
    def duration_label(self) -> str:
        minutes = self.duration_ms // 60000
        seconds = (self.duration_ms % 60000) // 1000
        return f"{minutes}:{seconds:02d}"
