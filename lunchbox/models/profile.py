"""User profile model."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

class Interests(BaseModel):
    """Interest flags collected during onboarding."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sports: bool = False
    socializing: bool = False
    gaming: bool = False
    other_interests: List[str] = Field(default_factory=list)

class UserProfile(BaseModel):
    """The single local profile of a client.

    Serialized with camelCase keys so the stored JSON keeps the shape the
    front-end reads.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: Optional[str] = None
    external_id: Optional[str] = None
    interests: Interests = Field(default_factory=Interests)
    onboarding_complete: bool = False
    created_at: datetime
    last_active: datetime
