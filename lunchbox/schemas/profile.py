"""Profile request schemas."""

from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from lunchbox.models.profile import Interests

class ProfileUpdate(BaseModel):
    """Partial profile update. Only fields that are sent are applied."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: Optional[str] = None
    external_id: Optional[str] = None
    interests: Optional[Interests] = None

class ConnectionIn(BaseModel):
    kind: Literal["email", "discord"]
    value: str
