'''
Tutor and identity API Models
'''
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class IdentityProfile(BaseModel):
    """
    What the hosted identity provider tells us about a user.
    """
    id: str
    name: str
    email: str
    image: Optional[str] = None


class TutorRead(BaseModel):
    id: UUID
    external_id: str
    name: str
    email: str
    avatar: str
    color: str
    is_active: bool
    is_admin: bool

    model_config = ConfigDict(from_attributes=True)
