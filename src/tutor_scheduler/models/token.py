from pydantic import BaseModel
from typing import Optional

class TokenPayload(BaseModel):
    """Claims we rely on from the identity provider's session token."""
    sub: Optional[str] = None
    email: Optional[str] = None
