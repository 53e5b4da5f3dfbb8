'''

'''
from datetime import datetime, timedelta, timezone
from typing import Optional, Annotated
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from ..common.config import settings
from ..models.token import TokenPayload
from ..common.logger import log
from ..common.exceptions import UnauthorizedError
from ..database import models as db_models
from .tutor_service import TutorService

# --- JWT Handling ---
class JWTHandler:
    @staticmethod
    def create_access_token(
        subject: str,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """Mints a session token the way the identity provider does. Used by tests and scripts."""
        if expires_delta is None:
            expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

        expire = datetime.now(timezone.utc) + expires_delta
        to_encode = {"sub": str(subject), "exp": expire}
        return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def decode_token(token: str) -> TokenPayload | None:
        try:
            payload = jwt.decode(
                token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
            )
            return TokenPayload(**payload)
        except (JWTError, ValueError) as e:
            log.warning(f"JWT decode/validation error: {e}")
            return None

# --- JWT Verification Dependency Functions ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token", auto_error=False)

async def get_current_identity(
    token: Annotated[str | None, Depends(oauth2_scheme)]
) -> str:
    """
    Dependency returning the identity provider user id of the caller.
    """
    if not token:
        log.warning("Request without bearer token.")
        raise UnauthorizedError("Unauthorized")

    token_data = JWTHandler.decode_token(token)
    if not token_data or not token_data.sub:
        log.warning("JWT decode failed or invalid token structure.")
        raise UnauthorizedError("Unauthorized")
    return token_data.sub

async def verify_token_and_get_tutor(
    external_id: Annotated[str, Depends(get_current_identity)],
    tutor_service: Annotated[TutorService, Depends(TutorService)]
) -> db_models.Tutors:
    """
    Dependency resolving the caller to an activated, active tutor.
    """
    tutor = await tutor_service.get_tutor_by_external_id(external_id)
    if tutor is None:
        log.warning(f"Identity '{external_id}' has no activated tutor account.")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Tutor account is not activated."
        )
    if not tutor.is_active:
        log.warning(f"Tutor '{external_id}' is not active.")
        raise UnauthorizedError("Unauthorized")

    log.info(f"JWT verified successfully for tutor: {tutor.email}")
    return tutor
