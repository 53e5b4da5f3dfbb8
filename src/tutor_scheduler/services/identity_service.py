import httpx
from fastapi import HTTPException, status

from ..common.config import settings
from ..common.exceptions import NotFoundError
from ..common.logger import log
from ..models.user import IdentityProfile

class IdentityService:
    """
    Looks up users in the hosted identity provider.
    Students and tutors both live there; we only keep their ids.
    """

    async def lookup(self, user_id: str) -> IdentityProfile:
        """
        Fetches name, primary email and avatar for a provider user id.
        Raises NotFoundError when the provider does not know the id.
        """
        log.info(f"Looking up identity profile for user: {user_id}")
        try:
            async with httpx.AsyncClient(base_url=settings.IDENTITY_API_URL, timeout=10.0) as client:
                response = await client.get(
                    f"/users/{user_id}",
                    headers={"Authorization": f"Bearer {settings.IDENTITY_API_KEY}"}
                )
                if response.status_code == status.HTTP_404_NOT_FOUND:
                    log.warning(f"Identity provider has no user {user_id}")
                    raise NotFoundError(f"User {user_id} not found.")
                response.raise_for_status()
                data = response.json()

            return self._to_profile(user_id, data)

        except httpx.RequestError as e:
            log.error(f"Identity provider request failed for user {user_id}: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Identity service is currently unavailable. Please Try Again!"
            )
        except httpx.HTTPStatusError as e:
            log.error(f"Identity provider returned an error for user {user_id}: {e.response.status_code} - {e.response.text}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Identity service returned an unexpected error."
            )

    @staticmethod
    def _to_profile(user_id: str, data: dict) -> IdentityProfile:
        first = data.get("first_name") or ""
        last = data.get("last_name") or ""
        name = f"{first} {last}".strip() or "Unknown"

        emails = data.get("email_addresses") or []
        email = emails[0].get("email_address", "") if emails else ""

        return IdentityProfile(
            id=data.get("id") or user_id,
            name=name,
            email=email,
            image=data.get("image_url"),
        )
