import pytest
import httpx
from datetime import timedelta

from src.tutor_scheduler.database import models as db_models
from src.tutor_scheduler.services.security import JWTHandler
from tests.constants import TEST_TUTOR_EXTERNAL_ID
from tests.database.factories import TutorFactory, persist


@pytest.mark.anyio
class TestAuthentication:

    async def test_health_check_is_public(self, client: httpx.AsyncClient):
        response = await client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    @pytest.mark.parametrize("path", ["/schedule/", "/invitations/", "/occurrences/", "/reports/team-hours", "/tutors/me"])
    async def test_missing_token(self, client: httpx.AsyncClient, path: str):
        response = await client.get(path)
        assert response.status_code == 401
        assert response.json()["detail"] == "Unauthorized"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    async def test_garbage_token(self, client: httpx.AsyncClient):
        response = await client.get("/schedule/", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    async def test_expired_token(self, client: httpx.AsyncClient, test_tutor_orm: db_models.Tutors):
        token = JWTHandler.create_access_token(TEST_TUTOR_EXTERNAL_ID, expires_delta=timedelta(minutes=-5))
        response = await client.get("/tutors/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_identity_without_tutor_account(self, client: httpx.AsyncClient, auth_headers):
        response = await client.get("/schedule/", headers=auth_headers("user_never_activated"))
        assert response.status_code == 403
        assert response.json()["detail"] == "Tutor account is not activated."

    async def test_inactive_tutor(self, client: httpx.AsyncClient, db_session, auth_headers):
        await persist(db_session, TutorFactory(external_id="user_inactive", is_active=False))
        await db_session.commit()

        response = await client.get("/tutors/me", headers=auth_headers("user_inactive"))
        assert response.status_code == 401
