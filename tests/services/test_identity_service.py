import pytest
import httpx
from fastapi import HTTPException

from src.tutor_scheduler.common.exceptions import NotFoundError
from src.tutor_scheduler.services import identity_service as identity_module
from src.tutor_scheduler.services.identity_service import IdentityService

USER_PAYLOAD = {
    "id": "user_student_anna",
    "first_name": "Anna",
    "last_name": "Schmidt",
    "email_addresses": [{"email_address": "anna@example.com"}, {"email_address": "old@example.com"}],
    "image_url": "https://img.example.com/anna.png",
}


@pytest.fixture
def route_identity_requests(monkeypatch):
    """Routes every identity provider request to `handler`."""
    real_client = httpx.AsyncClient

    def install(handler):
        def client_factory(**kwargs):
            return real_client(transport=httpx.MockTransport(handler), **kwargs)
        monkeypatch.setattr(identity_module.httpx, "AsyncClient", client_factory)

    return install


@pytest.mark.anyio
class TestLookup:

    async def test_returns_profile(self, route_identity_requests):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=USER_PAYLOAD)

        route_identity_requests(handler)

        profile = await IdentityService().lookup("user_student_anna")

        assert profile.name == "Anna Schmidt"
        assert profile.email == "anna@example.com"
        assert profile.image == "https://img.example.com/anna.png"
        assert seen[0].url.path.endswith("/users/user_student_anna")
        assert "Authorization" in seen[0].headers

    async def test_unknown_user(self, route_identity_requests):
        route_identity_requests(lambda request: httpx.Response(404, json={"errors": []}))

        with pytest.raises(NotFoundError):
            await IdentityService().lookup("user_missing")

    async def test_provider_error(self, route_identity_requests):
        route_identity_requests(lambda request: httpx.Response(500, text="oops"))

        with pytest.raises(HTTPException) as e:
            await IdentityService().lookup("user_student_anna")
        assert e.value.status_code == 502

    async def test_provider_unreachable(self, route_identity_requests):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        route_identity_requests(handler)

        with pytest.raises(HTTPException) as e:
            await IdentityService().lookup("user_student_anna")
        assert e.value.status_code == 503


class TestToProfile:

    def test_missing_fields_fall_back(self):
        profile = IdentityService._to_profile("user_x", {})
        assert profile.id == "user_x"
        assert profile.name == "Unknown"
        assert profile.email == ""
        assert profile.image is None

    def test_only_first_name(self):
        profile = IdentityService._to_profile("user_x", {"first_name": "Ben", "last_name": None})
        assert profile.name == "Ben"
