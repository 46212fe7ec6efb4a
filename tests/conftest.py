"""Shared fixtures for user API tests."""

import pytest
from fastapi.testclient import TestClient

from user_microservice import AuthClient, AuthenticatedIdentity, Settings, create_app
from user_microservice.models import UserSummary


class FakeUserService:
    """User service double that records calls and can be told to fail."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.error: BaseException | None = None
        self.profile = {"id": "user-1", "email": "jane.doe@acme.io", "firstName": "Jane"}

    def _record(self, *call):
        self.calls.append(call)
        if self.error is not None:
            raise self.error

    async def register_user(self, user):
        self._record("register_user", user)
        return UserSummary(id="user-1", status="pending")

    def get_user_profile(self, user_id):
        self._record("get_user_profile", user_id)
        return dict(self.profile)

    async def change_password(self, user_id, current_password, new_password):
        self._record("change_password", user_id, current_password, new_password)


def valid_registration(**overrides):
    payload = {
        "email": "jane.doe@acme.io",
        "password": "Sup3rSecret",
        "firstName": "Jane",
        "lastName": "Doe",
    }
    payload.update(overrides)
    return payload


def build_client(service, config=None, identity=None, auth_client=None):
    """Create a TestClient, optionally bypassing the auth service with a fixed identity."""
    app = create_app(
        service=service,
        config=config or Settings(_env_file=None),
        auth_client=auth_client or AuthClient("http://auth.invalid"),
    )
    if identity is not None:
        app.dependency_overrides[app.state.require_identity] = lambda: identity
    return TestClient(app)


@pytest.fixture
def service():
    return FakeUserService()


@pytest.fixture
def identity():
    return AuthenticatedIdentity(valid=True, id="user-1", scopes=["profile"], name="jane")


@pytest.fixture
def client(service, identity):
    return build_client(service, identity=identity)
