"""
API tests for resolving the signed-in user.
"""

from fastapi.testclient import TestClient

from src.core.catalog import Principal
from src.infrastructure.identity import IdentityClientError
from src.main import create_app

PRINCIPAL_HEADERS = {
    "X-MS-CLIENT-PRINCIPAL-ID": "abc123",
    "X-MS-CLIENT-PRINCIPAL-NAME": "alice@example.com",
}


class FakeIdentity:
    def __init__(self, principal=None, error=None):
        self.principal = principal
        self.error = error
        self.seen_headers = None
        self.closed = False

    async def close(self):
        self.closed = True

    async def fetch_principal(self, headers):
        self.seen_headers = headers
        if self.error:
            raise self.error
        return self.principal


def test_first_visit_creates_user(client, user_repo):
    response = client.get("/api/auth/me", headers=PRINCIPAL_HEADERS)

    assert response.status_code == 200
    assert response.json() == {
        "id": "abc123",
        "username": "alice@example.com",
        "displayName": "alice@example.com",
        "email": "",
    }
    assert user_repo.get_by_id("abc123") is not None


def test_repeat_visits_reuse_user(client):
    first = client.get("/api/auth/me", headers=PRINCIPAL_HEADERS)
    second = client.get("/api/auth/me", headers=PRINCIPAL_HEADERS)

    assert first.json() == second.json()
    assert client.app.state.documents.users.count_documents({}) == 1


def test_anonymous_caller(client):
    response = client.get("/api/auth/me")

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to fetch user data"


def test_identity_endpoint_principal_with_email(client):
    client.app.state.identity = FakeIdentity(
        Principal("xyz", "carol", email="carol@example.com")
    )

    response = client.get("/api/auth/me", headers={"Cookie": "AppServiceAuthSession=token"})

    assert response.status_code == 200
    assert response.json()["email"] == "carol@example.com"
    assert client.app.state.identity.seen_headers.get("cookie") == "AppServiceAuthSession=token"


def test_identity_endpoint_failure(client, user_repo):
    client.app.state.identity = FakeIdentity(error=IdentityClientError("timeout"))

    response = client.get("/api/auth/me")

    assert response.status_code == 500
    assert user_repo.get_by_id("xyz") is None


def test_shutdown_closes_identity_client(settings):
    identity = FakeIdentity()
    with TestClient(create_app(settings)) as client:
        client.app.state.identity = identity

    assert identity.closed
