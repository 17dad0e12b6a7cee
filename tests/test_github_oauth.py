"""Tests for the GitHub OAuth code exchange."""

import json

import httpx
import pytest

from conftest import auth_headers, register_and_login
from core.dependencies import get_github_client
from core.exceptions import ConfigurationError
from models.user import UserModel
from utils.github_oauth import GitHubOAuthClient, NoPrimaryEmailError

from app import app


def _github_handler(
    profile=None,
    emails=None,
    token_payload=None,
    captured=None,
):
    profile = profile or {
        "id": 4242,
        "login": "octo",
        "name": "Octo Cat",
        "avatar_url": "https://avatars.example.com/octo.png",
    }
    emails = emails if emails is not None else [
        {"email": "octo@x.com", "primary": True, "verified": True},
        {"email": "other@x.com", "primary": False, "verified": True},
    ]
    token_payload = token_payload or {"access_token": "gho_test", "token_type": "bearer"}

    def handler(request: httpx.Request) -> httpx.Response:
        if captured is not None:
            captured.append(request)
        if request.url.host == "github.com":
            return httpx.Response(200, json=token_payload)
        if request.url.path == "/user":
            return httpx.Response(200, json=profile)
        if request.url.path == "/user/emails":
            return httpx.Response(200, json=emails)
        return httpx.Response(404)

    return handler


def _make_client(handler) -> GitHubOAuthClient:
    return GitHubOAuthClient(
        client_id="client-id",
        client_secret="client-secret",
        redirect_uri="http://localhost:5173/auth/github/callback",
        transport=httpx.MockTransport(handler),
    )


def _use_github(handler):
    app.dependency_overrides[get_github_client] = lambda: _make_client(handler)


def test_first_login_creates_github_user(client):
    _use_github(_github_handler())

    response = client.post("/api/github/token", json={"code": "abc"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["user"]["provider"] == "github"
    assert payload["user"]["role"] == "user"
    assert payload["user"]["name"] == "Octo Cat"
    assert payload["user"]["email"] == "octo@x.com"

    me = client.get("/api/users/me", headers=auth_headers(payload["access_token"]))
    assert me.status_code == 200
    assert me.json()["user"]["id"] == payload["user"]["id"]


def test_name_falls_back_to_login(client):
    _use_github(_github_handler(profile={"id": 7, "login": "nameless", "name": None}))

    response = client.post("/api/github/token", json={"code": "abc"})
    assert response.json()["user"]["name"] == "nameless"


def test_matching_email_links_existing_account(client, db_session):
    local_user, _ = register_and_login(client, "Octo", "octo@x.com")
    _use_github(_github_handler())

    response = client.post("/api/github/token", json={"code": "abc"})
    assert response.status_code == 200
    assert response.json()["user"]["id"] == local_user["id"]

    models = db_session.query(UserModel).all()
    assert len(models) == 1
    assert models[0].github_id == "4242"
    assert models[0].provider == "github"
    assert models[0].avatar == "https://avatars.example.com/octo.png"


def test_repeat_login_finds_user_by_github_id_and_revokes_old_token(client, db_session):
    _use_github(_github_handler())
    first = client.post("/api/github/token", json={"code": "one"}).json()

    # Primary email changed on GitHub; the GitHub id still identifies the user
    _use_github(_github_handler(
        emails=[{"email": "new@x.com", "primary": True, "verified": True}]
    ))
    second = client.post("/api/github/token", json={"code": "two"}).json()

    assert second["user"]["id"] == first["user"]["id"]
    assert db_session.query(UserModel).count() == 1
    assert client.get("/api/users/me", headers=auth_headers(first["access_token"])).status_code == 401
    assert client.get("/api/users/me", headers=auth_headers(second["access_token"])).status_code == 200


def test_no_primary_email_fails_without_creating_user(client, db_session):
    _use_github(_github_handler(
        emails=[{"email": "octo@x.com", "primary": False, "verified": True}]
    ))

    response = client.post("/api/github/token", json={"code": "abc"})
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to exchange code for token"
    assert db_session.query(UserModel).count() == 0


def test_unverified_email_does_not_link(client, db_session):
    register_and_login(client, "Octo", "octo@x.com")
    _use_github(_github_handler(
        emails=[{"email": "octo@x.com", "primary": True, "verified": False}]
    ))

    response = client.post("/api/github/token", json={"code": "abc"})
    assert response.status_code == 500

    db_session.expire_all()
    model = db_session.query(UserModel).one()
    assert model.github_id is None
    assert model.provider == "local"


def test_rejected_code_fails(client):
    _use_github(_github_handler(
        token_payload={"error": "bad_verification_code"}
    ))

    response = client.post("/api/github/token", json={"code": "stale"})
    assert response.status_code == 500


def test_github_outage_fails(client):
    def handler(request):
        return httpx.Response(502)

    _use_github(handler)
    response = client.post("/api/github/token", json={"code": "abc"})
    assert response.status_code == 500


def test_exchange_sends_app_credentials():
    captured = []
    github = _make_client(_github_handler(captured=captured))

    assert github.exchange_code("the-code") == "gho_test"

    request = captured[0]
    assert request.method == "POST"
    assert request.headers["Accept"] == "application/json"
    body = json.loads(request.content)
    assert body == {
        "client_id": "client-id",
        "client_secret": "client-secret",
        "code": "the-code",
        "redirect_uri": "http://localhost:5173/auth/github/callback",
    }


def test_api_calls_use_bearer_token():
    captured = []
    github = _make_client(_github_handler(captured=captured))

    github.fetch_profile("gho_test")

    assert captured[0].headers["Authorization"] == "Bearer gho_test"


def test_fetch_primary_email_requires_primary_flag():
    github = _make_client(_github_handler(
        emails=[{"email": "octo@x.com", "primary": False, "verified": True}]
    ))

    with pytest.raises(NoPrimaryEmailError):
        github.fetch_primary_email("gho_test")


def test_unconfigured_client_refuses_exchange():
    github = GitHubOAuthClient(client_id=None, client_secret=None)

    with pytest.raises(ConfigurationError):
        github.exchange_code("abc")


def test_malformed_email_entry_fails_cleanly(client, db_session):
    _use_github(_github_handler(emails=[{"primary": True, "verified": True}]))

    response = client.post("/api/github/token", json={"code": "abc"})
    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to exchange code for token"
    assert db_session.query(UserModel).count() == 0
