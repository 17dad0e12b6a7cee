"""GitHub OAuth code exchange and profile lookup."""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel

from config import (
    GITHUB_API_URL,
    GITHUB_CLIENT_ID,
    GITHUB_CLIENT_SECRET,
    GITHUB_OAUTH_URL,
    GITHUB_REDIRECT_URI,
    GITHUB_TIMEOUT,
)
from core.exceptions import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

GITHUB_ACCEPT = "application/vnd.github.v3+json"


class NoPrimaryEmailError(UpstreamError):
    """Raised when none of the GitHub account's emails is marked primary."""

    def __init__(self):
        super().__init__("No primary email found for GitHub user")


class GitHubProfile(BaseModel):
    id: int
    login: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None


class GitHubEmail(BaseModel):
    email: str
    primary: bool = False
    verified: bool = False


class GitHubOAuthClient:
    """HTTP client for the GitHub endpoints used during login."""

    def __init__(
        self,
        client_id: Optional[str] = GITHUB_CLIENT_ID,
        client_secret: Optional[str] = GITHUB_CLIENT_SECRET,
        redirect_uri: Optional[str] = GITHUB_REDIRECT_URI,
        timeout: float = GITHUB_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._redirect_uri = redirect_uri
        self._timeout = timeout
        self._transport = transport

    def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.request(method, url, **kwargs)
                response.raise_for_status()
                return response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "GitHub returned %s for %s", exc.response.status_code, url
            )
            raise UpstreamError(f"GitHub request failed: {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.warning("GitHub request to %s failed: %s", url, exc)
            raise UpstreamError(f"GitHub request failed: {exc}") from exc
        except ValueError as exc:
            raise UpstreamError("GitHub returned an invalid response") from exc

    def exchange_code(self, code: str) -> str:
        """Exchange an authorization code for a GitHub access token.

        Raises:
            ConfigurationError: If the OAuth app credentials are not set.
            UpstreamError: If GitHub rejects the code or cannot be reached.
        """
        if not self._client_id or not self._client_secret:
            raise ConfigurationError("GitHub OAuth is not configured")

        payload = {
            "client_id": self._client_id,
            "client_secret": self._client_secret,
            "code": code,
        }
        if self._redirect_uri:
            payload["redirect_uri"] = self._redirect_uri

        data = self._request(
            "POST",
            GITHUB_OAUTH_URL,
            json=payload,
            headers={"Accept": "application/json"},
        )
        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not access_token:
            # GitHub answers 200 with {"error": ...} for bad or reused codes
            error = data.get("error") if isinstance(data, dict) else None
            raise UpstreamError(f"GitHub token exchange failed: {error or 'no access token'}")
        return access_token

    def _api_headers(self, access_token: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {access_token}", "Accept": GITHUB_ACCEPT}

    def fetch_profile(self, access_token: str) -> GitHubProfile:
        data = self._request(
            "GET", f"{GITHUB_API_URL}/user", headers=self._api_headers(access_token)
        )
        try:
            return GitHubProfile.model_validate(data)
        except ValueError as exc:
            raise UpstreamError("GitHub returned an invalid user profile") from exc

    def fetch_emails(self, access_token: str) -> List[GitHubEmail]:
        data = self._request(
            "GET", f"{GITHUB_API_URL}/user/emails", headers=self._api_headers(access_token)
        )
        if not isinstance(data, list):
            raise UpstreamError("GitHub returned an invalid email list")
        try:
            return [GitHubEmail.model_validate(item) for item in data]
        except ValueError as exc:
            raise UpstreamError("GitHub returned an invalid email entry") from exc

    def fetch_primary_email(self, access_token: str) -> GitHubEmail:
        """Return the email GitHub marks as primary.

        Raises:
            NoPrimaryEmailError: If no email is marked primary.
        """
        for email in self.fetch_emails(access_token):
            if email.primary:
                return email
        raise NoPrimaryEmailError()
