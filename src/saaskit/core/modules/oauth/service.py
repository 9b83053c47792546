from typing import Any
from urllib.parse import urlencode

import httpx
import structlog

from saaskit.core.core import Service
from saaskit.core.modules.oauth.models import GoogleProfile, GoogleToken
from saaskit.errors import ExternalServiceError

logger = structlog.get_logger(__name__)

AUTHORIZATION_ENDPOINT = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"  # noqa: S105
USERINFO_ENDPOINT = "https://www.googleapis.com/oauth2/v2/userinfo"
SCOPES = "openid email profile"


class OAuthService(Service):
    """Google sign-in: authorization URL, code exchange and profile lookup."""

    def build_authorization_url(self, state: str) -> str:
        config = self.core.config
        params = {
            "client_id": config.google_client_id,
            "redirect_uri": config.oauth_redirect_uri,
            "scope": SCOPES,
            "response_type": "code",
            "state": state,
            "access_type": "offline",
            "prompt": "select_account",
        }
        return f"{AUTHORIZATION_ENDPOINT}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> GoogleToken:
        config = self.core.config
        data = {
            "client_id": config.google_client_id,
            "client_secret": config.google_client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": config.oauth_redirect_uri,
        }
        resp = await self._request("POST", TOKEN_ENDPOINT, data=data)
        try:
            return GoogleToken.model_validate(resp.json())
        except ValueError as e:
            raise ExternalServiceError(f"Token exchange failed: unexpected response: {e}") from e

    async def fetch_profile(self, access_token: str) -> GoogleProfile:
        resp = await self._request("GET", USERINFO_ENDPOINT, headers={"Authorization": f"Bearer {access_token}"})
        try:
            return GoogleProfile.model_validate(resp.json())
        except ValueError as e:
            raise ExternalServiceError(f"Profile fetch failed: invalid profile: {e}") from e

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = await self.core.http_client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.exception("google_request_failed", url=url)
            raise ExternalServiceError(f"Google request failed: {e}") from e
        if resp.is_error:
            logger.warning("google_request_rejected", url=url, status_code=resp.status_code)
            raise ExternalServiceError(f"Google request failed: {resp.status_code} {resp.text}")
        return resp
