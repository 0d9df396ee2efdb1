"""Google OAuth 2.0 / OpenID Connect client."""

from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx
import structlog

from ...shared.exceptions.base import ExternalServiceError
from ..config.settings import GoogleOAuthConfig

logger = structlog.get_logger()

AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
SCOPES = ("openid", "email", "profile")


@dataclass(frozen=True)
class ExternalIdentity:
    """Identity asserted by a third-party provider."""

    external_id: str
    email: str
    given_name: Optional[str] = None
    family_name: Optional[str] = None


class GoogleOAuthClient:
    """Authorization-code flow against Google."""

    def __init__(
        self,
        config: GoogleOAuthConfig,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout_seconds),
        )

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.redirect_uri,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "state": state,
            "access_type": "online",
            "prompt": "select_account",
        }
        return f"{AUTHORIZATION_URL}?{urlencode(params)}"

    async def fetch_identity(self, code: str) -> ExternalIdentity:
        """Exchange an authorization code and read the user's profile."""
        token_data = await self._request(
            "POST",
            TOKEN_URL,
            data={
                "code": code,
                "client_id": self.config.client_id,
                "client_secret": self.config.client_secret.get_secret_value(),
                "redirect_uri": self.config.redirect_uri,
                "grant_type": "authorization_code",
            },
        )
        access_token = token_data.get("access_token")
        if not access_token:
            raise ExternalServiceError("google", "Token response did not contain an access token")

        profile = await self._request(
            "GET",
            USERINFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
        )

        if not profile.get("sub") or not profile.get("email"):
            raise ExternalServiceError("google", "Profile is missing subject or email")
        if not profile.get("email_verified", False):
            raise ExternalServiceError("google", "Email address is not verified by Google")

        logger.info("Google identity fetched", external_id=profile["sub"])
        return ExternalIdentity(
            external_id=str(profile["sub"]),
            email=profile["email"],
            given_name=profile.get("given_name"),
            family_name=profile.get("family_name"),
        )

    async def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            response = await self._client.request(method, url, **kwargs)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Google request rejected",
                url=url,
                status_code=e.response.status_code,
            )
            raise ExternalServiceError("google", f"Request failed with status {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Google request failed", url=url, error=str(e))
            raise ExternalServiceError("google", "Request failed") from e

    async def aclose(self) -> None:
        await self._client.aclose()
