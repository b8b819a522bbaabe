"""
Google sign-in: verifies ID tokens against Google's tokeninfo endpoint.
"""

from typing import Any, Dict, Optional
from rentals.config import Settings, get_settings
from rentals.utils.exceptions import ValidationError, InvalidTokenError, ExternalServiceError
import httpx
import logging

logger = logging.getLogger(__name__)


class GoogleProfile:
    """Identity claims taken from a verified Google ID token."""

    def __init__(self, email: str, name: Optional[str], picture: Optional[str]):
        self.email = email
        self.name = name
        self.picture = picture


class GoogleOAuthService:
    def __init__(self, settings: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings or get_settings()
        self._client = client

    async def _fetch_token_info(self, id_token: str) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(self.settings.google_tokeninfo_url, params={"id_token": id_token})
        async with httpx.AsyncClient(timeout=10.0) as client:
            return await client.get(self.settings.google_tokeninfo_url, params={"id_token": id_token})

    async def verify_id_token(self, id_token: str) -> GoogleProfile:
        """
        Verify a Google ID token and return the account's profile.

        Raises:
            ValidationError: If Google sign-in is not configured
            InvalidTokenError: If Google rejects the token or its claims do not match
            ExternalServiceError: If Google cannot be reached
        """
        if not self.settings.google_client_id:
            raise ValidationError("Google sign-in is not configured")

        try:
            response = await self._fetch_token_info(id_token)
        except httpx.HTTPError as e:
            logger.error(f"Google token verification request failed: {e}")
            raise ExternalServiceError("Could not reach Google to verify the token")

        if response.status_code != 200:
            logger.warning(f"Google rejected ID token with status {response.status_code}")
            raise InvalidTokenError("Invalid Google ID token")

        claims: Dict[str, Any] = response.json()

        if claims.get("aud") != self.settings.google_client_id:
            raise InvalidTokenError("Google ID token was issued for another client")

        if str(claims.get("email_verified", "")).lower() != "true":
            raise InvalidTokenError("Google account email is not verified")

        email = claims.get("email")
        if not email:
            raise InvalidTokenError("Google ID token has no email claim")

        return GoogleProfile(email=email.lower(), name=claims.get("name"), picture=claims.get("picture"))
