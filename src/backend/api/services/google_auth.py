"""Google ID token verification for Google Sign-In."""
import logging
from dataclasses import dataclass
from typing import List, Optional

from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from core.async_utils import run_blocking
from core.config import settings
from core.exceptions import InvalidGoogleTokenError

logger = logging.getLogger(__name__)


@dataclass
class GoogleIdentity:
    """Claims taken from a verified Google ID token."""

    sub: str
    email: str
    email_verified: bool = False
    given_name: Optional[str] = None
    family_name: Optional[str] = None
    name: Optional[str] = None
    picture: Optional[str] = None


class GoogleTokenVerifier:
    """Verifies ID tokens against every configured client ID (web, Android, iOS)."""

    def __init__(self, client_ids: Optional[List[str]] = None):
        self.client_ids = client_ids if client_ids is not None else settings.google.client_ids
        self._request = google_requests.Request()

    async def verify(self, token: str) -> GoogleIdentity:
        """
        Verify an ID token and extract the identity claims.

        Raises:
            InvalidGoogleTokenError: If no configured audience accepts the token,
                or the token carries no email claim
        """
        if not self.client_ids:
            raise InvalidGoogleTokenError("Google Sign-In is not configured")

        claims = None
        last_error: Optional[Exception] = None
        for audience in self.client_ids:
            try:
                claims = await run_blocking(
                    id_token.verify_oauth2_token, token, self._request, audience
                )
                break
            except (ValueError, google_exceptions.GoogleAuthError) as e:
                last_error = e
                logger.debug(f"Google token rejected for audience {audience}: {e}")

        if claims is None:
            logger.warning(f"Google token verification failed: {last_error}")
            raise InvalidGoogleTokenError(error=str(last_error) if last_error else None)

        email = claims.get("email")
        if not email:
            raise InvalidGoogleTokenError("Google account has no email address")

        return GoogleIdentity(
            sub=str(claims["sub"]),
            email=email,
            email_verified=bool(claims.get("email_verified", False)),
            given_name=claims.get("given_name"),
            family_name=claims.get("family_name"),
            name=claims.get("name"),
            picture=claims.get("picture"),
        )
