"""
Google (Firebase) ID token verification
"""
from typing import Optional, Dict, Any, List
import logging

import httpx
from jose import jwt, JWTError

from blog_service.config import settings
from blog_service.domain.exceptions import AuthError, InternalError
from blog_service.domain.models import FederatedIdentity

logger = logging.getLogger(__name__)

AVATAR_SIZE_TOKEN = "s96-c"
AVATAR_LARGE_SIZE_TOKEN = "s384-c"


def upscale_avatar(picture: Optional[str]) -> Optional[str]:
    """Swap the avatar size token for a higher-resolution variant"""
    if not picture:
        return picture
    return picture.replace(AVATAR_SIZE_TOKEN, AVATAR_LARGE_SIZE_TOKEN)


class GoogleIdentityVerifier:
    """Verify ID tokens against the provider's published signing keys"""

    def __init__(
        self,
        project_id: str = settings.FIREBASE_PROJECT_ID,
        certs_url: str = settings.GOOGLE_CERTS_URL,
    ):
        self.project_id = project_id
        self.certs_url = certs_url
        self.issuer = f"{settings.GOOGLE_ISSUER_PREFIX}{project_id}"
        self.timeout = httpx.Timeout(settings.IDENTITY_HTTP_TIMEOUT)
        self.client: Optional[httpx.AsyncClient] = None

    async def start(self):
        """Initialize HTTP client"""
        self.client = httpx.AsyncClient(timeout=self.timeout)
        logger.info("Identity verifier client initialized")

    async def stop(self):
        """Close HTTP client"""
        if self.client:
            await self.client.aclose()
            logger.info("Identity verifier client closed")

    async def _fetch_keys(self) -> List[Dict[str, Any]]:
        if not self.client:
            raise InternalError("Identity verifier is not initialized")
        try:
            response = await self.client.get(self.certs_url)
            response.raise_for_status()
            return response.json().get("keys", [])
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch identity provider keys: {e}")
            raise InternalError("Authentication failed")

    async def verify(self, assertion: str) -> FederatedIdentity:
        """
        Verify an ID token and extract its identity claims

        Raises:
            AuthError: signature, audience, issuer or expiry is invalid
            InternalError: the provider keys could not be fetched
        """
        if not assertion:
            raise AuthError("Authentication failed")

        try:
            kid = jwt.get_unverified_header(assertion).get("kid")
        except JWTError:
            raise AuthError("Authentication failed")

        keys = [key for key in await self._fetch_keys() if key.get("kid") == kid]
        if not keys:
            logger.warning("ID token signed with an unknown key")
            raise AuthError("Authentication failed")

        try:
            claims = jwt.decode(
                assertion,
                {"keys": keys},
                algorithms=["RS256"],
                audience=self.project_id,
                issuer=self.issuer,
            )
        except JWTError as e:
            logger.info(f"Rejected ID token: {e}")
            raise AuthError("Authentication failed")

        email = claims.get("email")
        if not email or claims.get("email_verified") is False:
            raise AuthError("Authentication failed")

        return FederatedIdentity(
            email=email,
            name=claims.get("name") or email.split("@")[0],
            picture=upscale_avatar(claims.get("picture")),
        )
