"""Identity provider adapter: verifies Firebase ID tokens (RS256 JWTs) against the provider's JWKS."""

from __future__ import annotations

import asyncio
import logging
from functools import lru_cache
from typing import Any, Dict, Optional

import jwt
from jwt import PyJWKClient
from pydantic import BaseModel, ConfigDict

from ..config import get_settings
from ..services.exceptions import InternalServiceError, UnauthorizedError

LOGGER = logging.getLogger("uvicorn.error")


class VerifiedIdentity(BaseModel):
    model_config = ConfigDict(frozen=True)

    uid: str
    email: str


class IdentityVerifier:
    def __init__(
        self,
        *,
        project_id: str,
        jwks_url: str,
        jwks_client: Optional[PyJWKClient] = None,
    ) -> None:
        self._project_id = (project_id or "").strip()
        self._jwks_url = jwks_url
        self._jwks_client = jwks_client

    @property
    def issuer(self) -> str:
        return f"https://securetoken.google.com/{self._project_id}"

    def _client(self) -> PyJWKClient:
        if self._jwks_client is None:
            self._jwks_client = PyJWKClient(self._jwks_url)
        return self._jwks_client

    def decode(self, token: str) -> Dict[str, Any]:
        """Verify signature, audience, issuer and expiry; return the claims."""

        if not self._project_id:
            LOGGER.error("FIREBASE_PROJECT_ID is not set; cannot verify identity tokens")
            raise InternalServiceError("identity provider not configured")
        try:
            signing_key = self._client().get_signing_key_from_jwt(token)
            return jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256"],
                audience=self._project_id,
                issuer=self.issuer,
            )
        except jwt.PyJWTError as exc:
            LOGGER.warning("Token verification failed: %s", exc)
            raise UnauthorizedError() from exc

    def verify(self, token: str) -> VerifiedIdentity:
        if not token:
            raise UnauthorizedError()
        claims = self.decode(token)
        email = str(claims.get("email") or "").strip().lower()
        uid = str(claims.get("user_id") or claims.get("sub") or "").strip()
        if not email or not uid:
            raise UnauthorizedError()
        LOGGER.debug("Token verified for uid=%s", uid)
        return VerifiedIdentity(uid=uid, email=email)

    async def verify_token(self, token: str) -> VerifiedIdentity:
        # Fetching signing keys may block on the network.
        return await asyncio.to_thread(self.verify, token)


@lru_cache()
def get_identity_verifier() -> IdentityVerifier:
    settings = get_settings()
    return IdentityVerifier(project_id=settings.firebase_project_id, jwks_url=settings.identity_jwks_url)


__all__ = ["IdentityVerifier", "VerifiedIdentity", "get_identity_verifier"]
