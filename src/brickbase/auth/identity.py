"""Identity verification — bearer credential → verified Principal.

Learn: Sign-in happens at an external identity provider which issues
signed ID tokens (JWT). We never see passwords; we only check that a
token was signed by the provider, is unexpired, and is meant for us.

The two failure modes are deliberately different:
- no credential at all (or not a Bearer header) → Unauthenticated (401)
- a credential the provider rejects → Forbidden (403)
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

import jwt
import structlog

from brickbase.config import settings
from brickbase.errors import Forbidden, IdentityProviderUnavailable, Unauthenticated

logger = structlog.get_logger()


class TokenError(Exception):
    """Raised when the identity provider rejects a token."""


@dataclass(frozen=True)
class Principal:
    """The verified identity making a request."""

    email: str
    subject: str
    claims: dict = field(default_factory=dict, compare=False)


class IdentityProvider(Protocol):
    def verify_token(self, raw: str) -> dict: ...


class JwtIdentityProvider:
    """Verifies ID tokens with PyJWT.

    With jwks_url set, keys are fetched (and cached) from the provider's
    JWKS endpoint and tokens must be RS256. Otherwise tokens are checked
    against a shared secret.
    """

    def __init__(
        self,
        secret: str = "",
        algorithm: str = "HS256",
        jwks_url: str = "",
        audience: str = "",
        issuer: str = "",
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.audience = audience or None
        self.issuer = issuer or None
        self._jwks = jwt.PyJWKClient(jwks_url) if jwks_url else None

    @property
    def is_remote(self) -> bool:
        return self._jwks is not None

    def verify_token(self, raw: str) -> dict:
        """Verify and decode a token. Raises TokenError on rejection."""
        try:
            if self._jwks is not None:
                key = self._jwks.get_signing_key_from_jwt(raw).key
                algorithms = ["RS256"]
            else:
                key = self.secret
                algorithms = [self.algorithm]
            return jwt.decode(
                raw,
                key,
                algorithms=algorithms,
                audience=self.audience,
                issuer=self.issuer,
                options={"verify_aud": self.audience is not None},
            )
        except jwt.PyJWKClientConnectionError:
            raise
        except jwt.ExpiredSignatureError:
            raise TokenError("Token has expired")
        except jwt.PyJWTError as e:
            raise TokenError(f"Invalid token: {e}")


def issue_dev_token(
    email: str,
    subject: Optional[str] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    """Create an HS256 ID token signed with the configured secret.

    For local development and tests; production tokens come from the
    identity provider.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "sub": subject or email,
        "email": email,
        "iat": now,
        "exp": now + timedelta(
            minutes=expires_minutes
            if expires_minutes is not None
            else settings.dev_token_expire_minutes
        ),
    }
    if settings.identity_audience:
        payload["aud"] = settings.identity_audience
    if settings.identity_issuer:
        payload["iss"] = settings.identity_issuer
    return jwt.encode(
        payload, settings.identity_secret, algorithm=settings.identity_algorithm
    )


def extract_bearer(authorization: Optional[str]) -> str:
    """Pull the token out of an Authorization header or raise Unauthenticated."""
    if not authorization:
        raise Unauthenticated()
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        raise Unauthenticated()
    return parts[1]


class IdentityVerifier:
    """verify(authorization header) → Principal. Stateless."""

    def __init__(self, provider: IdentityProvider):
        self.provider = provider

    async def verify(self, authorization: Optional[str]) -> Principal:
        token = extract_bearer(authorization)
        try:
            if getattr(self.provider, "is_remote", False):
                # JWKS fetches are blocking HTTP calls
                claims = await asyncio.to_thread(self.provider.verify_token, token)
            else:
                claims = self.provider.verify_token(token)
        except TokenError as e:
            logger.info("identity.rejected", reason=str(e))
            raise Forbidden()
        except jwt.PyJWKClientConnectionError as e:
            logger.error("identity.provider_unavailable", error=str(e))
            raise IdentityProviderUnavailable() from e

        email = claims.get("email")
        if not email:
            logger.info("identity.rejected", reason="missing email claim")
            raise Forbidden()
        return Principal(email=email, subject=str(claims.get("sub", email)), claims=claims)


def build_identity_verifier() -> IdentityVerifier:
    """Identity verifier configured from settings."""
    return IdentityVerifier(
        JwtIdentityProvider(
            secret=settings.identity_secret,
            algorithm=settings.identity_algorithm,
            jwks_url=settings.identity_jwks_url,
            audience=settings.identity_audience,
            issuer=settings.identity_issuer,
        )
    )
