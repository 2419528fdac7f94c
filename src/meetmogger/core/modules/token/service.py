import base64
import binascii
import warnings
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

import structlog
from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError

from meetmogger.core.core import Service
from meetmogger.core.modules.token.models import (
    AuthToken,
    InsecureSecretWarning,
    TokenClaims,
    TokenStatus,
    TokenVerification,
)

logger = structlog.get_logger(__name__)

ALGORITHM = "HS256"
TOKEN_LIFETIME = timedelta(days=7)


def has_canonical_signature(token: str) -> bool:
    """Check that the signature segment is the exact base64url encoding of its bytes.

    The decoder ignores the unused low bits of the last character, so without
    this check a token with a flipped padding bit would still verify.
    """
    segments = token.split(".")
    if len(segments) != 3:  # noqa: PLR2004
        return False
    signature = segments[2]
    try:
        raw = base64.urlsafe_b64decode(signature + "=" * (-len(signature) % 4))
    except (binascii.Error, ValueError):
        return False
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii") == signature


class TokenService(Service):
    """Issues and verifies stateless, signed bearer tokens.

    Validity is signature plus expiry; nothing is looked up in the database.
    Expiry is checked against the core clock.
    """

    @property
    def _secret(self) -> str:
        return self.core.config.jwt_secret

    def issue(self, user_id: UUID, email: str, name: str) -> AuthToken:
        """Sign a token for the principal, valid for seven days from now."""
        issued_at = self.core.clock()
        payload = {
            "sub": str(user_id),
            "email": email,
            "name": name,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + TOKEN_LIFETIME).timestamp()),
        }
        return AuthToken(jwt.encode(payload, self._secret, algorithm=ALGORITHM))

    def verify(self, token: str) -> TokenVerification:
        """Check signature and expiry. Never raises."""
        if not has_canonical_signature(token):
            return TokenVerification(status=TokenStatus.INVALID)
        try:
            payload: dict[str, Any] = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"verify_exp": False, "require_exp": True, "require_iat": True, "require_sub": True},
            )
            claims = TokenClaims(
                user_id=payload["sub"],
                email=payload["email"],
                name=payload["name"],
                issued_at=datetime.fromtimestamp(payload["iat"], UTC),
                expires_at=datetime.fromtimestamp(payload["exp"], UTC),
            )
        except (JWTError, PydanticValidationError, KeyError, TypeError, ValueError, OverflowError):
            return TokenVerification(status=TokenStatus.INVALID)

        if claims.expires_at <= self.core.clock():
            return TokenVerification(status=TokenStatus.EXPIRED)
        return TokenVerification(status=TokenStatus.VALID, claims=claims)

    async def on_start(self) -> None:
        """Flag the development signing secret."""
        if self.core.config.uses_insecure_jwt_secret:
            logger.warning("insecure_jwt_secret", hint="set MEETMOGGER_JWT_SECRET")
            warnings.warn(
                "Bearer tokens are signed with the development secret; set MEETMOGGER_JWT_SECRET",
                InsecureSecretWarning,
                stacklevel=2,
            )
