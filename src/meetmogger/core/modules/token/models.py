"""Bearer token models."""

from datetime import datetime
from enum import Enum
from typing import NewType
from uuid import UUID

from pydantic import BaseModel

AuthToken = NewType("AuthToken", str)


class InsecureSecretWarning(UserWarning):
    """Tokens are being signed with the built-in development secret."""


class TokenClaims(BaseModel):
    """Identity carried by a verified token."""

    user_id: UUID
    email: str
    name: str
    issued_at: datetime
    expires_at: datetime


class TokenStatus(str, Enum):
    VALID = "valid"
    EXPIRED = "expired"
    INVALID = "invalid"


class TokenVerification(BaseModel):
    """Outcome of verifying a token. Claims are set only when status is VALID."""

    status: TokenStatus
    claims: TokenClaims | None = None

    @property
    def is_valid(self) -> bool:
        return self.status == TokenStatus.VALID
