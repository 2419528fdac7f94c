from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field

from meetmogger.core.db import MongoModel
from meetmogger.utils import now


class User(MongoModel):
    """User domain model with credentials.

    Indexed on email and name, both unique.
    """

    email: str  # trimmed, lowercased
    name: str  # trimmed
    password_hash: str  # bcrypt hash
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)


class UserView(BaseModel):
    """User account information (API representation)."""

    id: UUID = Field(..., description="User ID")
    email: str = Field(..., description="Email address")
    name: str = Field(..., description="Display name")

    @classmethod
    def from_domain(cls, user: User) -> "UserView":
        """Create view model from domain model."""
        return cls(id=user.id, email=user.email, name=user.name)


class ConflictField(str, Enum):
    """Unique user field that a write collided on."""

    EMAIL = "email"
    NAME = "name"


class Conflict(BaseModel):
    """Uniqueness violation reported by the user store."""

    field: ConflictField
