from enum import Enum
from typing import Self

from pydantic import BaseModel

from meetmogger.core.modules.token.models import AuthToken
from meetmogger.core.modules.user.models import ConflictField, UserView


class FailureKind(str, Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    AUTHENTICATION = "authentication"
    INFRASTRUCTURE = "infrastructure"


class AccountResult(BaseModel):
    """Outcome of a register or login attempt.

    On success user and token are set; on failure, failure classifies the
    cause and conflict_field names the duplicated field for conflicts.
    """

    success: bool
    message: str
    user: UserView | None = None
    token: AuthToken | None = None
    failure: FailureKind | None = None
    conflict_field: ConflictField | None = None

    @classmethod
    def ok(cls, message: str, user: UserView, token: AuthToken) -> Self:
        return cls(success=True, message=message, user=user, token=token)

    @classmethod
    def fail(cls, failure: FailureKind, message: str, conflict_field: ConflictField | None = None) -> Self:
        return cls(success=False, message=message, failure=failure, conflict_field=conflict_field)
