from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase

from meetmogger.core.core import Service
from meetmogger.core.modules.account.models import AccountResult, FailureKind
from meetmogger.core.modules.account.passwords import PasswordHasher
from meetmogger.core.modules.user.models import Conflict, ConflictField, User, UserView
from meetmogger.core.modules.user.validators import (
    normalize_email,
    normalize_name,
    validate_email,
    validate_password,
)
from meetmogger.errors import InfrastructureError, ValidationError

logger = structlog.get_logger(__name__)

CONFLICT_MESSAGES = {
    ConflictField.EMAIL: "User with this email already exists",
    ConflictField.NAME: "Username is already taken",
}
INVALID_CREDENTIALS = "Invalid email or password"


class AccountService(Service):
    """Registration and login on top of the user store and token service.

    Returns AccountResult values; nothing here raises for business failures.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._hasher: PasswordHasher | None = None

    @property
    def hasher(self) -> PasswordHasher:
        if self._hasher is None:
            self._hasher = PasswordHasher(self.core.config.bcrypt_rounds)
        return self._hasher

    async def register(self, name: str, email: str, password: str) -> AccountResult:
        """Create a principal and issue its first token."""
        name = normalize_name(name)
        email = normalize_email(email)
        if not name or not email or not password:
            return AccountResult.fail(FailureKind.VALIDATION, "Name, email, and password are required")
        try:
            validate_email(email)
            validate_password(password)
        except ValidationError as e:
            return AccountResult.fail(FailureKind.VALIDATION, str(e))

        try:
            conflict = await self.core.services.user.find_conflict(email, name)
            if conflict is not None:
                return self._conflict(conflict)

            password_hash = await self.hasher.hash(password)
            created_at = self.core.clock()
            # The unique indexes decide races the pre-check could not see
            inserted = await self.core.services.user.insert_user(
                User(email=email, name=name, password_hash=password_hash, created_at=created_at, updated_at=created_at)
            )
        except InfrastructureError:
            logger.warning("registration_failed", reason="infrastructure")
            return AccountResult.fail(FailureKind.INFRASTRUCTURE, "Registration failed. Please try again.")

        if isinstance(inserted, Conflict):
            return self._conflict(inserted)

        logger.info("user_registered", user_id=str(inserted.id))
        return self._authenticated(inserted, "User registered successfully")

    async def login(self, email: str, password: str) -> AccountResult:
        """Check credentials and issue a token. Failures never say which field was wrong."""
        email = normalize_email(email)
        if not email or not password:
            return AccountResult.fail(FailureKind.VALIDATION, "Email and password are required")

        try:
            user = await self.core.services.user.get_user_by_email(email)
        except InfrastructureError:
            logger.warning("login_failed", reason="infrastructure")
            return AccountResult.fail(FailureKind.INFRASTRUCTURE, "Login failed. Please try again.")

        if user is None or not await self.hasher.verify(password, user.password_hash):
            logger.info("login_rejected")
            return AccountResult.fail(FailureKind.AUTHENTICATION, INVALID_CREDENTIALS)

        logger.info("user_logged_in", user_id=str(user.id))
        return self._authenticated(user, "Login successful")

    async def get_by_id(self, user_id: UUID) -> UserView | None:
        """Fetch the public view of a principal, without the password hash.

        Unlike register and login there is no failure result to classify into:
        a missing user is None, and a database outage propagates as
        InfrastructureError for the web layer to turn into a 500.
        """
        user = await self.core.services.user.get_user(user_id)
        return UserView.from_domain(user) if user is not None else None

    def _authenticated(self, user: User, message: str) -> AccountResult:
        token = self.core.services.token.issue(user.id, user.email, user.name)
        return AccountResult.ok(message, UserView.from_domain(user), token)

    @staticmethod
    def _conflict(conflict: Conflict) -> AccountResult:
        logger.info("registration_conflict", conflict_field=conflict.field.value)
        return AccountResult.fail(FailureKind.CONFLICT, CONFLICT_MESSAGES[conflict.field], conflict.field)
