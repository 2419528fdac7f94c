from typing import Any
from uuid import UUID

import structlog
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError, PyMongoError

from meetmogger.core.core import Service
from meetmogger.core.modules.user.models import Conflict, ConflictField, User
from meetmogger.errors import InfrastructureError

logger = structlog.get_logger(__name__)


def conflict_from_duplicate_key(error: DuplicateKeyError) -> Conflict:
    """Map a duplicate key error to the unique field it collided on."""
    key_pattern = (error.details or {}).get("keyPattern") or {}
    if "name" in key_pattern:
        return Conflict(field=ConflictField.NAME)
    return Conflict(field=ConflictField.EMAIL)


class UserService(Service):
    """Credential store over the users collection.

    The unique indexes on email and name are the final arbiter of uniqueness.
    Database failures are raised as InfrastructureError, duplicate keys are
    returned as a Conflict.
    """

    def __init__(self, database: AsyncDatabase[dict[str, Any]]) -> None:
        super().__init__(database)
        self._collection = database.get_collection("users")

    async def get_user(self, user_id: UUID) -> User | None:
        """Get user by ID."""
        doc = await self._find_one({"_id": user_id})
        return User.model_validate(doc) if doc is not None else None

    async def get_user_by_email(self, email: str) -> User | None:
        """Get user by normalized email."""
        doc = await self._find_one({"email": email})
        return User.model_validate(doc) if doc is not None else None

    async def find_conflict(self, email: str, name: str) -> Conflict | None:
        """Check whether email or name is already taken; email wins when both are, even on different users."""
        if await self._find_one({"email": email}) is not None:
            return Conflict(field=ConflictField.EMAIL)
        if await self._find_one({"name": name}) is not None:
            return Conflict(field=ConflictField.NAME)
        return None

    async def insert_user(self, user: User) -> User | Conflict:
        """Persist a new user, or report which unique field it collided on."""
        try:
            await self._collection.insert_one(user.to_mongo())
        except DuplicateKeyError as e:
            conflict = conflict_from_duplicate_key(e)
            logger.info("user_insert_conflict", conflict_field=conflict.field.value)
            return conflict
        except PyMongoError as e:
            logger.exception("user_insert_failed", user_id=str(user.id))
            raise InfrastructureError("Database operation failed") from e
        logger.debug("user_inserted", user_id=str(user.id))
        return user

    async def _find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        try:
            return await self._collection.find_one(query)
        except PyMongoError as e:
            logger.exception("user_lookup_failed")
            raise InfrastructureError("Database operation failed") from e

    async def on_start(self) -> None:
        """Create unique indexes on email and name."""
        await self._collection.create_index([("email", 1)], unique=True)
        await self._collection.create_index([("name", 1)], unique=True)
        logger.debug("user_service_started")
