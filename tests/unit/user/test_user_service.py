"""Tests for the user store."""

from uuid import uuid4

import pytest
from pymongo.errors import DuplicateKeyError

from meetmogger.core.modules.user.models import Conflict, ConflictField, User
from meetmogger.core.modules.user.service import conflict_from_duplicate_key
from meetmogger.errors import InfrastructureError


@pytest.fixture
def users(core):
    return core.services.user


def make_user(email="alice@x.com", name="Alice"):
    return User(email=email, name=name, password_hash="$2b$04$hashed_password_here")


class TestIndexes:
    """Tests for index creation on startup."""

    async def test_unique_indexes_on_email_and_name(self, core, users_collection):
        """Test that startup creates unique indexes on email and name."""
        assert users_collection.unique_fields == ["email", "name"]


class TestInsertUser:
    """Tests for UserService.insert_user."""

    async def test_insert_and_read_back(self, users):
        """Test that an inserted user can be fetched by id and by email."""
        user = make_user()
        assert await users.insert_user(user) == user

        assert await users.get_user(user.id) == user
        assert await users.get_user_by_email("alice@x.com") == user

    async def test_duplicate_email_returns_conflict(self, users):
        """Test that the unique email index surfaces as a typed conflict."""
        await users.insert_user(make_user())
        result = await users.insert_user(make_user(name="Other"))

        assert result == Conflict(field=ConflictField.EMAIL)

    async def test_duplicate_name_returns_conflict(self, users):
        """Test that the unique name index surfaces as a typed conflict."""
        await users.insert_user(make_user())
        result = await users.insert_user(make_user(email="other@x.com"))

        assert result == Conflict(field=ConflictField.NAME)

    async def test_store_failure_raises_infrastructure_error(self, users, users_collection, store_timeout):
        """Test that database errors are raised as InfrastructureError without internals."""
        users_collection.fail_with = store_timeout

        with pytest.raises(InfrastructureError, match="Database operation failed") as exc_info:
            await users.insert_user(make_user())
        assert exc_info.value.__cause__ is store_timeout


class TestLookups:
    """Tests for reads."""

    async def test_missing_user_is_none(self, users):
        assert await users.get_user(uuid4()) is None
        assert await users.get_user_by_email("nobody@x.com") is None

    async def test_find_conflict_none_when_free(self, users):
        assert await users.find_conflict("alice@x.com", "Alice") is None

    async def test_find_conflict_by_email(self, users):
        await users.insert_user(make_user())
        assert await users.find_conflict("alice@x.com", "Someone") == Conflict(field=ConflictField.EMAIL)

    async def test_find_conflict_by_name(self, users):
        await users.insert_user(make_user())
        assert await users.find_conflict("other@x.com", "Alice") == Conflict(field=ConflictField.NAME)

    async def test_find_conflict_email_first_across_users(self, users):
        """Test that a taken email is reported even when the name matches an earlier user."""
        await users.insert_user(make_user())
        await users.insert_user(make_user(email="bob@x.com", name="Bob"))

        assert await users.find_conflict("bob@x.com", "Alice") == Conflict(field=ConflictField.EMAIL)

    async def test_lookup_failure_raises_infrastructure_error(self, users, users_collection, store_timeout):
        users_collection.fail_with = store_timeout

        with pytest.raises(InfrastructureError):
            await users.get_user_by_email("alice@x.com")


class TestConflictFromDuplicateKey:
    """Tests for mapping duplicate key errors to conflict fields."""

    def test_email_key_pattern(self):
        error = DuplicateKeyError("E11000", code=11000, details={"keyPattern": {"email": 1}})
        assert conflict_from_duplicate_key(error).field == ConflictField.EMAIL

    def test_name_key_pattern(self):
        error = DuplicateKeyError("E11000", code=11000, details={"keyPattern": {"name": 1}})
        assert conflict_from_duplicate_key(error).field == ConflictField.NAME

    def test_missing_details_defaults_to_email(self):
        error = DuplicateKeyError("E11000", code=11000)
        assert conflict_from_duplicate_key(error).field == ConflictField.EMAIL
