from collections.abc import AsyncGenerator, Callable
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

import structlog
from pymongo import AsyncMongoClient

from meetmogger.config import Config
from meetmogger.core.core import Core
from meetmogger.core.modules.account.models import AccountResult, FailureKind
from meetmogger.core.modules.analysis.models import CallAnalysis
from meetmogger.core.modules.token.models import TokenClaims, TokenVerification
from meetmogger.core.modules.user.models import UserView
from meetmogger.errors import (
    AuthenticationError,
    ConflictError,
    InfrastructureError,
    NotFoundError,
    UserError,
    ValidationError,
)
from meetmogger.utils import now

logger = structlog.get_logger(__name__)

FAILURE_ERRORS: dict[FailureKind, type[UserError]] = {
    FailureKind.VALIDATION: ValidationError,
    FailureKind.CONFLICT: ConflictError,
    FailureKind.AUTHENTICATION: AuthenticationError,
}


class App:
    """Facade for all application operations, turns failed results into typed errors for the web layer."""

    def __init__(
        self,
        config: Config,
        mongo_client: AsyncMongoClient[dict[str, Any]],
        clock: Callable[[], datetime] = now,
    ) -> None:
        self._core = Core(config, mongo_client, clock)

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        """Application lifespan management - delegates to Core."""
        async with self._core.lifespan():
            yield

    def verify_token(self, token: str) -> TokenVerification:
        """Verify a bearer token without touching the database."""
        return self._core.services.token.verify(token)

    async def register(self, name: str, email: str, password: str) -> AccountResult:
        """Register a new user and issue a token."""
        return _ensure_success(await self._core.services.account.register(name, email, password))

    async def login(self, email: str, password: str) -> AccountResult:
        """Authenticate user and issue a token."""
        return _ensure_success(await self._core.services.account.login(email, password))

    async def get_profile(self, principal: TokenClaims) -> UserView:
        """Get the authenticated user's profile."""
        user = await self._core.services.account.get_by_id(principal.user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def logout(self, principal: TokenClaims) -> None:
        """End the client session. Tokens are stateless, so this token stays valid until it expires."""
        logger.info("user_logged_out", user_id=str(principal.user_id))

    async def analyze_transcript(self, principal: TokenClaims, transcript: str) -> CallAnalysis:
        """Analyze a call transcript for the authenticated user."""
        return await self._core.services.analysis.analyze(transcript, principal.user_id)


def _ensure_success(result: AccountResult) -> AccountResult:
    """Return a successful result, raise the matching error for a failed one."""
    if result.success:
        return result
    if result.failure == FailureKind.INFRASTRUCTURE or result.failure is None:
        raise InfrastructureError(result.message)
    raise FAILURE_ERRORS[result.failure](result.message)
