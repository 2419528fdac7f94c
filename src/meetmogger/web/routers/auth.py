from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field

from meetmogger.core.modules.user.models import UserView
from meetmogger.web.deps import AppDep, PrincipalDep
from meetmogger.web.openapi import ErrorResponse

router = APIRouter(tags=["auth"])


# Missing fields default to "" so the account service reports them with its own message
class RegisterRequest(BaseModel):
    """Registration request."""

    name: str = Field("", description="Display name, unique")
    email: str = Field("", description="Email address, unique (case-insensitive)")
    password: str = Field("", description="Password, at least 6 characters")


class LoginRequest(BaseModel):
    """Authentication request."""

    email: str = Field("", description="Email address")
    password: str = Field("", description="Password")


class AuthResponse(BaseModel):
    """Authentication response."""

    success: bool = Field(True, description="Always true on success")
    message: str = Field(..., description="Human-readable outcome")
    user: UserView = Field(..., description="Authenticated user")
    token: str = Field(..., description="Bearer token for subsequent requests, valid for 7 days")


class ProfileResponse(BaseModel):
    success: bool = True
    user: UserView


class LogoutResponse(BaseModel):
    success: bool = True
    message: str


@router.post(
    "/auth/register",
    summary="Register user",
    description="Create an account with name, email and password and receive an authentication token.",
    operation_id="register",
    status_code=201,
    responses={
        201: {"description": "User registered"},
        400: {"model": ErrorResponse, "description": "Missing or invalid fields"},
        409: {"model": ErrorResponse, "description": "Email or name already taken"},
        500: {"model": ErrorResponse, "description": "Database unavailable"},
    },
)
async def register(register_data: RegisterRequest, app: AppDep) -> AuthResponse:
    result = await app.register(register_data.name, register_data.email, register_data.password)
    return AuthResponse.model_validate(result.model_dump())


@router.post(
    "/auth/login",
    summary="Authenticate user",
    description="Authenticate with email and password to receive an authentication token.",
    operation_id="login",
    responses={
        200: {"description": "Successfully authenticated"},
        400: {"model": ErrorResponse, "description": "Missing fields"},
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        500: {"model": ErrorResponse, "description": "Database unavailable"},
    },
)
async def login(login_data: LoginRequest, app: AppDep) -> AuthResponse:
    result = await app.login(login_data.email, login_data.password)
    return AuthResponse.model_validate(result.model_dump())


PROFILE_RESPONSES: dict[int | str, dict[str, Any]] = {
    200: {"description": "Current user profile"},
    401: {"model": ErrorResponse, "description": "Missing or expired token"},
    403: {"model": ErrorResponse, "description": "Invalid token"},
    404: {"model": ErrorResponse, "description": "User no longer exists"},
}


@router.get(
    "/auth/profile",
    summary="Get current user profile",
    description="Get the profile of the currently authenticated user.",
    operation_id="getProfile",
    responses=PROFILE_RESPONSES,
)
async def get_profile(app: AppDep, principal: PrincipalDep) -> ProfileResponse:
    return ProfileResponse(user=await app.get_profile(principal))


@router.get(
    "/auth/me",
    summary="Get current user profile",
    description="Alias of /auth/profile.",
    operation_id="getMe",
    responses=PROFILE_RESPONSES,
)
async def get_me(app: AppDep, principal: PrincipalDep) -> ProfileResponse:
    return ProfileResponse(user=await app.get_profile(principal))


@router.post(
    "/auth/logout",
    summary="End session",
    description="Acknowledge logout. Tokens are stateless: the client discards it, and it stays valid until expiry.",
    operation_id="logout",
    responses={
        200: {"description": "Successfully logged out"},
        401: {"model": ErrorResponse, "description": "Missing or expired token"},
        403: {"model": ErrorResponse, "description": "Invalid token"},
    },
)
async def logout(app: AppDep, principal: PrincipalDep) -> LogoutResponse:
    await app.logout(principal)
    return LogoutResponse(message="Logged out successfully")
