from typing import Annotated, cast

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from meetmogger.app import App
from meetmogger.core.modules.token.models import TokenClaims, TokenStatus
from meetmogger.errors import AccessDeniedError, AuthenticationError

# Security schemes
bearer_scheme = HTTPBearer(scheme_name="BearerAuth", auto_error=False)


async def get_app(request: Request) -> App:
    return cast(App, request.app.state.app)


async def get_current_principal(
    request: Request,
    app: Annotated[App, Depends(get_app)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)] = None,
) -> TokenClaims:
    """Resolve the Authorization Bearer token into the caller's claims.

    Missing or expired token is 401, a present but invalid one is 403.
    The claims are also attached to request.state.principal.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Access token required")

    verification = app.verify_token(credentials.credentials)
    if verification.status == TokenStatus.EXPIRED:
        raise AuthenticationError("Token has expired")
    if verification.claims is None:
        raise AccessDeniedError("Invalid token")

    request.state.principal = verification.claims
    return verification.claims


# Type aliases for dependencies
AppDep = Annotated[App, Depends(get_app)]
PrincipalDep = Annotated[TokenClaims, Depends(get_current_principal)]
