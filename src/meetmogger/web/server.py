from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from meetmogger.app import App
from meetmogger.config import Config
from meetmogger.errors import InfrastructureError, UserError
from meetmogger.web.error_handlers import (
    general_exception_handler,
    infrastructure_error_handler,
    request_validation_handler,
    user_error_handler,
)
from meetmogger.web.openapi import set_custom_openapi
from meetmogger.web.routers import analysis_router, auth_router


def create_fastapi_app(app_instance: App, config: Config) -> FastAPI:
    """Create and configure FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """FastAPI application lifespan management."""
        # Store app instance and config in app state
        app.state.app = app_instance
        app.state.config = config
        async with app_instance.lifespan():
            yield

    app = FastAPI(
        title="MeetMogger API",
        lifespan=lifespan,
        openapi_tags=[],  # Tags will be added by custom OpenAPI function
    )

    # Add CORS middleware for the frontend
    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization"],
        )

    @app.get("/api/health", tags=["health"], operation_id="healthCheck")
    async def health_check() -> dict[str, str]:
        return {"status": "OK", "message": "Server is running"}

    app.include_router(auth_router, prefix="/api")
    app.include_router(analysis_router, prefix="/api")

    # Register error handlers
    app.add_exception_handler(UserError, user_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(InfrastructureError, infrastructure_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    set_custom_openapi(app)

    return app
