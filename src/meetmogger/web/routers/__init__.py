from meetmogger.web.routers.analysis import router as analysis_router
from meetmogger.web.routers.auth import router as auth_router

__all__ = [
    "analysis_router",
    "auth_router",
]
