"""API routers package."""

from statsync.api.routers.session import router as session_router
from statsync.api.routers.stats import router as stats_router

__all__ = [
    "session_router",
    "stats_router",
]
