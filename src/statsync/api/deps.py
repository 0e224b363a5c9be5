"""Dependency injection for FastAPI."""

from fastapi import Depends, Request

from statsync.app_context import AppContext
from statsync.services import StatisticsService


def get_app_context(request: Request) -> AppContext:
    """Provide the AppContext created by the application lifespan."""
    return request.app.state.context


def get_stats_service(context: AppContext = Depends(get_app_context)) -> StatisticsService:
    """Provide the StatisticsService of the active session."""
    return context.stats
