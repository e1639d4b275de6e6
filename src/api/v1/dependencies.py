"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from fastapi import Request

from core.config import settings
from core.exceptions import PROFILE_UPDATE_FAILED_TITLE
from domain.services.profile_service import ProfileService
from domain.services.profile_view_service import ProfileViewService
from domain.services.query_cache import QueryCache
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_query_cache() -> QueryCache:
    """Process-wide cache of backend reads."""
    return QueryCache(stale_seconds=settings.query_stale_seconds)


@lru_cache
def get_profile_service() -> ProfileService:
    """Get Profile service instance."""
    return ProfileService(
        get_uow_factory(),
        cache=get_query_cache(),
        cooldown_days=settings.basic_info_cooldown_days,
    )


@lru_cache
def get_profile_view_service() -> ProfileViewService:
    """Get Profile view service instance."""
    return ProfileViewService(placeholder_url=settings.placeholder_image_url)


def notify_profile_update_errors(request: Request) -> None:
    """Errors on this route are shown to the user as "Error updating profile"."""
    request.state.notification_title = PROFILE_UPDATE_FAILED_TITLE
