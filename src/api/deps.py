from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from datetime import datetime

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from src.core.auth import Role, TokenError, decode_access_token, role_name
from src.core.config import get_settings
from src.domain import Actor, DateRange
from src.domain.errors import (
    AuthorizationError,
    DataSourceUnavailableError,
    EntityNotFoundError,
    InvalidPeriodError,
    ReportingError,
)
from src.domain.permissions import can_access_route, required_capability_for
from src.domain.services.periods import PeriodSelection
from src.domain.services.reporting import ReportingService
from src.infrastructure.db.session import get_session
from src.infrastructure.repositories.metrics import SqlMetricsRepository

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_actor(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),  # noqa: B008
) -> Actor:
    """Resolve the authenticated actor from a bearer token."""
    if credentials is None:
        raise _unauthorized("Missing bearer token")

    try:
        payload = decode_access_token(credentials.credentials)
    except TokenError as exc:
        raise _unauthorized(str(exc)) from exc

    actor_id = payload.get("sub")
    if not actor_id:
        raise _unauthorized("Token missing subject")

    try:
        return Actor(
            actor_id=actor_id,
            role=Role(payload["role"]),
            supervisor_id=payload.get("supervisor_id"),
        )
    except ValueError as exc:
        raise _unauthorized(str(exc)) from exc


def require_route_access(route: str) -> Callable[[Actor], Actor]:
    """Dependency factory gating a whole router on the capability its route requires."""
    capability = required_capability_for(route)
    if capability is None:
        raise ValueError(f"Route '{route}' is not gated by any capability")

    def dependency(actor: Actor = Depends(get_current_actor)) -> Actor:  # noqa: B008
        if not can_access_route(actor.role, route):
            raise _forbidden(
                f"Role '{role_name(actor.role)}' lacks capability '{capability.value}'"
            )
        return actor

    return dependency


def period_selection(
    period: str | None = Query(None, description="weekly, monthly, quarterly or yearly"),
    start: datetime | None = Query(None, description="Explicit window start (inclusive)"),
    end: datetime | None = Query(None, description="Explicit window end (exclusive)"),
) -> PeriodSelection:
    """Explicit bounds win over the named token; an incomplete range is rejected later."""
    if start is not None or end is not None:
        return DateRange(start=start, end=end)
    return period


async def get_db_session() -> AsyncIterator[AsyncSession]:
    """Provide an async SQLAlchemy session for API handlers."""
    async for session in get_session():
        yield session


def get_reporting_service(
    session: AsyncSession = Depends(get_db_session),  # noqa: B008
) -> ReportingService:
    settings = get_settings()
    return ReportingService(SqlMetricsRepository(session), timezone=settings.tzinfo)


def reporting_http_error(exc: ReportingError) -> HTTPException:
    """Map the reporting error taxonomy onto HTTP status codes."""
    if isinstance(exc, AuthorizationError):
        return _forbidden(str(exc))
    if isinstance(exc, InvalidPeriodError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, EntityNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, DataSourceUnavailableError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _forbidden(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
