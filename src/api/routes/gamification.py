from __future__ import annotations

from fastapi import APIRouter, Depends
from src.api.deps import (
    get_current_actor,
    get_reporting_service,
    period_selection,
    reporting_http_error,
    require_route_access,
)
from src.api.schemas.gamification import GamificationResponse
from src.domain import Actor
from src.domain.errors import ReportingError
from src.domain.services.periods import PeriodSelection
from src.domain.services.reporting import ReportingService

router = APIRouter(
    prefix="/gamification",
    tags=["Gamification"],
    dependencies=[Depends(require_route_access("/gamification"))],
)


@router.get("", response_model=GamificationResponse)
async def get_gamification(
    selection: PeriodSelection = Depends(period_selection),  # noqa: B008
    actor: Actor = Depends(get_current_actor),  # noqa: B008
    service: ReportingService = Depends(get_reporting_service),  # noqa: B008
) -> GamificationResponse:
    """Points, streaks and levels of the entities visible to the caller."""
    try:
        result = await service.gamification(actor, selection)
    except ReportingError as exc:
        raise reporting_http_error(exc) from exc
    return GamificationResponse.model_validate(result)
