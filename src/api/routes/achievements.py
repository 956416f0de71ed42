from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from src.api.deps import (
    get_current_actor,
    get_reporting_service,
    period_selection,
    reporting_http_error,
    require_route_access,
)
from src.api.schemas.gamification import AchievementsResponse
from src.domain import Actor
from src.domain.errors import ReportingError
from src.domain.models import AchievementCategory, AchievementTier
from src.domain.services.gamification import DEFAULT_ACHIEVEMENT_LIMIT, MAX_ACHIEVEMENT_LIMIT
from src.domain.services.periods import PeriodSelection
from src.domain.services.reporting import ReportingService

router = APIRouter(
    prefix="/achievements",
    tags=["Achievements"],
    dependencies=[Depends(require_route_access("/achievements"))],
)


@router.get("", response_model=AchievementsResponse)
async def list_achievements(
    entity_ids: list[str] | None = Query(None, alias="entity_id"),  # noqa: B008
    category: AchievementCategory | None = Query(None),  # noqa: B008
    tier: AchievementTier | None = Query(None),  # noqa: B008
    limit: int = Query(DEFAULT_ACHIEVEMENT_LIMIT, ge=1, le=MAX_ACHIEVEMENT_LIMIT),
    selection: PeriodSelection = Depends(period_selection),  # noqa: B008
    actor: Actor = Depends(get_current_actor),  # noqa: B008
    service: ReportingService = Depends(get_reporting_service),  # noqa: B008
) -> AchievementsResponse:
    """Achievements earned in the period, most recent first, with category and tier counts."""
    try:
        report = await service.achievements(
            actor, selection, entity_ids=entity_ids, category=category, tier=tier, limit=limit
        )
    except ReportingError as exc:
        raise reporting_http_error(exc) from exc
    return AchievementsResponse.model_validate(report)
