from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from src.api.deps import (
    get_current_actor,
    get_reporting_service,
    period_selection,
    reporting_http_error,
    require_route_access,
)
from src.api.schemas.metrics import RankingResponse
from src.domain import Actor
from src.domain.errors import ReportingError
from src.domain.services.periods import PeriodSelection
from src.domain.services.rankings import (
    DEFAULT_RANKING_LIMIT,
    MAX_RANKING_LIMIT,
    RankingOrder,
    SortDirection,
)
from src.domain.services.reporting import ReportingService

router = APIRouter(
    prefix="/rankings",
    tags=["Rankings"],
    dependencies=[Depends(require_route_access("/rankings"))],
)


@router.get("", response_model=RankingResponse)
async def get_ranking(
    order_by: RankingOrder = Query(RankingOrder.POINTS),  # noqa: B008
    direction: SortDirection = Query(SortDirection.DESC),  # noqa: B008
    limit: int = Query(DEFAULT_RANKING_LIMIT, ge=1, le=MAX_RANKING_LIMIT),
    selection: PeriodSelection = Depends(period_selection),  # noqa: B008
    actor: Actor = Depends(get_current_actor),  # noqa: B008
    service: ReportingService = Depends(get_reporting_service),  # noqa: B008
) -> RankingResponse:
    """Leaderboard of the entities visible to the caller."""
    try:
        ranking = await service.ranking(
            actor, selection, order_by=order_by, direction=direction, limit=limit
        )
    except ReportingError as exc:
        raise reporting_http_error(exc) from exc
    return RankingResponse.model_validate(ranking)
