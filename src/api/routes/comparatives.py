from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from src.api.deps import (
    get_current_actor,
    get_reporting_service,
    reporting_http_error,
    require_route_access,
)
from src.api.schemas.metrics import ComparisonRequest, ComparisonResponse
from src.domain import Actor, DateRange
from src.domain.errors import ReportingError
from src.domain.services.periods import PeriodSelection
from src.domain.services.reporting import ReportingService

router = APIRouter(
    prefix="/comparatives",
    tags=["Comparatives"],
    dependencies=[Depends(require_route_access("/comparatives"))],
)
logger = structlog.get_logger()


@router.post("", response_model=ComparisonResponse)
async def compare_entities(
    payload: ComparisonRequest,
    actor: Actor = Depends(get_current_actor),  # noqa: B008
    service: ReportingService = Depends(get_reporting_service),  # noqa: B008
) -> ComparisonResponse:
    """Side-by-side metrics for two to five entities within the caller's scope."""
    selection: PeriodSelection = payload.period
    if payload.start is not None or payload.end is not None:
        selection = DateRange(start=payload.start, end=payload.end)

    try:
        comparison = await service.compare(
            actor, payload.entity_ids, selection, metrics=payload.metrics
        )
    except ReportingError as exc:
        raise reporting_http_error(exc) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc

    await logger.ainfo(
        "comparison_built",
        actor_id=actor.actor_id,
        entities=len(comparison.summaries),
        period=comparison.period.label,
    )
    return ComparisonResponse.model_validate(comparison)
