from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from src.api.deps import (
    get_current_actor,
    get_reporting_service,
    period_selection,
    reporting_http_error,
    require_route_access,
)
from src.api.schemas.gamification import JobTitleBreakdownResponse
from src.api.schemas.metrics import MetricsResponse, TimelineResponse
from src.domain import Actor
from src.domain.errors import ReportingError
from src.domain.services.periods import Granularity, PeriodSelection
from src.domain.services.reporting import ReportingService

router = APIRouter(
    prefix="/metrics",
    tags=["Metrics"],
    dependencies=[Depends(require_route_access("/metrics"))],
)


@router.get("", response_model=MetricsResponse)
async def get_metrics(
    entity_ids: list[str] | None = Query(None, alias="entity_id"),  # noqa: B008
    selection: PeriodSelection = Depends(period_selection),  # noqa: B008
    actor: Actor = Depends(get_current_actor),  # noqa: B008
    service: ReportingService = Depends(get_reporting_service),  # noqa: B008
) -> MetricsResponse:
    """Per-entity summaries and global statistics over the caller's visible entities."""
    try:
        report = await service.scoped_aggregate(actor, selection, entity_ids=entity_ids)
    except ReportingError as exc:
        raise reporting_http_error(exc) from exc
    return MetricsResponse.model_validate(report)


@router.get("/timeline", response_model=TimelineResponse)
async def get_timeline(
    granularity: Granularity = Query(Granularity.WHOLE),  # noqa: B008
    entity_ids: list[str] | None = Query(None, alias="entity_id"),  # noqa: B008
    selection: PeriodSelection = Depends(period_selection),  # noqa: B008
    actor: Actor = Depends(get_current_actor),  # noqa: B008
    service: ReportingService = Depends(get_reporting_service),  # noqa: B008
) -> TimelineResponse:
    """Evaluation activity split into weekly or monthly buckets."""
    try:
        timeline = await service.timeline(
            actor, selection, granularity=granularity, entity_ids=entity_ids
        )
    except ReportingError as exc:
        raise reporting_http_error(exc) from exc
    return TimelineResponse.model_validate(timeline)


@router.get("/job-titles", response_model=JobTitleBreakdownResponse)
async def get_job_title_breakdown(
    selection: PeriodSelection = Depends(period_selection),  # noqa: B008
    actor: Actor = Depends(get_current_actor),  # noqa: B008
    service: ReportingService = Depends(get_reporting_service),  # noqa: B008
) -> JobTitleBreakdownResponse:
    """Evaluation statistics of the visible entities grouped by job title."""
    try:
        breakdown = await service.job_titles(actor, selection)
    except ReportingError as exc:
        raise reporting_http_error(exc) from exc
    return JobTitleBreakdownResponse.model_validate(breakdown)
