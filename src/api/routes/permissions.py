from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from src.api.deps import get_current_actor
from src.api.schemas.permissions import PermissionsResponse, RouteAccessResponse
from src.core.auth import role_name
from src.domain import Actor
from src.domain.permissions import can_access_route, get_capabilities, required_capability_for

router = APIRouter(prefix="/permissions", tags=["Permissions"])


@router.get("/me", response_model=PermissionsResponse)
async def my_permissions(
    actor: Actor = Depends(get_current_actor),  # noqa: B008
) -> PermissionsResponse:
    """List every capability granted to the caller's role."""
    capabilities = sorted(capability.value for capability in get_capabilities(actor.role))
    return PermissionsResponse(
        actor_id=actor.actor_id, role=role_name(actor.role), capabilities=capabilities
    )


@router.get("/routes", response_model=RouteAccessResponse)
async def route_access(
    route: str = Query(..., min_length=1, description="Navigation path, e.g. /rankings"),
    actor: Actor = Depends(get_current_actor),  # noqa: B008
) -> RouteAccessResponse:
    """Tell the caller whether its role may open ``route``."""
    capability = required_capability_for(route)
    return RouteAccessResponse(
        route=route,
        role=role_name(actor.role),
        required_capability=capability.value if capability else None,
        allowed=can_access_route(actor.role, route),
    )
