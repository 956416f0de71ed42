from __future__ import annotations

from pydantic import BaseModel


class PermissionsResponse(BaseModel):
    actor_id: str
    role: str
    capabilities: list[str]


class RouteAccessResponse(BaseModel):
    route: str
    role: str
    required_capability: str | None = None
    allowed: bool
