"""Capability matrix shared by request authorization and capability queries.

Each role is spelled out as a complete, independent row. Adding a role means
adding one full row here; there is no inheritance between roles.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType

from src.core.auth import Role


class Capability(str, Enum):
    VIEW_USERS = "view-users"
    CREATE_USERS = "create-users"
    EDIT_USERS = "edit-users"
    DELETE_USERS = "delete-users"

    VIEW_ATTENDANTS = "view-attendants"
    CREATE_ATTENDANTS = "create-attendants"
    EDIT_ATTENDANTS = "edit-attendants"
    DELETE_ATTENDANTS = "delete-attendants"

    VIEW_EVALUATIONS = "view-evaluations"
    CREATE_EVALUATIONS = "create-evaluations"
    EDIT_EVALUATIONS = "edit-evaluations"
    DELETE_EVALUATIONS = "delete-evaluations"
    VIEW_ALL_EVALUATIONS = "view-all-evaluations"

    VIEW_REPORTS = "view-reports"
    VIEW_ADVANCED_REPORTS = "view-advanced-reports"
    EXPORT_REPORTS = "export-reports"

    VIEW_GAMIFICATION = "view-gamification"
    VIEW_RANKINGS = "view-rankings"
    VIEW_ACHIEVEMENTS = "view-achievements"
    VIEW_COMPARATIVES = "view-comparatives"

    VIEW_LOGS = "view-logs"
    MANAGE_SYSTEM = "manage-system"

    @classmethod
    def parse(cls, value: Capability | str | None) -> Capability | None:
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


_ADMIN = frozenset(Capability)

_SUPERVISOR = frozenset(
    {
        Capability.VIEW_USERS,
        Capability.VIEW_ATTENDANTS,
        Capability.CREATE_ATTENDANTS,
        Capability.EDIT_ATTENDANTS,
        Capability.VIEW_EVALUATIONS,
        Capability.CREATE_EVALUATIONS,
        Capability.EDIT_EVALUATIONS,
        Capability.VIEW_REPORTS,
        Capability.VIEW_ADVANCED_REPORTS,
        Capability.EXPORT_REPORTS,
        Capability.VIEW_GAMIFICATION,
        Capability.VIEW_RANKINGS,
        Capability.VIEW_ACHIEVEMENTS,
        Capability.VIEW_COMPARATIVES,
    }
)

_ATTENDANT = frozenset(
    {
        Capability.VIEW_EVALUATIONS,
        Capability.VIEW_REPORTS,
        Capability.VIEW_GAMIFICATION,
        Capability.VIEW_RANKINGS,
        Capability.VIEW_ACHIEVEMENTS,
    }
)

# Read-only across the board, unrestricted in scope.
_CONSULTANT = frozenset(
    {
        Capability.VIEW_USERS,
        Capability.VIEW_ATTENDANTS,
        Capability.VIEW_EVALUATIONS,
        Capability.VIEW_ALL_EVALUATIONS,
        Capability.VIEW_REPORTS,
        Capability.VIEW_ADVANCED_REPORTS,
        Capability.EXPORT_REPORTS,
        Capability.VIEW_GAMIFICATION,
        Capability.VIEW_RANKINGS,
        Capability.VIEW_ACHIEVEMENTS,
        Capability.VIEW_COMPARATIVES,
    }
)

CAPABILITY_MATRIX: Mapping[Role, frozenset[Capability]] = MappingProxyType(
    {
        Role.ADMIN: _ADMIN,
        Role.SUPERVISOR: _SUPERVISOR,
        Role.ATTENDANT: _ATTENDANT,
        Role.CONSULTANT: _CONSULTANT,
    }
)

# Coarse navigation gating only; the matrix above stays the source of truth.
ROUTE_CAPABILITIES: tuple[tuple[str, Capability], ...] = (
    ("/users", Capability.VIEW_USERS),
    ("/attendants", Capability.VIEW_ATTENDANTS),
    ("/evaluations", Capability.VIEW_EVALUATIONS),
    ("/reports", Capability.VIEW_REPORTS),
    ("/metrics", Capability.VIEW_REPORTS),
    ("/gamification", Capability.VIEW_GAMIFICATION),
    ("/achievements", Capability.VIEW_ACHIEVEMENTS),
    ("/rankings", Capability.VIEW_RANKINGS),
    ("/comparatives", Capability.VIEW_COMPARATIVES),
)


def get_capabilities(role: Role | str | None) -> frozenset[Capability]:
    """Return the full capability set of ``role`` (empty for unknown roles)."""
    parsed = Role.parse(role)
    if parsed is None:
        return frozenset()
    return CAPABILITY_MATRIX[parsed]


def has_capability(role: Role | str | None, capability: Capability | str | None) -> bool:
    """Total, side-effect free lookup; anything unrecognised is denied."""
    parsed = Capability.parse(capability)
    if parsed is None:
        return False
    return parsed in get_capabilities(role)


def required_capability_for(route: str) -> Capability | None:
    for prefix, capability in ROUTE_CAPABILITIES:
        if route == prefix or route.startswith(prefix + "/"):
            return capability
    return None


def can_access_route(role: Role | str | None, route: str) -> bool:
    """Navigation check: unmapped routes are left to per-operation checks."""
    if Role.parse(role) is None:
        return False
    capability = required_capability_for(route)
    if capability is None:
        return True
    return has_capability(role, capability)
