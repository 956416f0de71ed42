"""Row-level visibility for listings and aggregations.

A :class:`VisibilityFilter` is built per request and handed to the data source,
which applies it while reading. Aggregates are therefore only ever computed over
records the caller may see.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, assert_never

import structlog
from src.core.auth import Role, role_name
from src.domain.models import Actor

if TYPE_CHECKING:
    from src.domain.services.reporting import MetricsDataSource

logger = structlog.get_logger(__name__)


class OwnedRecord(Protocol):
    @property
    def owner_id(self) -> str: ...


@dataclass(frozen=True, slots=True)
class VisibilityFilter:
    """Predicate over record owners: everything, or an explicit owner set."""

    match_all: bool = False
    owner_ids: frozenset[str] = frozenset()

    @classmethod
    def everything(cls) -> VisibilityFilter:
        return cls(match_all=True)

    @classmethod
    def nothing(cls) -> VisibilityFilter:
        return cls()

    @classmethod
    def owners(cls, owner_ids: Iterable[str]) -> VisibilityFilter:
        return cls(owner_ids=frozenset(owner_ids))

    @property
    def is_empty(self) -> bool:
        return not self.match_all and not self.owner_ids

    def admits(self, owner_id: str) -> bool:
        return self.match_all or owner_id in self.owner_ids

    def __call__(self, record: OwnedRecord) -> bool:
        return self.admits(record.owner_id)

    def narrowed_to(self, entity_ids: Iterable[str]) -> VisibilityFilter:
        """Intersect this scope with an explicit selection of entities."""
        selected = frozenset(entity_ids)
        if self.match_all:
            return VisibilityFilter.owners(selected)
        return VisibilityFilter.owners(self.owner_ids & selected)


def visibility_filter_for(actor: Actor, subordinate_ids: Iterable[str] = ()) -> VisibilityFilter:
    """Build the filter for ``actor`` given its current subordinates."""
    role = Role.parse(actor.role)
    if role is None:
        logger.warning(
            "visibility_unknown_role", actor_id=actor.actor_id, role=role_name(actor.role)
        )
        return VisibilityFilter.nothing()

    match role:
        case Role.ADMIN | Role.CONSULTANT:
            return VisibilityFilter.everything()
        case Role.SUPERVISOR:
            return VisibilityFilter.owners({actor.actor_id, *subordinate_ids})
        case Role.ATTENDANT:
            return VisibilityFilter.owners({actor.actor_id})
        case _:
            assert_never(role)


class AccessScoper:
    """Resolves the visibility filter of a caller against the live hierarchy."""

    def __init__(self, data_source: MetricsDataSource) -> None:
        self.data_source = data_source

    async def build_visibility_filter(self, actor: Actor) -> VisibilityFilter:
        subordinate_ids: list[str] = []
        # Subordinates change over time, so they are looked up on every call.
        if Role.parse(actor.role) is Role.SUPERVISOR:
            subordinate_ids = await self.data_source.fetch_subordinates(actor.actor_id)

        visibility = visibility_filter_for(actor, subordinate_ids)
        await logger.adebug(
            "visibility_resolved",
            actor_id=actor.actor_id,
            role=role_name(actor.role),
            match_all=visibility.match_all,
            owner_count=len(visibility.owner_ids),
        )
        return visibility
