from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import UTC, datetime

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool
from src.api.deps import get_db_session
from src.api.main import app
from src.infrastructure.db.base import Base
from src.domain.models import AchievementCategory, AchievementTier
from src.infrastructure.db.models import (
    AchievementAwardModel,
    AchievementModel,
    EvaluationModel,
    PerformanceSnapshotModel,
    UserModel,
    UserRole,
)

# Seeded hierarchy: sup-1 -> att-1, att-2; sup-2 -> att-3; att-9 is deactivated.
# Columns: id, role, supervisor, active, job title.
USERS = [
    ("admin-1", UserRole.ADMIN, None, True, None),
    ("cons-1", UserRole.CONSULTANT, None, True, None),
    ("sup-1", UserRole.SUPERVISOR, None, True, None),
    ("sup-2", UserRole.SUPERVISOR, None, True, None),
    ("att-1", UserRole.ATTENDANT, "sup-1", True, "Receptionist"),
    ("att-2", UserRole.ATTENDANT, "sup-1", True, "Receptionist"),
    ("att-3", UserRole.ATTENDANT, "sup-2", True, "Doorman"),
    ("att-9", UserRole.ATTENDANT, "sup-1", False, "Doorman"),
]

EVALUATIONS = [
    ("att-1", 5, datetime(2026, 3, 3, 10, tzinfo=UTC)),
    ("att-1", 5, datetime(2026, 3, 10, 10, tzinfo=UTC)),
    ("att-1", 4, datetime(2026, 3, 17, 10, tzinfo=UTC)),
    ("att-2", 3, datetime(2026, 3, 4, 15, tzinfo=UTC)),
    ("att-2", 3, datetime(2026, 3, 11, 15, tzinfo=UTC)),
    ("att-2", 2, datetime(2026, 3, 18, 15, tzinfo=UTC)),
    ("att-3", 4, datetime(2026, 3, 5, 9, tzinfo=UTC)),
    ("att-3", 4, datetime(2026, 3, 12, 9, tzinfo=UTC)),
    ("att-9", 1, datetime(2026, 3, 6, 9, tzinfo=UTC)),
    # Outside March 2026
    ("att-1", 1, datetime(2026, 2, 27, 9, tzinfo=UTC)),
]

SNAPSHOTS = [
    # entity, reference date, total, mean, satisfaction, points, best, worst
    ("att-1", datetime(2026, 3, 1, tzinfo=UTC), 2, 5.0, 100.0, 100, 5.0, 5.0),
    ("att-1", datetime(2026, 3, 15, tzinfo=UTC), 1, 4.0, 100.0, 40, 4.0, 4.0),
    ("att-2", datetime(2026, 3, 1, tzinfo=UTC), 3, 2.67, 0.0, 80, 3.0, 2.0),
    ("att-3", datetime(2026, 3, 1, tzinfo=UTC), 2, 4.0, 100.0, 80, 4.0, 4.0),
    ("att-9", datetime(2026, 3, 1, tzinfo=UTC), 1, 1.0, 0.0, 10, 1.0, 1.0),
    ("att-1", datetime(2026, 2, 1, tzinfo=UTC), 1, 1.0, 0.0, 10, 1.0, 1.0),
]

ACHIEVEMENTS = [
    # id, name, category, tier, points, active
    ("ach-first", "First Steps", AchievementCategory.VOLUME, AchievementTier.BRONZE, 20, True),
    ("ach-quality", "Quality Star", AchievementCategory.QUALITY, AchievementTier.SILVER, 30, True),
    ("ach-legacy", "Legacy Badge", AchievementCategory.SPECIAL, AchievementTier.GOLD, 40, False),
]

AWARDS = [
    ("ach-first", "att-1", datetime(2026, 3, 3, 12, tzinfo=UTC)),
    ("ach-quality", "att-2", datetime(2026, 3, 11, 16, tzinfo=UTC)),
    ("ach-first", "att-3", datetime(2026, 3, 5, 10, tzinfo=UTC)),
    # Deactivated attendant, retired achievement, outside March 2026
    ("ach-first", "att-9", datetime(2026, 3, 6, 10, tzinfo=UTC)),
    ("ach-legacy", "att-1", datetime(2026, 3, 7, 10, tzinfo=UTC)),
    ("ach-quality", "att-1", datetime(2026, 2, 20, 10, tzinfo=UTC)),
]

MARCH_2026 = {"start": "2026-03-01T00:00:00+00:00", "end": "2026-04-01T00:00:00+00:00"}


async def seed_reporting_data(session: AsyncSession) -> None:
    for user_id, role, supervisor_id, is_active, job_title in USERS:
        session.add(
            UserModel(
                id=user_id,
                email=f"{user_id}@example.com",
                full_name=user_id.replace("-", " ").title(),
                role=role,
                supervisor_id=supervisor_id,
                is_active=is_active,
                job_title=job_title,
            )
        )
    await session.flush()

    for index, (subject_id, score, occurred_at) in enumerate(EVALUATIONS, start=1):
        session.add(
            EvaluationModel(
                id=f"eval-{index}",
                subject_id=subject_id,
                rater_id="admin-1",
                score=score,
                occurred_at=occurred_at,
            )
        )

    for entity_id, reference, total, mean, satisfaction, points, best, worst in SNAPSHOTS:
        session.add(
            PerformanceSnapshotModel(
                entity_id=entity_id,
                period_reference_date=reference,
                total_evaluations=total,
                mean_score=mean,
                satisfaction_percent=satisfaction,
                points_earned=points,
                best_score=best,
                worst_score=worst,
            )
        )

    for achievement_id, name, category, tier, points, is_active in ACHIEVEMENTS:
        session.add(
            AchievementModel(
                id=achievement_id,
                name=name,
                description=f"{name} achievement",
                category=category,
                tier=tier,
                points=points,
                is_active=is_active,
            )
        )
    await session.flush()

    points_by_achievement = {row[0]: row[4] for row in ACHIEVEMENTS}
    for achievement_id, entity_id, awarded_at in AWARDS:
        session.add(
            AchievementAwardModel(
                achievement_id=achievement_id,
                entity_id=entity_id,
                points_awarded=points_by_achievement[achievement_id],
                awarded_at=awarded_at,
            )
        )
    await session.commit()


@pytest.fixture()
async def engine() -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture()
async def db(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Seeded session for tests that talk to the repository directly."""
    async with session_factory() as session:
        await seed_reporting_data(session)
        yield session


@pytest.fixture()
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncClient]:
    """HTTP client bound to the app with a seeded in-memory database."""
    async with session_factory() as session:
        await seed_reporting_data(session)

    async def override_db_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.pop(get_db_session, None)


@pytest.fixture()
def march_2026() -> dict[str, str]:
    return dict(MARCH_2026)
