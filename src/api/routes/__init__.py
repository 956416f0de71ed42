from fastapi import FastAPI

from . import achievements, comparatives, gamification, health, metrics, permissions, rankings


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the FastAPI application."""
    app.include_router(health.router)
    app.include_router(permissions.router)
    app.include_router(metrics.router)
    app.include_router(rankings.router)
    app.include_router(comparatives.router)
    app.include_router(gamification.router)
    app.include_router(achievements.router)
