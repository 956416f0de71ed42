from src.infrastructure.repositories.metrics import SqlMetricsRepository

__all__ = ["SqlMetricsRepository"]
