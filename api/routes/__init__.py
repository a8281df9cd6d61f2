"""API Routes Package."""

from api.routes import health, jobs, records

__all__ = [
    "health",
    "jobs",
    "records",
]
