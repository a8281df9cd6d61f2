"""API Package.

FastAPI server for the records job worker.
"""

from api.server import create_app

__all__ = [
    "create_app",
]
