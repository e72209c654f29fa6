"""Gateway API endpoints."""

from . import health, thread

__all__ = ["health", "thread"]
