"""API endpoints for dockerboot."""

from . import containers, health

__all__ = ["containers", "health"]
