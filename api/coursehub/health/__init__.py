"""Health check module."""

from coursehub.health.router import router


__all__ = ["router"]
