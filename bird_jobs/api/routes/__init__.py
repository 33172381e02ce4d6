"""
API route modules.
"""

from bird_jobs.api.routes.birds import router as birds_router
from bird_jobs.api.routes.health import router as health_router

__all__ = ["birds_router", "health_router"]
