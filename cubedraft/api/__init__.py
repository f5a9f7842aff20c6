from cubedraft.api.draft import router as draft_router
from cubedraft.api.health import router as health_router
from cubedraft.api.images import router as images_router

__all__ = [
    "draft_router",
    "health_router",
    "images_router",
]
