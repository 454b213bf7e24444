from .imports import router as imports_router
from .search import router as search_router

ROUTERS = (search_router, imports_router)

__all__ = [
    "ROUTERS",
    "imports_router",
    "search_router",
]
