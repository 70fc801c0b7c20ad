from .connection import router as connection_router
from .health import router as health_router
from .query import router as query_router

__all__ = ["connection_router", "health_router", "query_router"]
