from .workflow import router as workflow_router
from .health import router as health_router

__all__ = ["workflow_router", "health_router"]
