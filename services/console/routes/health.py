"""
Health check endpoints.

/health/fast has no imports from our codebase so it answers even when
configuration is broken.
"""
from fastapi import APIRouter
from fastapi.responses import JSONResponse

router = APIRouter(tags=["health"])


@router.get("/health/fast")
async def fast_health():
    """Minimal liveness check - always returns 200."""
    return JSONResponse(content={"ok": True}, status_code=200)


@router.get("/health")
async def health_check():
    """Full health check with configuration and workflow status."""
    from datetime import datetime, timezone
    try:
        from ..config import get_config
        from ..orchestrator import get_orchestrator
        config = get_config()
        orchestrator = get_orchestrator()
        return {
            "status": "healthy" if config.backend_configured or config.use_simulation else "degraded",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": "tailor-console",
            "backend_configured": config.backend_configured,
            "backend_url": config.backend_url,
            "simulation": config.use_simulation,
            "workflow_busy": orchestrator.busy,
        }
    except Exception as e:
        return {
            "status": "degraded",
            "error": str(e),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
