from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    """Liveness check."""
    return {
        "status": "healthy",
        "version": request.app.version,
        "database": getattr(request.app.state, "storage", None) is not None,
    }
