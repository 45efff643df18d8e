"""Health check endpoint. Reports which variable store backs the slots."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> dict:
    state = request.app.state
    refresher = getattr(state, "refresher", None)
    return {
        "success": True,
        "data": {
            "status": "healthy" if refresher is not None else "degraded",
            "version": state.settings.app_version,
            "variableStore": "redis" if getattr(state, "redis", None) else "memory",
        },
        "requestId": request.state.request_id,
    }
