"""
Routes API pour le health check.
"""
from fastapi import APIRouter, Request

from ...core.constants import SERVICE_NAME

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Health check avec la configuration effective (clé API masquée)."""
    settings = request.app.state.settings
    public = settings.to_public_dict()

    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "total_models": public["total_models"],
        "backend": public["backend"],
        "api_key_configured": bool(settings.nim_api_key),
        "streaming_policy": public["streaming_policy"],
        "suppress_reasoning": public["suppress_reasoning"],
    }
