"""
Router principal de l'API.
"""
from fastapi import APIRouter

from .routes import (
    proxy,
    models,
    health,
)

# Router principal
api_router = APIRouter()

api_router.include_router(health.router, prefix="", tags=["health"])

# === API OPENAI-COMPATIBLE ===
# Montée à la racine et sous /v1 (base_url des clients OpenAI)
for _prefix in ("", "/v1"):
    api_router.include_router(models.router, prefix=_prefix, tags=["models-openai"])
    api_router.include_router(proxy.router, prefix=_prefix, tags=["proxy"])
