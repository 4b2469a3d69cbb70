"""
NIM Proxy - Application FastAPI Factory.
Proxy OpenAI → NVIDIA NIM avec streaming SSE transcodé.
"""
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .api.router import api_router
from .config.loader import load_settings
from .config.settings import Settings
from .core.constants import SERVICE_NAME
from .proxy.client import ProxyClient, create_proxy_client
from .proxy.errors import not_found_envelope

LOG_LEVEL_ENV_VAR = "NIM_PROXY_LOG_LEVEL"


def configure_logging(level: str = None) -> None:
    """Configure le logging racine (niveau via NIM_PROXY_LOG_LEVEL)."""
    level_name = (level or os.environ.get(LOG_LEVEL_ENV_VAR, "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s"
    )


def create_app(
    settings: Optional[Settings] = None,
    proxy_client: Optional[ProxyClient] = None
) -> FastAPI:
    """
    Factory pour créer l'application FastAPI.

    Args:
        settings: Configuration (défaut: config.toml + environnement)
        proxy_client: Client backend (défaut: construit depuis settings)

    Returns:
        Instance configurée de FastAPI
    """
    if settings is None:
        settings = load_settings()
    if proxy_client is None:
        proxy_client = create_proxy_client(
            base_url=settings.nim_api_base,
            api_key=settings.nim_api_key,
            timeout=settings.request_timeout
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Gestion du cycle de vie de l'application."""
        # Startup
        _startup(app)
        yield
        # Shutdown
        await _shutdown(app)

    app = FastAPI(
        title="NIM Proxy",
        description="Proxy OpenAI-compatible vers l'API NVIDIA NIM",
        version=__version__,
        lifespan=lifespan
    )

    # Configuration immuable partagée par toutes les requêtes
    app.state.settings = settings
    app.state.proxy_client = proxy_client

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Inclusion des routes API
    app.include_router(api_router)

    # Endpoint ou méthode inconnus → 404 au format OpenAI
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code in (404, 405):
            return JSONResponse(content=not_found_envelope(request.url.path), status_code=404)
        return JSONResponse(content={"detail": exc.detail}, status_code=exc.status_code)

    return app


def _startup(app: FastAPI):
    """Initialisation au démarrage."""
    configure_logging()
    settings: Settings = app.state.settings
    public = settings.to_public_dict()

    print("========================================")
    print(SERVICE_NAME)
    print(f"Backend: {public['backend']}")
    print(f"Modèles: {public['total_models']} disponibles")
    print(f"Streaming: {public['streaming_policy']}, raisonnement filtré: {public['suppress_reasoning']}")
    print("========================================")

    if not settings.nim_api_key:
        print("⚠️ ATTENTION: Aucune clé API NIM configurée (NIM_API_KEY)")

    app.state.proxy_client.open()


async def _shutdown(app: FastAPI):
    """Arrêt de l'application."""
    print("\n👋 Arrêt du serveur...")

    await app.state.proxy_client.aclose()

    print("✅ Serveur arrêté proprement")


# Crée l'application pour uvicorn
app = create_app()
