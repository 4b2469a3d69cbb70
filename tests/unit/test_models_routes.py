"""
Test unitaire pour les routes modèles et health.
"""
from fastapi import FastAPI
from fastapi.testclient import TestClient

from nim_proxy.api.routes import health as health_routes
from nim_proxy.api.routes import models as models_routes
from nim_proxy.config.settings import Settings


def _make_app(settings: Settings) -> FastAPI:
    app = FastAPI()
    app.state.settings = settings
    app.include_router(models_routes.router)
    app.include_router(health_routes.router)
    return app


def test_openai_models_endpoint_lists_client_models():
    """Une entrée par modèle client, au format OpenAI."""
    settings = Settings.from_config({"models": {"mon-alias": "meta/llama-3.1-8b-instruct"}})
    client = TestClient(_make_app(settings))

    response = client.get("/models")
    assert response.status_code == 200

    data = response.json()
    assert data["object"] == "list"
    model_ids = [m["id"] for m in data["data"]]
    assert model_ids == list(settings.model_map)
    assert "mon-alias" in model_ids
    # Les identifiants NIM ne sont pas exposés
    assert "meta/llama-3.1-8b-instruct" not in model_ids

    for model in data["data"]:
        assert model["object"] == "model"
        assert model["owned_by"] == "nvidia-nim-proxy"
        assert isinstance(model["created"], int)


def test_models_list_shares_created_timestamp():
    entries = models_routes._build_openai_models_list({"a": "x", "b": "y"}, created=1700000000)
    assert entries == [
        {"id": "a", "object": "model", "created": 1700000000, "owned_by": "nvidia-nim-proxy"},
        {"id": "b", "object": "model", "created": 1700000000, "owned_by": "nvidia-nim-proxy"},
    ]


def test_health_endpoint():
    settings = Settings(nim_api_key="nvapi-secret-abcdef", suppress_reasoning=True)
    client = TestClient(_make_app(settings))

    data = client.get("/health").json()

    assert data["status"] == "ok"
    assert data["total_models"] == len(settings.model_map)
    assert data["api_key_configured"] is True
    assert data["streaming_policy"] == "client"
    assert data["suppress_reasoning"] is True
    assert "nvapi-secret-abcdef" not in str(data)


def test_health_without_api_key():
    data = TestClient(_make_app(Settings())).get("/health").json()
    assert data["api_key_configured"] is False
