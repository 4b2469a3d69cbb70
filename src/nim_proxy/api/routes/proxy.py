"""
Route proxy principale /chat/completions.
"""
import json
from typing import Any, Optional

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse, JSONResponse

from ...config.settings import Settings
from ...core.exceptions import InvalidRequestError
from ...core.models import ChatRequest
from ...proxy.client import ProxyClient
from ...proxy.errors import map_error
from ...proxy.router import resolve_model
from ...proxy.stream import StreamTranscoder, stream_generator
from ...proxy.transformers import build_backend_request, reshape_response

router = APIRouter()

# Pourquoi ces headers: certains clients ont besoin de ces headers SSE
STREAMING_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no"  # Désactive buffering nginx
}


def _error_response(error: BaseException, client_model: Optional[str]) -> JSONResponse:
    status_code, content = map_error(error, client_model)
    print(f"❌ [ERROR] Proxy error: {status_code} {content['error']['message'][:300]}")
    print(f"❌ [ERROR] Modèle demandé: {client_model}")
    return JSONResponse(content=content, status_code=status_code)


def _reject_constant(name: str) -> Any:
    # NaN, Infinity, -Infinity: hors JSON standard
    raise InvalidRequestError(f"Constante JSON non supportée: {name}")


def _parse_chat_request(body: bytes) -> ChatRequest:
    try:
        body_json: Any = json.loads(body, parse_constant=_reject_constant)
    except ValueError as e:
        raise InvalidRequestError(f"Body JSON invalide: {e}") from e
    return ChatRequest.from_dict(body_json)


def _requested_model(body: bytes) -> Optional[str]:
    """Modèle demandé, même si le reste du body est invalide."""
    try:
        body_json = json.loads(body)
    except ValueError:
        return None
    if isinstance(body_json, dict) and isinstance(body_json.get("model"), str):
        return body_json["model"]
    return None


@router.post("/chat/completions")
async def proxy_chat(request: Request):
    """
    Proxy vers l'API NVIDIA NIM avec:
    - Mapping du modèle client vers le modèle NIM
    - Valeurs par défaut (temperature, max_tokens)
    - Streaming SSE transcodé (filtrage optionnel du raisonnement)
    - Réponse non-streaming au format OpenAI
    """
    settings: Settings = request.app.state.settings
    proxy_client: ProxyClient = request.app.state.proxy_client

    body = await request.body()
    try:
        inbound = _parse_chat_request(body)
    except InvalidRequestError as e:
        return _error_response(e, _requested_model(body))

    backend_model = resolve_model(inbound.model, settings.model_map)
    backend_request = build_backend_request(inbound, backend_model, settings)

    timeout_label = "illimité" if backend_request.timeout is None else f"{backend_request.timeout:.0f}s"
    print(
        f"📤 [REQUEST] Modèle demandé: {inbound.model} → NIM: {backend_model} "
        f"(stream={backend_request.stream}, timeout={timeout_label})"
    )

    if backend_request.stream:
        try:
            req = proxy_client.build_request(backend_request)
            response = await proxy_client.send_streaming(req)
        except Exception as e:
            return _error_response(e, inbound.model)

        transcoder = StreamTranscoder(
            suppress_reasoning=settings.suppress_reasoning,
            passthrough_non_data=settings.passthrough_non_data_lines
        )
        return StreamingResponse(
            stream_generator(
                response,
                transcoder,
                client_model=inbound.model,
                is_disconnected=request.is_disconnected
            ),
            status_code=200,
            headers=STREAMING_HEADERS,
            media_type="text/event-stream"
        )

    try:
        req = proxy_client.build_request(backend_request)
        response = await proxy_client.send(req)
        content = reshape_response(response.json(), inbound.model)
    except Exception as e:
        return _error_response(e, inbound.model)

    print(f"✅ [SUCCESS] Requête terminée pour {inbound.model}")
    return JSONResponse(content=content)
