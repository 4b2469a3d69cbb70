"""
Transformations de format entre l'API OpenAI et l'API NVIDIA NIM.
"""
import time
from typing import Dict, Any, List, Optional

from ..core.models import ChatRequest, BackendRequest, Usage
from ..config.settings import Settings, StreamingPolicy


def resolve_streaming(inbound: ChatRequest, policy: StreamingPolicy) -> bool:
    """
    Décide du mode streaming effectif (amont et aval).

    Args:
        inbound: Requête client
        policy: CLIENT_CONTROLLED respecte `stream` (absent = False),
            FORCE_ON streame toujours

    Returns:
        True si la réponse doit être streamée
    """
    if policy is StreamingPolicy.FORCE_ON:
        return True
    return inbound.stream is True


def resolve_timeout(backend_model: str, settings: Settings) -> Optional[float]:
    """Timeout de l'appel backend: None pour les modèles sans limite de latence."""
    if settings.is_unbounded_latency_model(backend_model):
        return None
    return settings.request_timeout


def build_backend_request(
    inbound: ChatRequest,
    backend_model: str,
    settings: Settings
) -> BackendRequest:
    """
    Construit la requête NIM depuis la requête OpenAI.

    Les messages sont copiés tels quels (ordre et contenu préservés).
    Seuls `temperature` et `max_tokens` reçoivent une valeur par défaut
    quand ils sont absents; une valeur explicite à 0 est conservée.

    Args:
        inbound: Requête client
        backend_model: Modèle NIM résolu
        settings: Configuration (valeurs par défaut, politiques)

    Returns:
        Requête backend avec son timeout
    """
    temperature = inbound.temperature
    if temperature is None:
        temperature = settings.default_temperature

    max_tokens = inbound.max_tokens
    if max_tokens is None:
        max_tokens = settings.default_max_tokens

    return BackendRequest(
        model=backend_model,
        messages=list(inbound.messages),
        temperature=temperature,
        max_tokens=max_tokens,
        stream=resolve_streaming(inbound, settings.streaming_policy),
        timeout=resolve_timeout(backend_model, settings)
    )


def _reshape_choice(choice: Dict[str, Any], position: int) -> Dict[str, Any]:
    message = choice.get("message") or {}
    index = choice.get("index")
    return {
        "index": index if index is not None else position,
        "message": {
            "role": message.get("role") or "assistant",
            "content": message.get("content") or ""
        },
        "finish_reason": choice.get("finish_reason")
    }


def reshape_response(
    backend_response: Dict[str, Any],
    client_model: str
) -> Dict[str, Any]:
    """
    Convertit une réponse NIM non-streaming au format OpenAI.

    L'identifiant et la date de création sont générés localement, le
    modèle rapporté est celui demandé par le client (pas l'identifiant NIM).

    Args:
        backend_response: Réponse JSON du backend
        client_model: Nom du modèle demandé par le client

    Returns:
        Réponse au format chat.completion
    """
    now = time.time()
    choices: List[Dict[str, Any]] = backend_response.get("choices") or []

    return {
        "id": f"chatcmpl-{int(now * 1000)}",
        "object": "chat.completion",
        "created": int(now),
        "model": client_model,
        "choices": [
            _reshape_choice(choice, position)
            for position, choice in enumerate(choices)
            if isinstance(choice, dict)
        ],
        "usage": Usage.from_dict(backend_response.get("usage")).to_dict()
    }
