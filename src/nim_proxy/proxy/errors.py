"""
Conversion des erreurs backend en enveloppe d'erreur OpenAI.
"""
from typing import Any, Dict, Optional, Tuple

import httpx

from ..core.constants import ERROR_MESSAGE_PREFIX, ERROR_TYPE_INVALID_REQUEST
from ..core.exceptions import InvalidRequestError, UpstreamHTTPError
from ..core.models import ErrorEnvelope


def _describe(error: BaseException) -> str:
    text = str(error)
    if text:
        return text
    # Certaines exceptions httpx (timeouts) n'ont pas de message
    return type(error).__name__


def map_error(error: BaseException, client_model: Optional[str]) -> Tuple[int, Dict[str, Any]]:
    """
    Convertit un échec en (status HTTP, enveloppe d'erreur).

    - UpstreamHTTPError: statut du backend, message `detail` du backend
      si présent
    - InvalidRequestError: 400
    - Timeout, erreur de connexion, JSON invalide, autre: 500

    Ne lève jamais d'exception: c'est le dernier maillon du chemin d'erreur.

    Args:
        error: Exception capturée
        client_model: Modèle demandé par le client (jamais le modèle résolu)

    Returns:
        Tuple (status_code, body JSON)
    """
    prefix = ERROR_MESSAGE_PREFIX
    try:
        if isinstance(error, UpstreamHTTPError):
            status_code = error.status_code
            message = error.detail() or _describe(error)
        elif isinstance(error, InvalidRequestError):
            status_code = 400
            prefix = ""
            message = error.message
        elif isinstance(error, httpx.TimeoutException):
            status_code = 500
            message = f"timeout du backend ({_describe(error)})"
        else:
            status_code = 500
            message = _describe(error)
    except Exception as e:
        status_code = 500
        message = f"{type(error).__name__} ({type(e).__name__} lors du formatage)"

    envelope = ErrorEnvelope(
        message=f"{prefix}{message}",
        type=ERROR_TYPE_INVALID_REQUEST,
        code=status_code,
        model_attempted=client_model
    )
    return status_code, envelope.to_dict()


def not_found_envelope(path: str) -> Dict[str, Any]:
    """Enveloppe 404 pour un endpoint inconnu."""
    return ErrorEnvelope(
        message=f"Endpoint {path} not found",
        type=ERROR_TYPE_INVALID_REQUEST,
        code=404
    ).to_dict()
