"""
Routing des modèles client vers les modèles NIM.
"""
from typing import Mapping
import logging

from ..core.constants import CHAT_COMPLETIONS_PATH

logger = logging.getLogger(__name__)


def resolve_model(
    client_model: str,
    model_map: Mapping[str, str]
) -> str:
    """
    Mappe le nom du modèle client vers l'identifiant NIM.

    Un modèle absent de la table est transmis tel quel: cela permet
    d'utiliser directement un identifiant NIM natif.

    Args:
        client_model: Nom du modèle envoyé par le client
        model_map: Table client → backend

    Returns:
        Identifiant du modèle pour l'API NIM
    """
    backend_model = model_map.get(client_model)
    if backend_model is not None:
        logger.debug(f"Clé exacte trouvée: {client_model} → {backend_model}")
        return backend_model

    logger.debug(f"Aucun mapping pour '{client_model}', transmis tel quel")
    return client_model


def get_chat_completions_url(base_url: str) -> str:
    """
    Construit l'URL chat/completions du backend.

    Accepte une base avec ou sans suffixe `/v1`.
    """
    base = base_url.rstrip("/")
    if base.endswith("/v1"):
        return base + CHAT_COMPLETIONS_PATH[len("/v1"):]
    return base + CHAT_COMPLETIONS_PATH
