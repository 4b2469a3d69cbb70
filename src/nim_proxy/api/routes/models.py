"""Routes API pour la liste des modèles.

`/models` : endpoint OpenAI-compatible (object/list/data), une entrée
par modèle client de la table de mapping.
"""

import time
from typing import Any, Dict, List, Mapping

from fastapi import APIRouter, Request

from ...core.constants import MODEL_OWNER

router = APIRouter()


def _build_openai_models_list(model_map: Mapping[str, str], created: int) -> List[Dict[str, Any]]:
    return [
        {
            "id": model_key,
            "object": "model",
            "created": created,
            "owned_by": MODEL_OWNER,
        }
        for model_key in model_map
    ]


@router.get("/models")
async def openai_models(request: Request) -> Dict[str, Any]:
    """Endpoint OpenAI-compatible: GET /models."""
    model_map = request.app.state.settings.model_map
    return {
        "object": "list",
        "data": _build_openai_models_list(model_map, int(time.time())),
    }
