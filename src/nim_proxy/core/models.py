"""
Dataclasses métier pour NIM Proxy.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any

from .constants import REASONING_FIELD
from .exceptions import InvalidRequestError


@dataclass
class ChatRequest:
    """Requête /chat/completions telle qu'envoyée par le client OpenAI."""
    model: str
    messages: List[Dict[str, Any]]
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    stream: Optional[bool] = None

    @classmethod
    def from_dict(cls, data: Any) -> "ChatRequest":
        """
        Crée une requête depuis le body JSON décodé.

        Raises:
            InvalidRequestError: Si le body n'est pas un objet ou si
                `model`/`messages` sont absents
        """
        if not isinstance(data, dict):
            raise InvalidRequestError("Le body doit être un objet JSON")

        model = data.get("model")
        if not isinstance(model, str) or not model:
            raise InvalidRequestError("Champ 'model' requis", field="model")

        messages = data.get("messages")
        if not isinstance(messages, list):
            raise InvalidRequestError("Champ 'messages' requis (liste)", field="messages")

        return cls(
            model=model,
            messages=messages,
            temperature=data.get("temperature"),
            max_tokens=data.get("max_tokens"),
            stream=data.get("stream")
        )


@dataclass
class BackendRequest:
    """Requête envoyée au backend NIM."""
    model: str
    messages: List[Dict[str, Any]]
    temperature: float
    max_tokens: int
    stream: bool
    # None = pas de timeout
    timeout: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Body JSON de la requête (le timeout reste hors body)."""
        return {
            "model": self.model,
            "messages": self.messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "stream": self.stream
        }


@dataclass
class ChoiceDelta:
    """
    Vue typée de `choices[0].delta` d'un chunk streaming.

    `reasoning_content` vaut None quand le champ est absent (ou null);
    une chaîne vide est un état distinct: le champ est présent.
    """
    role: Optional[str] = None
    content: Optional[str] = None
    reasoning_content: Optional[str] = None

    @property
    def has_reasoning(self) -> bool:
        return self.reasoning_content is not None

    @classmethod
    def from_chunk(cls, chunk: Any) -> Optional["ChoiceDelta"]:
        """Extrait le delta du premier choix, ou None si le chunk n'en a pas."""
        if not isinstance(chunk, dict):
            return None
        choices = chunk.get("choices")
        if not isinstance(choices, list) or not choices:
            return None
        first = choices[0]
        if not isinstance(first, dict):
            return None
        delta = first.get("delta")
        if not isinstance(delta, dict):
            return None
        return cls(
            role=delta.get("role"),
            content=delta.get("content"),
            reasoning_content=delta.get(REASONING_FIELD)
        )


USAGE_COUNTERS = ("prompt_tokens", "completion_tokens", "total_tokens")


@dataclass
class Usage:
    """Compteurs de tokens d'une réponse."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    # Autres champs du backend (completion_tokens_details, ...), relayés tels quels
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Usage":
        """Crée les compteurs depuis le bloc `usage` du backend (absent = zéros)."""
        if not isinstance(data, dict):
            return cls()
        return cls(
            prompt_tokens=data.get("prompt_tokens") or 0,
            completion_tokens=data.get("completion_tokens") or 0,
            total_tokens=data.get("total_tokens") or 0,
            extra={k: v for k, v in data.items() if k not in USAGE_COUNTERS}
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.extra,
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens
        }


@dataclass
class ErrorEnvelope:
    """Enveloppe d'erreur renvoyée au client."""
    message: str
    type: str
    code: int
    model_attempted: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convertit l'enveloppe en dictionnaire (`model_attempted` omis si inconnu)."""
        error: Dict[str, Any] = {
            "message": self.message,
            "type": self.type,
            "code": self.code,
        }
        if self.model_attempted is not None:
            error["model_attempted"] = self.model_attempted
        return {"error": error}
